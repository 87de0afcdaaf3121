from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_MAX_TICKS, SchedulerConfig
from .engine import simulate
from .errors import SimulationIncompleteError, WorkloadError
from .gantt import build_rich_gantt, render_gantt
from .metrics import summarize_process_metrics
from .models import SimulationResult
from .workload_io import default_output_path, load_workload, write_results

logger = logging.getLogger("mlq_scheduler")

EXIT_OK = 0
EXIT_WORKLOAD_ERROR = 1
EXIT_INCOMPLETE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mlq-scheduler",
        description="Multilevel-queue CPU scheduling simulator (Q1=RR(1), Q2=RR(3), Q3=SJF).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log scheduling events (-v for preemptions/completions, -vv for every dispatch).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate a workload file and write the result table.")
    run_parser.add_argument("workload", help="Path to a label;BT;AT;Q;Pr record file (or .json/.csv).")
    run_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Where to write results (default: output_<workload name> beside the workload).",
    )
    run_parser.add_argument(
        "--max-ticks",
        type=int,
        default=DEFAULT_MAX_TICKS,
        help=f"Abort the simulation after this many ticks (default: {DEFAULT_MAX_TICKS}).",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the schedule tick by tick in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text (queue-level digits) instead of colored blocks.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Simulate several workloads and compare their average metrics.",
    )
    compare_parser.add_argument("workloads", nargs="+", help="Workload files to compare.")
    compare_parser.add_argument(
        "--max-ticks",
        type=int,
        default=DEFAULT_MAX_TICKS,
        help=f"Tick ceiling for each simulation (default: {DEFAULT_MAX_TICKS}).",
    )

    return parser


def configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger.handlers.clear()
    handler = RichHandler(show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)


def _print_result(result: SimulationResult, console: Console, plain: bool = False) -> None:
    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = ["Label", "Burst", "Arrive", "Queue", "Priority", "Wait", "Complete", "Response", "Turnaround"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Label", "Queue", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.sorted_processes():
        proc_table.add_row(
            p.pid,
            str(p.burst_time),
            str(p.arrival_time),
            str(p.queue_level),
            str(p.priority),
            str(p.waiting_time),
            str(p.completion_time),
            str(p.response_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.1f}")
    sys_table.add_row("Avg completion", f"{summary['avg_completion']:.1f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.1f}")
    sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.1f}")
    if result.system:
        sys = result.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Throughput (proc/tick)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        for level, wait in sys.longest_wait_by_level.items():
            sys_table.add_row(f"Longest wait in Q{level}", str(wait))

    console.print(sys_table)


def _animate_result(result: SimulationResult, delay: float, console: Console) -> None:
    """
    Replay the computed timeline one tick at a time.
    """
    timeline = sorted(result.timeline, key=lambda s: (s.start_time, s.end_time))
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    makespan = max(s.end_time for s in timeline)
    console.print(f"[bold]Replaying MLQ schedule[/bold] (duration {makespan} ticks)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(makespan):
        running = None
        for sl in timeline:
            if sl.start_time <= t < sl.end_time:
                running = sl
                break
        if running is None:
            console.print(f"t={t:3d}: [dim]idle[/dim]")
        else:
            bar = "#" * (t - running.start_time + 1)
            console.print(f"t={t:3d}: {running.pid} (Q{running.level}) [green]{bar}[/green]")
        time.sleep(delay)


def _simulate_file(workload_path: Path, max_ticks: int) -> SimulationResult:
    processes = load_workload(workload_path)
    return simulate(processes, SchedulerConfig(max_ticks=max_ticks))


def _run(args: argparse.Namespace, console: Console) -> int:
    workload_path = Path(args.workload)
    output_path = Path(args.output) if args.output else default_output_path(workload_path)

    status = EXIT_OK
    try:
        result = _simulate_file(workload_path, args.max_ticks)
    except SimulationIncompleteError as exc:
        console.print(f"[red]{exc}[/red]")
        result = exc.result
        status = EXIT_INCOMPLETE

    if args.step:
        try:
            _animate_result(result, delay=args.step_delay, console=console)
        except KeyboardInterrupt:
            console.print("[yellow]Animation skipped.[/yellow]")

    _print_result(result, console, plain=args.plain)
    write_results(output_path, result, workload_path.name)
    console.print(f"Results written to [green]{output_path}[/green]")
    return status


def _compare(args: argparse.Namespace, console: Console) -> int:
    summary_table = Table(title="Workload comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Workload")
    summary_table.add_column("Processes", justify="right")
    summary_table.add_column("Ticks", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg completion", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")

    status = EXIT_OK
    for name in args.workloads:
        path = Path(name)
        try:
            result = _simulate_file(path, args.max_ticks)
        except SimulationIncompleteError as exc:
            result = exc.result
            status = EXIT_INCOMPLETE
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            path.name if result.complete else f"{path.name} (incomplete)",
            str(len(result.processes)),
            str(result.final_tick),
            f"{summary['avg_waiting']:.1f}",
            f"{summary['avg_completion']:.1f}",
            f"{summary['avg_response']:.1f}",
            f"{summary['avg_turnaround']:.1f}",
        )

    console.print(summary_table)
    return status


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    console = Console()

    if args.max_ticks <= 0:
        parser.error("--max-ticks must be positive")

    try:
        if args.command == "run":
            return _run(args, console)
        if args.command == "compare":
            return _compare(args, console)
    except WorkloadError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return EXIT_WORKLOAD_ERROR

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
