from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from .errors import WorkloadError
from .metrics import summarize_process_metrics
from .models import Process, SimulationResult
from .queues import LEVELS

logger = logging.getLogger(__name__)

RECORD_FIELDS = 5
RESULT_HEADER = "# label; BT; AT; Q; Pr; WT; CT; RT; TAT"


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload into a list of Process objects.

    ``.json`` and ``.csv`` files are read as structured data; anything else
    is read as ``label;BT;AT;Q;Pr`` records, one per line. Malformed records
    are logged and skipped.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            return _load_json(path)
        if suffix == ".csv":
            return _load_csv(path)
        return _load_records(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise WorkloadError(f"Cannot read workload {path}: {exc}") from exc


def parse_records(lines: Iterable[str], source: str = "<records>") -> List[Process]:
    processes: List[Process] = []
    seen: set[str] = set()

    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        fields = [f.strip() for f in stripped.split(";")]
        if fields and fields[-1] == "":
            fields.pop()
        if len(fields) != RECORD_FIELDS:
            logger.warning(
                "%s:%d: expected %d fields, got %d; skipping %r", source, lineno, RECORD_FIELDS, len(fields), stripped
            )
            continue

        label, burst, arrival, level, priority = fields
        try:
            process = _build_process(label, burst, arrival, level, priority)
        except ValueError as exc:
            logger.warning("%s:%d: %s; skipping %r", source, lineno, exc, stripped)
            continue

        if not _accept(process, seen, f"{source}:{lineno}"):
            continue
        processes.append(process)

    return processes


def _load_records(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        return parse_records(f, source=str(path))


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"Invalid JSON workload {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    return _from_mappings(raw, str(path))


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return _from_mappings(reader, str(path))


def _from_mappings(entries: Iterable, source: str) -> List[Process]:
    processes: List[Process] = []
    seen: set[str] = set()
    for idx, entry in enumerate(entries, start=1):
        try:
            process = _process_from_mapping(entry)
        except ValueError as exc:
            logger.warning("%s: entry %d: %s; skipping", source, idx, exc)
            continue
        if _accept(process, seen, f"{source}: entry {idx}"):
            processes.append(process)
    return processes


def _process_from_mapping(mapping: Mapping) -> Process:
    try:
        priority_val = mapping.get("priority")
        return _build_process(
            mapping["pid"],
            mapping["burst_time"],
            mapping["arrival_time"],
            mapping["queue_level"],
            0 if priority_val in (None, "") else priority_val,
        )
    except (AttributeError, KeyError, TypeError) as exc:
        raise ValueError(f"invalid process entry {mapping!r}") from exc


def _parse_int(value, name: str) -> int:
    """Accept real ints and integer strings only; floats and bools are rejected."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in ("+", "-") else text
        if digits.isdigit() and digits.isascii():
            return int(text)
    raise ValueError(f"{name} must be an integer, got {value!r}")


def _build_process(label, burst, arrival, level, priority) -> Process:
    label = str(label).strip()
    if not label:
        raise ValueError("empty label")
    if ";" in label:
        raise ValueError(f"label {label!r} contains ';'")

    burst_time = _parse_int(burst, "burst time")
    arrival_time = _parse_int(arrival, "arrival time")
    queue_level = _parse_int(level, "queue level")
    priority_val = _parse_int(priority, "priority")

    if burst_time < 0:
        raise ValueError(f"negative burst time {burst_time}")
    if arrival_time < 0:
        raise ValueError(f"negative arrival time {arrival_time}")
    if queue_level not in LEVELS:
        raise ValueError(f"queue level {queue_level} outside {LEVELS[0]}-{LEVELS[-1]}")

    return Process(
        pid=label,
        burst_time=burst_time,
        arrival_time=arrival_time,
        queue_level=queue_level,
        priority=priority_val,
    )


def _accept(process: Process, seen: set, where: str) -> bool:
    if process.pid in seen:
        logger.warning("%s: duplicate label %r; skipping", where, process.pid)
        return False
    seen.add(process.pid)
    return True


def format_results(result: SimulationResult, source_name: str) -> str:
    """
    Render the result table: one row per process sorted by label, then the
    means of WT, CT, RT and TAT to one decimal place.
    """
    processes = result.sorted_processes()
    lines: List[str] = [f"# file: {source_name}", RESULT_HEADER]

    for p in processes:
        lines.append(_format_row(p))

    summary = summarize_process_metrics(processes)
    lines.append("")
    lines.append(
        f"WT={summary['avg_waiting']:.1f}; CT={summary['avg_completion']:.1f}; "
        f"RT={summary['avg_response']:.1f}; TAT={summary['avg_turnaround']:.1f};"
    )

    if not result.complete:
        lines.append(
            f"# INCOMPLETE: aborted at t={result.final_tick}, "
            f"{len(processes)} of {result.total_processes} processes completed"
        )

    return "\n".join(lines) + "\n"


def _format_row(p: Process) -> str:
    values: Sequence[Optional[int]] = (
        p.burst_time,
        p.arrival_time,
        p.queue_level,
        p.priority,
        p.waiting_time,
        p.completion_time,
        p.response_time,
        p.turnaround_time,
    )
    return ";".join([p.pid] + [str(v) for v in values])


def write_results(path: str | Path, result: SimulationResult, source_name: str) -> Path:
    path = Path(path)
    path.write_text(format_results(result, source_name), encoding="utf-8")
    return path


def default_output_path(input_path: str | Path) -> Path:
    input_path = Path(input_path)
    return input_path.with_name(f"output_{input_path.name}")
