from __future__ import annotations

from typing import Dict, List

from .models import Process, SimulationResult, SystemMetrics


def longest_wait_by_level(processes: List[Process]) -> Dict[int, int]:
    """
    Worst waiting time seen in each queue level. Under fixed priorities the
    lower levels absorb all the delay, so Q3's entry is the starvation figure.
    """
    longest: Dict[int, int] = {}
    for p in processes:
        longest[p.queue_level] = max(longest.get(p.queue_level, 0), p.waiting_time)
    return dict(sorted(longest.items()))


def compute_system_metrics(result: SimulationResult) -> SystemMetrics:
    """
    Busy time, makespan, throughput and utilization of the simulated CPU.
    Idle ticks before an arrival count towards the makespan.
    """
    cpu_busy_time = sum(slice_.end_time - slice_.start_time for slice_ in result.timeline)
    makespan = max((p.completion_time for p in result.processes), default=0)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=len(result.processes) / makespan if makespan else 0.0,
        cpu_utilization=cpu_busy_time / makespan if makespan else 0.0,
        longest_wait_by_level=longest_wait_by_level(result.processes),
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[Process]) -> Dict[str, float]:
    """
    Arithmetic means of the reported per-process metrics.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_completion": 0.0, "avg_response": 0.0, "avg_turnaround": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_completion": sum(p.completion_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
    }
