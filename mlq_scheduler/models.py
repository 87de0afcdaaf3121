from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import InvariantViolationError


@dataclass(eq=False)
class Process:
    """
    A schedulable process: static attributes from the workload plus the
    mutable state the engine updates tick by tick.

    Identity is the ``pid`` alone.
    """

    pid: str
    burst_time: int
    arrival_time: int
    queue_level: int
    priority: int = 0

    remaining_time: int = field(init=False)
    first_run_time: Optional[int] = field(default=None, init=False)

    # Filled in by finish()
    completion_time: Optional[int] = field(default=None, init=False)
    turnaround_time: Optional[int] = field(default=None, init=False)
    waiting_time: Optional[int] = field(default=None, init=False)
    response_time: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Process):
            return NotImplemented
        return self.pid == other.pid

    def __hash__(self) -> int:
        return hash(self.pid)

    def advance_one_tick(self) -> None:
        if self.remaining_time > 0:
            self.remaining_time -= 1

    def record_first_run(self, tick: int) -> None:
        """Remember the first dispatch tick; later calls are ignored."""
        if self.first_run_time is None:
            self.first_run_time = tick

    def is_complete(self) -> bool:
        return self.remaining_time == 0

    def finish(self, tick: int) -> None:
        """
        Mark the process completed at ``tick`` and derive its metrics.

        Raises InvariantViolationError if the process would complete
        before it arrived; no metric is touched in that case.
        """
        if tick < self.arrival_time:
            raise InvariantViolationError(
                f"Process {self.pid} cannot complete at t={tick} before arriving at t={self.arrival_time}"
            )

        self.completion_time = tick
        self.turnaround_time = tick - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time
        if self.first_run_time is None:
            self.response_time = 0
        else:
            self.response_time = self.first_run_time - self.arrival_time

    def copy(self) -> "Process":
        """Fresh, unscheduled copy with the same static attributes."""
        return Process(
            pid=self.pid,
            burst_time=self.burst_time,
            arrival_time=self.arrival_time,
            queue_level=self.queue_level,
            priority=self.priority,
        )


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int
    level: int = 0


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    longest_wait_by_level: Dict[int, int] = field(default_factory=dict)


@dataclass
class SimulationResult:
    processes: List[Process] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    total_processes: int = 0
    final_tick: int = 0
    complete: bool = True
    system: Optional[SystemMetrics] = None

    def sorted_processes(self) -> List[Process]:
        return sorted(self.processes, key=lambda p: p.pid)
