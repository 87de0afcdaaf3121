from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterable, List, Optional

from .config import SchedulerConfig
from .errors import SimulationIncompleteError
from .metrics import compute_system_metrics
from .models import Process, ScheduledSlice, SimulationResult
from .queues import LEVEL_DISCIPLINES, LEVELS, QueueDiscipline, ReadyQueueSet

logger = logging.getLogger(__name__)


class MLQEngine:
    """
    Tick-driven multilevel-queue scheduler.

    All simulation state lives on the instance, so independent engines can
    run side by side. Each call to :meth:`step` performs one tick:

    1. admit every pending process whose arrival tick has been reached
    2. preempt the running process if a higher-priority queue is non-empty
    3. dispatch from the highest non-empty queue if the CPU is idle
    4. execute one tick of work
    5. complete the process if its burst is exhausted
    6. otherwise re-queue it if its round-robin quantum ran out
    7. advance the clock

    The processes handed to the engine are mutated in place.
    """

    def __init__(self, processes: Iterable[Process], config: Optional[SchedulerConfig] = None) -> None:
        self.config = config or SchedulerConfig()
        self.processes: List[Process] = list(processes)
        _validate(self.processes)

        self.queues = ReadyQueueSet()
        # sorted() is stable, so equal arrivals keep their input order
        self.pending: Deque[Process] = deque(sorted(self.processes, key=lambda p: p.arrival_time))
        self.completed: List[Process] = []
        self.timeline: List[ScheduledSlice] = []

        self.current_tick = 0
        self.running: Optional[Process] = None
        self.quantum_remaining = 0

    def is_finished(self) -> bool:
        return len(self.completed) == len(self.processes)

    def run(self) -> SimulationResult:
        """
        Step until every process has completed.

        Raises SimulationIncompleteError, carrying the partial result, if the
        configured tick ceiling is reached first.
        """
        logger.debug("Starting simulation of %d processes", len(self.processes))
        while not self.is_finished():
            if self.current_tick >= self.config.max_ticks:
                result = self.result()
                message = (
                    f"Simulation aborted at t={self.current_tick}: "
                    f"{len(self.completed)} of {len(self.processes)} processes completed"
                )
                logger.error("%s", message)
                raise SimulationIncompleteError(message, result)
            self.step()

        logger.info("Simulation completed at t=%d", self.current_tick)
        return self.result()

    def step(self) -> Optional[Process]:
        """Run a single tick and return the process that executed, if any."""
        self._admit_arrivals()
        self._check_preemption()
        if self.running is None:
            self._dispatch()

        executed = self.running
        if executed is not None:
            executed.record_first_run(self.current_tick)
            executed.advance_one_tick()
            self.quantum_remaining -= 1
            self._record_slice(executed)

            if executed.is_complete():
                # Work done during tick t finishes at the end of that tick.
                self._complete(executed, self.current_tick + 1)
                self.running = None
                self.quantum_remaining = 0
            elif (
                self.quantum_remaining == 0
                and LEVEL_DISCIPLINES[executed.queue_level] is QueueDiscipline.ROUND_ROBIN
            ):
                logger.debug("t=%d: quantum expired for %s", self.current_tick, executed.pid)
                self.queues.enqueue(executed.queue_level, executed)
                self.running = None

        self.current_tick += 1
        return executed

    def result(self) -> SimulationResult:
        result = SimulationResult(
            processes=list(self.completed),
            timeline=list(self.timeline),
            total_processes=len(self.processes),
            final_tick=self.current_tick,
            complete=self.is_finished(),
        )
        compute_system_metrics(result)
        return result

    def _admit_arrivals(self) -> None:
        while self.pending and self.pending[0].arrival_time <= self.current_tick:
            process = self.pending.popleft()
            if process.is_complete():
                # Zero-burst work is done the moment it arrives.
                process.record_first_run(self.current_tick)
                self._complete(process, self.current_tick)
                continue
            logger.debug("t=%d: %s arrives in Q%d", self.current_tick, process.pid, process.queue_level)
            self.queues.enqueue(process.queue_level, process)

    def _check_preemption(self) -> None:
        current = self.running
        if current is None:
            return
        if self.queues.has_ready_above(current.queue_level):
            logger.info(
                "t=%d: %s (Q%d) preempted by Q%d",
                self.current_tick,
                current.pid,
                current.queue_level,
                self.queues.highest_ready_level(),
            )
            self.queues.enqueue(current.queue_level, current)
            self.running = None
            self.quantum_remaining = 0

    def _dispatch(self) -> None:
        level = self.queues.highest_ready_level()
        if level is None:
            return

        if LEVEL_DISCIPLINES[level] is QueueDiscipline.SHORTEST_JOB_FIRST:
            process = self.queues.dequeue_next(level)
            # Runs to completion unless preempted from above.
            self.quantum_remaining = process.remaining_time
        else:
            quantum = self.config.quantum_for(level)
            process = self.queues.dequeue_next(level)
            self.quantum_remaining = quantum
        self.running = process
        logger.debug(
            "t=%d: dispatch %s from Q%d (quantum %d, remaining %d)",
            self.current_tick,
            process.pid,
            level,
            self.quantum_remaining,
            process.remaining_time,
        )

    def _complete(self, process: Process, tick: int) -> None:
        process.finish(tick)
        self.completed.append(process)
        logger.info("t=%d: %s completed", tick, process.pid)

    def _record_slice(self, process: Process) -> None:
        last = self.timeline[-1] if self.timeline else None
        if last is not None and last.pid == process.pid and last.end_time == self.current_tick:
            last.end_time += 1
        else:
            self.timeline.append(
                ScheduledSlice(
                    pid=process.pid,
                    start_time=self.current_tick,
                    end_time=self.current_tick + 1,
                    level=process.queue_level,
                )
            )


def _validate(processes: List[Process]) -> None:
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise ValueError(f"Duplicate process identifier '{p.pid}'")
        seen.add(p.pid)
        if p.queue_level not in LEVELS:
            raise ValueError(f"Process {p.pid} has invalid queue level {p.queue_level}")
        if p.burst_time < 0 or p.arrival_time < 0:
            raise ValueError(f"Process {p.pid} has negative burst or arrival time")


def simulate(processes: Iterable[Process], config: Optional[SchedulerConfig] = None) -> SimulationResult:
    """
    Simulate fresh copies of ``processes`` so the caller's objects stay untouched.
    """
    engine = MLQEngine([p.copy() for p in processes], config=config)
    return engine.run()
