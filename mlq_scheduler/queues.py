"""
Ready queues for the three scheduling levels.

Level 1 and level 2 are round-robin FIFOs (quantum 1 and 3 by default);
level 3 is shortest-job-first, keyed on the *original* burst time. A lower
level number means a higher priority.
"""

from __future__ import annotations

import heapq
import itertools
from collections import deque
from enum import Enum
from typing import Deque, Dict, Iterator, List, Optional, Tuple

from .models import Process

LEVELS: Tuple[int, ...] = (1, 2, 3)


class QueueDiscipline(Enum):
    ROUND_ROBIN = "rr"
    SHORTEST_JOB_FIRST = "sjf"


LEVEL_DISCIPLINES: Dict[int, QueueDiscipline] = {
    1: QueueDiscipline.ROUND_ROBIN,
    2: QueueDiscipline.ROUND_ROBIN,
    3: QueueDiscipline.SHORTEST_JOB_FIRST,
}


def _check_level(level: int) -> None:
    if level not in LEVELS:
        raise ValueError(f"Queue level must be one of {LEVELS}, got {level!r}")


class ReadyQueue:
    """
    A single ready queue whose ordering is fixed by its discipline.

    Shortest-job-first ties are broken by insertion order.
    """

    def __init__(self, discipline: QueueDiscipline) -> None:
        self.discipline = discipline
        self._fifo: Deque[Process] = deque()
        self._heap: List[Tuple[int, int, Process]] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        if self.discipline is QueueDiscipline.SHORTEST_JOB_FIRST:
            return len(self._heap)
        return len(self._fifo)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __contains__(self, process: object) -> bool:
        return any(p == process for p in self)

    def __iter__(self) -> Iterator[Process]:
        """Iterate in dequeue order without consuming the queue."""
        if self.discipline is QueueDiscipline.SHORTEST_JOB_FIRST:
            return iter([entry[2] for entry in sorted(self._heap)])
        return iter(list(self._fifo))

    def enqueue(self, process: Process) -> None:
        if self.discipline is QueueDiscipline.SHORTEST_JOB_FIRST:
            heapq.heappush(self._heap, (process.burst_time, next(self._counter), process))
        else:
            self._fifo.append(process)

    def dequeue_next(self) -> Optional[Process]:
        if not self:
            return None
        if self.discipline is QueueDiscipline.SHORTEST_JOB_FIRST:
            return heapq.heappop(self._heap)[2]
        return self._fifo.popleft()


class ReadyQueueSet:
    """The three ready queues, indexed by level 1..3."""

    def __init__(self) -> None:
        self._queues: Dict[int, ReadyQueue] = {
            level: ReadyQueue(LEVEL_DISCIPLINES[level]) for level in LEVELS
        }

    def __getitem__(self, level: int) -> ReadyQueue:
        _check_level(level)
        return self._queues[level]

    def __len__(self) -> int:
        return sum(len(q) for q in self._queues.values())

    def enqueue(self, level: int, process: Process) -> None:
        self[level].enqueue(process)

    def dequeue_next(self, level: int) -> Optional[Process]:
        return self[level].dequeue_next()

    def has_ready_above(self, level: int) -> bool:
        """True iff a queue with strictly higher priority (lower level number) is non-empty."""
        _check_level(level)
        return any(self._queues[higher] for higher in LEVELS if higher < level)

    def highest_ready_level(self) -> Optional[int]:
        for level in LEVELS:
            if self._queues[level]:
                return level
        return None

    def snapshot(self) -> Dict[int, List[str]]:
        return {level: [p.pid for p in self._queues[level]] for level in LEVELS}
