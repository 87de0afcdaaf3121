from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple, Union

ROUND_ROBIN_LEVELS: Tuple[int, ...] = (1, 2)
DEFAULT_QUANTA: Dict[int, int] = {1: 1, 2: 3}
DEFAULT_MAX_TICKS = 10_000


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Tunables for a simulation run.

    ``quanta`` gives the time quantum of each round-robin level and must
    cover exactly levels 1 and 2. It may be passed as a mapping and is
    stored as sorted ``(level, quantum)`` pairs. Level 3 is
    shortest-job-first and has no quantum of its own.
    """

    quanta: Union[Mapping[int, int], Tuple[Tuple[int, int], ...]] = tuple(sorted(DEFAULT_QUANTA.items()))
    max_ticks: int = DEFAULT_MAX_TICKS

    def __post_init__(self) -> None:
        pairs = tuple(sorted(dict(self.quanta).items()))
        object.__setattr__(self, "quanta", pairs)

        levels = tuple(level for level, _ in pairs)
        if levels != ROUND_ROBIN_LEVELS:
            raise ValueError(f"Quanta must be given for exactly levels {ROUND_ROBIN_LEVELS}, got {levels}")
        for level, quantum in pairs:
            if quantum <= 0:
                raise ValueError(f"Quantum for level {level} must be positive, got {quantum}")
        if self.max_ticks <= 0:
            raise ValueError(f"max_ticks must be positive, got {self.max_ticks}")

    def quantum_for(self, level: int) -> int:
        for configured, quantum in self.quanta:
            if configured == level:
                return quantum
        raise ValueError(f"No quantum configured for level {level}")
