from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import SimulationResult


class MLQError(Exception):
    """Base class for scheduler errors."""


class InvariantViolationError(MLQError, RuntimeError):
    """A process state that the scheduling logic must never produce."""


class SimulationIncompleteError(MLQError, RuntimeError):
    """
    The tick ceiling was exceeded before every process completed.

    The partial result is attached so callers can still report it.
    """

    def __init__(self, message: str, result: "SimulationResult") -> None:
        super().__init__(message)
        self.result = result


class WorkloadError(MLQError, ValueError):
    """A workload file could not be read at all."""
