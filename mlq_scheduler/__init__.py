"""
MLQ scheduler package.

Simulates a preemptive three-level multilevel-queue CPU scheduler over
discrete ticks and reports per-process timing metrics.
"""

__all__ = ["cli", "engine", "models", "queues"]
