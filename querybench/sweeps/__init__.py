"""Multi-run sweep orchestration."""

from .concurrency_sweep import ConcurrencySweep, SweepResult

__all__ = ["ConcurrencySweep", "SweepResult"]
