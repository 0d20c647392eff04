"""Rate-paced, concurrency-bounded latency benchmarking for remote queries."""

from .core import (
    ERROR_KEY,
    BenchmarkConfig,
    BenchmarkResult,
    BenchmarkRunner,
    ConfigurationError,
    InvariantViolation,
    Sample,
    quantile,
)
from .results import LatencyReport, build_report, format_report

__version__ = "0.1.0"

__all__ = [
    "ERROR_KEY",
    "BenchmarkConfig",
    "BenchmarkResult",
    "BenchmarkRunner",
    "ConfigurationError",
    "InvariantViolation",
    "LatencyReport",
    "Sample",
    "build_report",
    "format_report",
    "quantile",
]
