"""Core benchmarking components."""

from .admission import AdmissionController
from .collector import ResultCollector
from .errors import BenchmarkError, ConfigurationError, EmptySampleError, InvariantViolation
from .models import ERROR_KEY, BenchmarkConfig, BenchmarkResult, PhaseResult, Sample
from .pacer import Pacer
from .percentiles import REPORT_QUANTILES, quantile, quantile_ms
from .runner import BenchmarkRunner, Operation

__all__ = [
    "AdmissionController",
    "BenchmarkConfig",
    "BenchmarkError",
    "BenchmarkResult",
    "BenchmarkRunner",
    "ConfigurationError",
    "EmptySampleError",
    "ERROR_KEY",
    "InvariantViolation",
    "Operation",
    "Pacer",
    "PhaseResult",
    "REPORT_QUANTILES",
    "ResultCollector",
    "Sample",
    "quantile",
    "quantile_ms",
]
