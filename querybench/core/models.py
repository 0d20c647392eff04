"""Data models for benchmark runs."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any, Hashable

from .errors import ConfigurationError

# Histogram key under which failed operations are counted
ERROR_KEY = "error"


@dataclass(frozen=True)
class BenchmarkConfig:
    """Configuration for a benchmark run."""

    # Target dispatch rate in operations/second (inf = unrestricted)
    rate: float = 10.0
    # Maximum number of operations in flight
    concurrency: int = 1
    # Phase sizes
    warmup_count: int = 10
    measured_count: int = 100

    def __post_init__(self):
        if isinstance(self.rate, bool) or not isinstance(self.rate, (int, float)):
            raise ConfigurationError(f"rate must be a number, got {self.rate!r}")
        if math.isnan(self.rate) or self.rate <= 0:
            raise ConfigurationError(f"rate must be > 0 operations/second, got {self.rate}")
        for name, minimum in (("concurrency", 1), ("warmup_count", 0), ("measured_count", 0)):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < minimum:
                raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")

    @property
    def is_sequential(self) -> bool:
        """Check if this config allows only one operation in flight."""
        return self.concurrency == 1

    @property
    def is_unrestricted(self) -> bool:
        """Check if dispatch is limited only by concurrency."""
        return math.isinf(self.rate)


@dataclass(frozen=True)
class Sample:
    """Timing and outcome of one dispatched operation."""

    index: int
    # Seconds since the start of the phase the operation was issued in
    issued_at: float
    # Seconds from invocation to completion
    duration: float
    outcome: Optional[Hashable] = None
    error: Optional[BaseException] = field(default=None, compare=False)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def key(self) -> Hashable:
        """Histogram classification key."""
        return ERROR_KEY if self.failed else self.outcome

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return describe_error(self.error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "issued_at_s": self.issued_at,
            "duration_ms": self.duration_ms,
            "outcome": self.key,
            "success": not self.failed,
            "error_message": self.error_message,
        }


def describe_error(error: BaseException) -> str:
    """One-line description of an operation failure."""
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


@dataclass
class PhaseResult:
    """Aggregates for one warmup or measurement phase."""

    name: str
    dispatched: int
    duration_seconds: float
    sorted_durations: List[float] = field(default_factory=list, repr=False)
    histogram: Dict[Hashable, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list, repr=False)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def error_rate(self) -> float:
        """Failed operations as a percentage of dispatched ones."""
        if self.dispatched == 0:
            return 0.0
        return self.error_count / self.dispatched * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "dispatched": self.dispatched,
            "duration_seconds": self.duration_seconds,
            "histogram": {str(k): v for k, v in self.histogram.items()},
            "error_count": self.error_count,
        }


@dataclass
class BenchmarkResult:
    """Results of a full warmup + measurement run."""

    config: BenchmarkConfig
    warmup: PhaseResult
    measured: PhaseResult

    # Timing metadata
    start_timestamp: Optional[datetime] = None
    end_timestamp: Optional[datetime] = None

    @property
    def samples(self) -> List[Sample]:
        return self.measured.samples

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rate": self.config.rate,
            "concurrency": self.config.concurrency,
            "warmup_count": self.config.warmup_count,
            "measured_count": self.config.measured_count,
            "warmup": self.warmup.to_dict(),
            "measured": self.measured.to_dict(),
            "start_timestamp": self.start_timestamp.isoformat() if self.start_timestamp else None,
            "end_timestamp": self.end_timestamp.isoformat() if self.end_timestamp else None,
        }
