"""Latency/throughput report building and formatting."""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

from ..core.models import ERROR_KEY, BenchmarkResult
from ..core.percentiles import REPORT_QUANTILES, quantile_ms


@dataclass
class LatencyReport:
    """Final figures of a measured phase. Latencies are in milliseconds."""

    measured_count: int
    concurrency: int
    rate: float
    duration_seconds: float
    throughput: float

    # None when no sample was recorded
    min_ms: Optional[float] = None
    max_ms: Optional[float] = None
    percentiles_ms: Dict[str, float] = field(default_factory=dict)

    histogram: Dict[Hashable, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    warmup_errors: List[str] = field(default_factory=list)

    @property
    def has_latencies(self) -> bool:
        return self.min_ms is not None

    @property
    def error_count(self) -> int:
        return self.histogram.get(ERROR_KEY, 0)

    @property
    def error_rate(self) -> float:
        if self.measured_count == 0:
            return 0.0
        return self.error_count / self.measured_count * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "measured_count": self.measured_count,
            "concurrency": self.concurrency,
            "rate": self.rate,
            "duration_seconds": self.duration_seconds,
            "throughput": self.throughput,
            "min_ms": self.min_ms,
            "max_ms": self.max_ms,
            "percentiles_ms": dict(self.percentiles_ms),
            "histogram": {str(k): v for k, v in self.histogram.items()},
            "error_count": self.error_count,
            "errors": list(self.errors),
            "warmup_errors": list(self.warmup_errors),
        }


def compute_throughput(count: int, duration_seconds: float) -> float:
    """Operations per second over the phase wall-clock."""
    if duration_seconds <= 0:
        return 0.0
    return count / duration_seconds


def build_report(result: BenchmarkResult) -> LatencyReport:
    """Combine the measured phase's durations and outcomes into a report."""
    measured = result.measured
    durations = measured.sorted_durations

    report = LatencyReport(
        measured_count=measured.dispatched,
        concurrency=result.config.concurrency,
        rate=result.config.rate,
        duration_seconds=measured.duration_seconds,
        throughput=compute_throughput(measured.dispatched, measured.duration_seconds),
        histogram=dict(measured.histogram),
        errors=list(measured.errors),
        warmup_errors=list(result.warmup.errors),
    )
    if durations:
        report.min_ms = quantile_ms(durations, 0.0)
        report.max_ms = quantile_ms(durations, 1.0)
        report.percentiles_ms = {
            label: quantile_ms(durations, q) for label, q in REPORT_QUANTILES
        }
    return report


def _histogram_order(key: Hashable):
    # Successes first (numbers before text), the error key last
    if key == ERROR_KEY:
        return (2, 0, "")
    if isinstance(key, (int, float)) and not isinstance(key, bool):
        return (0, key, "")
    return (1, 0, str(key))


def format_errors(errors: List[str], label: str = "") -> str:
    """List of operation failures, printed ahead of the report."""
    kind = f"{label} errors" if label else "errors"
    lines = [f"Received {len(errors)} {kind}:"]
    lines.extend(errors)
    return "\n".join(lines)


def format_report(report: LatencyReport) -> str:
    """Render the report in its fixed textual shape."""
    lines = ["Latency Statistics (milliseconds):"]
    if report.has_latencies:
        lines.append(f"Min: {report.min_ms:.3f}")
        lines.append(f"Max: {report.max_ms:.3f}")
        lines.append("Percentiles:")
        for label, _ in REPORT_QUANTILES:
            lines.append(f"{label}: {report.percentiles_ms[label]:.3f}")
    else:
        lines.append("No latency samples recorded")
    lines.append(f"Throughput: {report.throughput:.1f} queries/second")
    lines.append("Response stats:")
    for key in sorted(report.histogram, key=_histogram_order):
        lines.append(f"{key}: {report.histogram[key]} responses")
    return "\n".join(lines)


def print_report(report: LatencyReport) -> None:
    """Print errors (if any) followed by the report."""
    if report.warmup_errors:
        print(format_errors(report.warmup_errors, label="warmup"))
        print()
    if report.errors:
        print(format_errors(report.errors))
        print()
    print(format_report(report))
