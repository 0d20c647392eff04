"""Chart generation for benchmark results."""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from ..core.models import Sample  # noqa: E402
from .report import LatencyReport  # noqa: E402

logger = logging.getLogger(__name__)


def _save(fig, output_path: Optional[str], default_prefix: str) -> str:
    if not output_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = f"{default_prefix}_{timestamp}.png"
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.info("Chart saved to: %s", output_path)
    return output_path


def generate_latency_chart(
    report: LatencyReport,
    samples: Sequence[Sample],
    output_path: Optional[str] = None,
) -> Optional[str]:
    """
    Generate a chart for a single run: latency distribution and latency over time.

    Args:
        report: Report of the measured phase
        samples: Measured samples in dispatch order
        output_path: Path to save PNG file (defaults to a timestamped name)

    Returns:
        Path to saved chart file, or None if there was nothing to chart
    """
    if not samples:
        logger.warning("No samples available for charting.")
        return None

    latencies = [s.duration_ms for s in samples]
    issued = [s.issued_at for s in samples]
    colors = ["red" if s.failed else "green" for s in samples]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
    fig.suptitle(
        f"Latency - {report.measured_count} queries, concurrency {report.concurrency}",
        fontsize=14,
        fontweight="bold",
    )

    # Chart 1: Latency distribution with percentile markers
    ax1.hist(latencies, bins=min(50, max(len(latencies) // 2, 1)), color="steelblue", alpha=0.7)
    for label, value in report.percentiles_ms.items():
        ax1.axvline(value, linestyle="--", linewidth=1, color="gray")
        ax1.annotate(label, (value, 0), textcoords="offset points", xytext=(2, 5), fontsize=8, rotation=90)
    ax1.set_xlabel("Latency (ms)", fontsize=11)
    ax1.set_ylabel("Queries", fontsize=11)
    ax1.set_title("Latency Distribution", fontsize=12)
    ax1.grid(True, alpha=0.3, axis="y")

    # Chart 2: Latency per query over issue time
    ax2.scatter(issued, latencies, c=colors, s=10, alpha=0.7)
    ax2.set_xlabel("Issue Time (s since start)", fontsize=11)
    ax2.set_ylabel("Latency (ms)", fontsize=11)
    ax2.set_title(f"Latency over Time ({report.throughput:.1f} queries/s)", fontsize=12)
    ax2.grid(True, alpha=0.3)
    ax2.set_ylim(bottom=0)

    fig.tight_layout()
    fig.subplots_adjust(top=0.88)
    return _save(fig, output_path, "latency_results")


def generate_sweep_charts(
    levels: List[int],
    reports: List[LatencyReport],
    output_path: Optional[str] = None,
) -> Optional[str]:
    """
    Generate charts for a concurrency sweep.

    Args:
        levels: Concurrency level of each report
        reports: One report per level
        output_path: Path to save PNG file (defaults to a timestamped name)

    Returns:
        Path to saved chart file, or None if there was nothing to chart
    """
    if not reports:
        logger.warning("No results to chart.")
        return None

    x = range(len(levels))
    x_labels = [str(level) for level in levels]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(15, 6))
    fig.suptitle("Concurrency Sweep Results", fontsize=16, fontweight="bold")

    # Chart 1: Throughput vs concurrency
    throughput = [r.throughput for r in reports]
    ax1.plot(x, throughput, "b-o", linewidth=2, markersize=8)
    ax1.set_xlabel("Concurrency", fontsize=11)
    ax1.set_ylabel("Throughput (queries/s)", fontsize=11)
    ax1.set_title("Throughput vs Concurrency", fontsize=12, fontweight="bold")
    ax1.set_xticks(list(x))
    ax1.set_xticklabels(x_labels)
    ax1.grid(True, alpha=0.3)
    ax1.set_ylim(bottom=0)
    for i, v in enumerate(throughput):
        ax1.annotate(f"{v:.1f}", (i, v), textcoords="offset points", xytext=(0, 5), ha="center", fontsize=9)

    # Chart 2: Latency percentiles vs concurrency
    p50 = [r.percentiles_ms.get("p50", 0.0) for r in reports]
    p99 = [r.percentiles_ms.get("p99", 0.0) for r in reports]
    ax2.plot(x, p50, "g-o", linewidth=2, markersize=8, label="p50")
    ax2.plot(x, p99, "r-o", linewidth=2, markersize=8, label="p99")
    ax2.set_xlabel("Concurrency", fontsize=11)
    ax2.set_ylabel("Latency (ms)", fontsize=11)
    ax2.set_title("Latency vs Concurrency", fontsize=12, fontweight="bold")
    ax2.set_xticks(list(x))
    ax2.set_xticklabels(x_labels)
    ax2.legend(loc="upper left")
    ax2.grid(True, alpha=0.3)
    ax2.set_ylim(bottom=0)

    fig.tight_layout()
    fig.subplots_adjust(top=0.90)
    return _save(fig, output_path, "sweep_results")
