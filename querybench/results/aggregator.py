"""Result aggregation and export for benchmark reports."""

import pandas as pd
from typing import List, Optional, Sequence

from ..core.models import Sample
from .report import LatencyReport


class ReportAggregator:
    """Aggregates and formats benchmark reports for export."""

    def __init__(self):
        self.reports: List[LatencyReport] = []

    def add_report(self, report: LatencyReport) -> None:
        """Add a single report."""
        self.reports.append(report)

    def add_reports(self, reports: List[LatencyReport]) -> None:
        """Add multiple reports."""
        self.reports.extend(reports)

    def clear(self) -> None:
        """Clear all reports."""
        self.reports = []

    def to_dataframe(self) -> pd.DataFrame:
        """Convert reports to a DataFrame, one row per run."""
        data = []
        for r in self.reports:
            row = {
                "Concurrency": r.concurrency,
                "Target_QPS": "inf" if r.rate == float("inf") else f"{r.rate:.1f}",
                "Queries": r.measured_count,
                "Errors": r.error_count,
                "Error%": f"{r.error_rate:.3f}",
                "Duration_s": f"{r.duration_seconds:.3f}",
                "QPS": f"{r.throughput:.1f}",
            }
            if r.has_latencies:
                row["Min_ms"] = f"{r.min_ms:.3f}"
                for label, value in r.percentiles_ms.items():
                    row[f"{label}_ms"] = f"{value:.3f}"
                row["Max_ms"] = f"{r.max_ms:.3f}"
            data.append(row)
        return pd.DataFrame(data)

    def to_csv(self, path: str) -> None:
        """Export to CSV file."""
        df = self.to_dataframe()
        df.to_csv(path, index=False)

    def to_tsv(self, path: str) -> None:
        """Export to TSV file."""
        df = self.to_dataframe()
        df.to_csv(path, sep="\t", index=False)

    def get_tsv_string(self) -> str:
        """Get reports as TSV string for easy copy/paste to spreadsheet."""
        df = self.to_dataframe()
        return df.to_csv(sep="\t", index=False)

    def print_summary_table(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """Print formatted summary table to console."""
        if not self.reports:
            print("No results to display.")
            return

        print()
        print("=" * 100)
        print((title or "BENCHMARK RESULTS SUMMARY").center(100))
        print("=" * 100)

        if description:
            print(description)
            print("-" * 100)

        df = self.to_dataframe()
        print(df.to_string(index=False))

        print()
        print("=" * 100)
        print("TSV OUTPUT (copy to spreadsheet):")
        print("=" * 100)
        print(self.get_tsv_string())
        print("=" * 100)

    def print_single_report(self, report: LatencyReport) -> None:
        """Print a one-block summary of a report during a sweep."""
        print(f"\nResults for concurrency {report.concurrency}:")
        print(f"  Queries: {report.measured_count - report.error_count}/{report.measured_count} succeeded")
        if report.has_latencies:
            p = report.percentiles_ms
            print(f"  Latency: p50={p['p50']:.3f}ms, p99={p['p99']:.3f}ms, max={report.max_ms:.3f}ms")
        print(f"  Throughput: {report.throughput:.1f} queries/second")
        print(f"  Error Rate: {report.error_rate:.3f}%")


def samples_dataframe(samples: Sequence[Sample]) -> pd.DataFrame:
    """Per-sample DataFrame in dispatch order."""
    columns = ["index", "issued_at_s", "duration_ms", "outcome", "success", "error_message"]
    return pd.DataFrame([s.to_dict() for s in samples], columns=columns)


def samples_to_tsv(samples: Sequence[Sample], path: str) -> None:
    """Export per-sample timings to a TSV file."""
    samples_dataframe(samples).to_csv(path, sep="\t", index=False)
