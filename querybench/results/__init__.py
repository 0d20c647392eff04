"""Reporting, export and charts."""

from .aggregator import ReportAggregator, samples_dataframe, samples_to_tsv
from .report import LatencyReport, build_report, format_errors, format_report, print_report

__all__ = [
    "LatencyReport",
    "ReportAggregator",
    "build_report",
    "format_errors",
    "format_report",
    "print_report",
    "samples_dataframe",
    "samples_to_tsv",
]
