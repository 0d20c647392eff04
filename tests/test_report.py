"""Tests for report building and text formatting."""

import pytest

from querybench.core.models import ERROR_KEY, BenchmarkConfig, BenchmarkResult, PhaseResult
from querybench.results.report import (
    build_report,
    compute_throughput,
    format_errors,
    format_report,
    print_report,
)


def make_result(durations, histogram, duration_seconds=2.0, errors=None, warmup_errors=None):
    config = BenchmarkConfig(rate=10, concurrency=2, warmup_count=0, measured_count=len(durations))
    return BenchmarkResult(
        config=config,
        warmup=PhaseResult(name="warmup", dispatched=0, duration_seconds=0.0, errors=warmup_errors or []),
        measured=PhaseResult(
            name="measurement",
            dispatched=len(durations),
            duration_seconds=duration_seconds,
            sorted_durations=sorted(durations),
            histogram=histogram,
            errors=errors or [],
        ),
    )


class TestBuildReport:

    def test_reference_sample_set(self):
        result = make_result([0.010, 0.020, 0.030, 0.040, 0.050], {"ok": 5})
        report = build_report(result)

        assert report.min_ms == pytest.approx(10.0)
        assert report.max_ms == pytest.approx(50.0)
        assert report.percentiles_ms["p50"] == pytest.approx(30.0)
        assert report.percentiles_ms["p90"] == pytest.approx(50.0)
        assert report.throughput == pytest.approx(2.5)
        assert report.concurrency == 2

    def test_empty_measurement(self):
        report = build_report(make_result([], {}, duration_seconds=0.0))
        assert not report.has_latencies
        assert report.percentiles_ms == {}
        assert report.throughput == 0.0

    def test_error_rate(self):
        result = make_result([0.01] * 4, {"ok": 3, ERROR_KEY: 1}, errors=["Boom"])
        report = build_report(result)
        assert report.error_count == 1
        assert report.error_rate == pytest.approx(25.0)
        assert report.errors == ["Boom"]

    def test_compute_throughput(self):
        assert compute_throughput(100, 4.0) == 25.0
        assert compute_throughput(100, 0.0) == 0.0


class TestFormatReport:

    def test_fixed_shape(self):
        report = build_report(make_result([0.010, 0.020, 0.030, 0.040, 0.050], {"ok": 5}))
        assert format_report(report) == "\n".join([
            "Latency Statistics (milliseconds):",
            "Min: 10.000",
            "Max: 50.000",
            "Percentiles:",
            "p50: 30.000",
            "p90: 50.000",
            "p95: 50.000",
            "p99: 50.000",
            "p99.9: 50.000",
            "Throughput: 2.5 queries/second",
            "Response stats:",
            "ok: 5 responses",
        ])

    def test_breakdown_lists_successes_before_errors(self):
        durations = [0.001] * 9
        report = build_report(make_result(durations, {ERROR_KEY: 2, 3: 5, 1: 1, "partial": 1}))
        lines = format_report(report).splitlines()
        breakdown = lines[lines.index("Response stats:") + 1:]
        assert breakdown == [
            "1: 1 responses",
            "3: 5 responses",
            "partial: 1 responses",
            "error: 2 responses",
        ]

    def test_no_samples(self):
        report = build_report(make_result([], {}, duration_seconds=0.0))
        text = format_report(report)
        assert "No latency samples recorded" in text
        assert "Min:" not in text
        assert "Throughput: 0.0 queries/second" in text

    def test_format_errors(self):
        assert format_errors(["A: x", "B: y"]) == "Received 2 errors:\nA: x\nB: y"
        assert format_errors(["A"], label="warmup").startswith("Received 1 warmup errors:")

    def test_errors_printed_before_report(self, capsys):
        result = make_result(
            [0.01, 0.02],
            {"ok": 1, ERROR_KEY: 1},
            errors=["TimeoutError: slow"],
            warmup_errors=["ConnectionError: refused"],
        )
        print_report(build_report(result))
        out = capsys.readouterr().out

        assert out.index("Received 1 warmup errors:") < out.index("Received 1 errors:")
        assert out.index("TimeoutError: slow") < out.index("Latency Statistics (milliseconds):")
