"""Tests for configuration validation and data models."""

import math

import pytest

from querybench.core.errors import BenchmarkError, ConfigurationError
from querybench.core.models import ERROR_KEY, BenchmarkConfig, PhaseResult, Sample, describe_error


class TestBenchmarkConfig:

    def test_defaults(self):
        config = BenchmarkConfig()
        assert config.rate == 10.0
        assert config.concurrency == 1
        assert config.warmup_count == 10
        assert config.measured_count == 100
        assert config.is_sequential

    @pytest.mark.parametrize(
        "overrides",
        [
            {"rate": 0},
            {"rate": -5},
            {"rate": float("nan")},
            {"rate": "10"},
            {"concurrency": 0},
            {"concurrency": 2.5},
            {"concurrency": True},
            {"warmup_count": -1},
            {"measured_count": -1},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            BenchmarkConfig(**overrides)

    def test_zero_counts_allowed(self):
        config = BenchmarkConfig(warmup_count=0, measured_count=0)
        assert config.measured_count == 0

    def test_unrestricted_rate(self):
        config = BenchmarkConfig(rate=math.inf, concurrency=4)
        assert config.is_unrestricted
        assert not config.is_sequential

    def test_immutable(self):
        config = BenchmarkConfig()
        with pytest.raises(AttributeError):
            config.rate = 5

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ConfigurationError, BenchmarkError)


class TestSample:

    def test_success(self):
        sample = Sample(index=0, issued_at=0.5, duration=0.012, outcome=3)
        assert not sample.failed
        assert sample.key == 3
        assert sample.duration_ms == pytest.approx(12.0)
        assert sample.error_message is None

    def test_failure(self):
        sample = Sample(index=1, issued_at=0.6, duration=0.5, error=TimeoutError("slow"))
        assert sample.failed
        assert sample.key == ERROR_KEY
        assert sample.to_dict() == {
            "index": 1,
            "issued_at_s": 0.6,
            "duration_ms": 500.0,
            "outcome": ERROR_KEY,
            "success": False,
            "error_message": "TimeoutError: slow",
        }

    def test_describe_error_without_message(self):
        assert describe_error(ConnectionResetError()) == "ConnectionResetError"


class TestPhaseResult:

    def test_error_rate(self):
        phase = PhaseResult(name="measurement", dispatched=4, duration_seconds=1.0, errors=["x"])
        assert phase.error_count == 1
        assert phase.error_rate == 25.0

    def test_error_rate_empty(self):
        assert PhaseResult(name="warmup", dispatched=0, duration_seconds=0.0).error_rate == 0.0
