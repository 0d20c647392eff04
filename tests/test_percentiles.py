"""Tests for nearest-rank quantiles."""

import random

import pytest

from querybench.core.errors import ConfigurationError, EmptySampleError
from querybench.core.percentiles import REPORT_QUANTILES, quantile, quantile_ms


class TestQuantile:
    """Nearest-rank, round-up quantile selection."""

    def test_reference_values(self):
        values = [10, 20, 30, 40, 50]
        assert quantile(values, 0.9) == 50
        assert quantile(values, 0.5) == 30

    def test_extremes_are_min_and_max(self):
        rng = random.Random(7)
        for n in (1, 2, 3, 10, 101):
            values = sorted(rng.uniform(0, 100) for _ in range(n))
            assert quantile(values, 0.0) == values[0]
            assert quantile(values, 1.0) == values[-1]

    def test_monotonic_in_q(self):
        rng = random.Random(11)
        values = sorted(rng.expovariate(1.0) for _ in range(257))
        qs = [i / 1000 for i in range(1001)]
        results = [quantile(values, q) for q in qs]
        assert results == sorted(results)

    def test_is_not_interpolated(self):
        values = [1.0, 2.0, 3.0, 4.0]
        # ceil(4 * 0.3) = 2
        assert quantile(values, 0.3) == 2.0
        # ceil(4 * 0.26) = 2, no value between elements
        assert quantile(values, 0.26) in values

    def test_single_element(self):
        for q in (0.0, 0.25, 0.5, 0.999, 1.0):
            assert quantile([42.0], q) == 42.0

    def test_empty_raises(self):
        with pytest.raises(EmptySampleError):
            quantile([], 0.5)

    @pytest.mark.parametrize("q", [-0.01, 1.01, float("nan")])
    def test_q_out_of_range_raises(self, q):
        with pytest.raises(ConfigurationError):
            quantile([1.0, 2.0], q)

    def test_quantile_ms_converts_seconds(self):
        assert quantile_ms([0.010, 0.020, 0.030, 0.040, 0.050], 0.5) == pytest.approx(30.0)

    def test_report_quantiles(self):
        assert [label for label, _ in REPORT_QUANTILES] == ["p50", "p90", "p95", "p99", "p99.9"]
        assert [q for _, q in REPORT_QUANTILES] == [0.5, 0.9, 0.95, 0.99, 0.999]
