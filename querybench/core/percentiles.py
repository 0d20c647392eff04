"""Nearest-rank quantiles over sorted durations."""

import math
from typing import Sequence, Tuple

from .errors import ConfigurationError, EmptySampleError

# Labels and quantiles printed in the percentile section of a report
REPORT_QUANTILES: Tuple[Tuple[str, float], ...] = (
    ("p50", 0.50),
    ("p90", 0.90),
    ("p95", 0.95),
    ("p99", 0.99),
    ("p99.9", 0.999),
)


def quantile(sorted_values: Sequence[float], q: float) -> float:
    """
    Return the nearest-rank (round up) quantile of an ascending sequence.

    The 1-based rank is ceil(n * q) clamped to [1, n], so q=0 yields the
    minimum and q=1 the maximum. No interpolation is done.

    Args:
        sorted_values: Values in ascending order
        q: Quantile in [0, 1]

    Returns:
        The element at the computed rank

    Raises:
        EmptySampleError: If there are no values
        ConfigurationError: If q is outside [0, 1]
    """
    if not 0.0 <= q <= 1.0:
        raise ConfigurationError(f"quantile must be within [0, 1], got {q}")
    n = len(sorted_values)
    if n == 0:
        raise EmptySampleError("cannot compute a quantile of an empty sample set")
    rank = min(max(math.ceil(n * q), 1), n)
    return sorted_values[rank - 1]


def quantile_ms(sorted_durations: Sequence[float], q: float) -> float:
    """Quantile of durations given in seconds, returned in milliseconds."""
    return quantile(sorted_durations, q) * 1000
