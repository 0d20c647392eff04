"""Exception hierarchy for benchmark runs."""


class BenchmarkError(Exception):
    """Base class for errors raised by the benchmark harness itself."""


class ConfigurationError(BenchmarkError, ValueError):
    """Invalid run configuration, raised before anything is dispatched."""


class InvariantViolation(BenchmarkError, RuntimeError):
    """Internal bookkeeping went wrong; the run cannot be trusted and is aborted."""


class EmptySampleError(BenchmarkError, ValueError):
    """A statistic was requested over an empty sample set."""
