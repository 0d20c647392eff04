"""Concurrency sweep orchestrator."""

import dataclasses
import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Callable, Dict, List, Optional

from ..core.errors import ConfigurationError, InvariantViolation
from ..core.models import BenchmarkConfig
from ..core.runner import BenchmarkRunner
from ..results.aggregator import ReportAggregator
from ..results.report import LatencyReport, build_report

logger = logging.getLogger(__name__)

# Builds a fresh operation for one concurrency level
OperationFactory = Callable[[int], AsyncContextManager[Any]]


@dataclass
class SweepResult:
    """Results from a multi-level concurrency sweep."""

    levels: List[int]
    reports: List[LatencyReport] = field(default_factory=list)
    failed_levels: List[int] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def completed_levels(self) -> List[int]:
        return [r.concurrency for r in self.reports]

    @property
    def overall_error_rate(self) -> float:
        total = sum(r.measured_count for r in self.reports)
        errors = sum(r.error_count for r in self.reports)
        return (errors / total * 100) if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "levels": self.levels,
            "completed_levels": self.completed_levels,
            "failed_levels": self.failed_levels,
            "total_duration_seconds": self.total_duration_seconds,
            "overall_error_rate": self.overall_error_rate,
            "reports": [r.to_dict() for r in self.reports],
        }


class ConcurrencySweep:
    """Runs the same benchmark once per concurrency level."""

    def __init__(
        self,
        base_config: BenchmarkConfig,
        operation_factory: OperationFactory,
        verbose: bool = True,
    ):
        """
        Initialize the sweep orchestrator.

        Args:
            base_config: Rate and phase sizes; concurrency is overridden per level
            operation_factory: Called with the level's concurrency, returns an
                async context manager yielding the operation
            verbose: Whether to print per-level results
        """
        self.base_config = base_config
        self.operation_factory = operation_factory
        self.verbose = verbose
        self.aggregator = ReportAggregator()

    async def run(self, levels: List[int]) -> SweepResult:
        """
        Run the sweep through all levels sequentially.

        Args:
            levels: Concurrency levels to test (in order)

        Returns:
            SweepResult with one report per completed level
        """
        if not levels:
            raise ConfigurationError("at least one concurrency level is required")
        # Validate every level before running any of them
        configs = [dataclasses.replace(self.base_config, concurrency=level) for level in levels]

        self.aggregator.clear()
        result = SweepResult(levels=list(levels))
        started = time.perf_counter()

        logger.info("Concurrency sweep over levels %s", ", ".join(str(level) for level in levels))

        for i, config in enumerate(configs, 1):
            logger.info("Stage %d/%d: concurrency %d", i, len(configs), config.concurrency)
            try:
                report = await self._run_level(config)
            except (ConfigurationError, InvariantViolation):
                raise
            except Exception:
                logger.exception("Error running concurrency level %d", config.concurrency)
                result.failed_levels.append(config.concurrency)
                continue

            result.reports.append(report)
            self.aggregator.add_report(report)
            if self.verbose:
                self.aggregator.print_single_report(report)

        result.total_duration_seconds = time.perf_counter() - started
        if self.verbose:
            self.aggregator.print_summary_table(title="CONCURRENCY SWEEP RESULTS")
        return result

    async def _run_level(self, config: BenchmarkConfig) -> LatencyReport:
        async with self.operation_factory(config.concurrency) as operation:
            runner = BenchmarkRunner(config, operation)
            benchmark = await runner.run()
        return build_report(benchmark)

    def get_aggregator(self) -> ReportAggregator:
        """Get the result aggregator for additional operations."""
        return self.aggregator
