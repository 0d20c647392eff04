"""Paced, concurrency-bounded benchmark runner."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Awaitable, Callable, Hashable, Optional, Set

from .admission import AdmissionController
from .collector import ResultCollector
from .models import BenchmarkConfig, BenchmarkResult, PhaseResult, Sample
from .pacer import Pacer

logger = logging.getLogger(__name__)

# A no-argument coroutine function; its return value is the outcome key,
# any exception it raises is an operation failure
Operation = Callable[[], Awaitable[Hashable]]


class BenchmarkRunner:
    """Runs a warmup phase then a measured phase of an operation."""

    def __init__(
        self,
        config: BenchmarkConfig,
        operation: Operation,
        clock: Callable[[], float] = time.perf_counter,
        pacer: Optional[Pacer] = None,
    ):
        """
        Initialize the runner.

        Args:
            config: Validated run configuration
            operation: Coroutine function invoked once per dispatch
            clock: Clock used for operation and phase timing
            pacer: Dispatch pacer (defaults to one at config.rate)
        """
        self.config = config
        self.operation = operation
        self._clock = clock
        self.pacer = pacer or Pacer(config.rate)
        self.admission = AdmissionController(config.concurrency)

    async def run(self) -> BenchmarkResult:
        """
        Execute warmup and measurement and return structured results.

        Returns:
            BenchmarkResult with both phases
        """
        start_time = datetime.now()

        logger.info("Starting %d warmup queries", self.config.warmup_count)
        warmup = await self.run_phase("warmup", self.config.warmup_count, retain=False)
        logger.info("Completed warmups in %.3fs", warmup.duration_seconds)

        # Measurement gets its own tick grid starting now
        self.pacer.reset()

        logger.info(
            "Starting %d measured queries at %s QPS %s",
            self.config.measured_count,
            "unrestricted" if self.config.is_unrestricted else self.config.rate,
            "sequentially" if self.config.is_sequential
            else f"with parallelism of {self.config.concurrency}",
        )
        measured = await self.run_phase("measurement", self.config.measured_count, retain=True)
        logger.info("Completed measurement in %.3fs", measured.duration_seconds)

        return BenchmarkResult(
            config=self.config,
            warmup=warmup,
            measured=measured,
            start_timestamp=start_time,
            end_timestamp=datetime.now(),
        )

    async def run_phase(self, name: str, count: int, retain: bool) -> PhaseResult:
        """
        Dispatch `count` operations and wait for all of them.

        Each dispatch waits for a pacer tick, then for a permit. The phase
        ends only once every permit is back, so nothing from it can overlap
        the next phase.

        Args:
            name: Phase name for logs and results
            count: Number of operations to dispatch
            retain: Keep every sample (measurement) or only failures (warmup)

        Returns:
            PhaseResult with wall-clock duration measured up to full drain
        """
        collector = ResultCollector(count, retain=retain, phase=name)
        consumer = asyncio.create_task(collector.consume(), name=f"{name}-collector")
        tasks: Set["asyncio.Task[None]"] = set()

        try:
            phase_start = self._clock()
            for index in range(count):
                await self.pacer.tick()
                await self.admission.acquire()
                tasks.add(
                    asyncio.create_task(
                        self._invoke(index, phase_start, collector),
                        name=f"{name}-{index}",
                    )
                )

            await self.admission.drain()
            duration = self._clock() - phase_start

            # Invocation tasks only raise on invariant violations
            await asyncio.gather(*tasks)
            await consumer
        except BaseException:
            consumer.cancel()
            for task in tasks:
                task.cancel()
            raise

        return collector.result(duration, dispatched=count)

    async def _invoke(self, index: int, phase_start: float, collector: ResultCollector) -> None:
        """Run the operation once, give back its permit, then report the sample."""
        outcome = None
        error = None
        issued = self._clock()
        try:
            try:
                outcome = await self.operation()
            except Exception as e:
                error = e
            duration = self._clock() - issued
        finally:
            self.admission.release()

        collector.submit(
            Sample(
                index=index,
                issued_at=issued - phase_start,
                duration=duration,
                outcome=outcome,
                error=error,
            )
        )
