"""Single-owner aggregation of per-operation results."""

import asyncio
import logging
from collections import Counter
from typing import List, Optional

from .errors import InvariantViolation
from .models import PhaseResult, Sample

logger = logging.getLogger(__name__)

# Log progress every N results
PROGRESS_EVERY = 10


class ResultCollector:
    """
    Receives samples from concurrently running operations over a queue.

    The queue is bounded to the number of results the phase will produce, so
    a send never waits; a full queue means more results arrived than were
    dispatched. One consumer task owns every aggregate, which is why nothing
    here needs a lock.
    """

    def __init__(self, expected: int, retain: bool = True, phase: str = "measurement"):
        """
        Initialize the collector.

        Args:
            expected: Exact number of samples the phase will submit
            retain: Keep successful samples (measurement) or drop them (warmup)
            phase: Phase name used in log messages
        """
        if expected < 0:
            raise ValueError(f"expected must be >= 0, got {expected}")
        self.expected = expected
        self.retain = retain
        self.phase = phase
        # maxsize=0 would mean unbounded, so an empty phase still gets a slot
        self._queue: "asyncio.Queue[Sample]" = asyncio.Queue(maxsize=max(expected, 1))
        self._submitted = 0
        self._received = 0
        self._done = False

        # Owned by the consumer task
        self._durations: List[float] = []
        self._histogram: Counter = Counter()
        self._samples: List[Sample] = []
        self._errors: List[str] = []

    def submit(self, sample: Sample) -> None:
        """Hand over one sample; never blocks."""
        if self._submitted >= self.expected:
            raise InvariantViolation(
                f"{self.phase} phase produced more than {self.expected} results"
            )
        try:
            self._queue.put_nowait(sample)
        except asyncio.QueueFull:
            raise InvariantViolation(f"{self.phase} result queue overflowed") from None
        self._submitted += 1

    async def consume(self) -> None:
        """Read exactly `expected` samples and fold them into the aggregates."""
        while self._received < self.expected:
            sample = await self._queue.get()
            self._received += 1
            self._record(sample)
            if self._received % PROGRESS_EVERY == 0 or self._received == self.expected:
                logger.info("Completed %d/%d %s queries", self._received, self.expected, self.phase)
        self._done = True

    def _record(self, sample: Sample) -> None:
        if sample.failed:
            message = sample.error_message
            self._errors.append(message)
            if not self.retain:
                logger.warning("%s query error: %s", self.phase.capitalize(), message)
                self._histogram[sample.key] += 1
                return
        elif not self.retain:
            logger.debug("%s query completed in %.3f ms", self.phase.capitalize(), sample.duration_ms)
            return

        self._durations.append(sample.duration)
        self._histogram[sample.key] += 1
        self._samples.append(sample)

    @property
    def received(self) -> int:
        return self._received

    def sorted_durations(self) -> List[float]:
        """Ascending durations; only available once every sample was consumed."""
        self._ensure_done()
        return sorted(self._durations)

    def result(self, duration_seconds: float, dispatched: Optional[int] = None) -> PhaseResult:
        """Build the phase aggregates after consume() finished."""
        self._ensure_done()
        return PhaseResult(
            name=self.phase,
            dispatched=self.expected if dispatched is None else dispatched,
            duration_seconds=duration_seconds,
            sorted_durations=self.sorted_durations(),
            histogram=dict(self._histogram),
            errors=list(self._errors),
            samples=sorted(self._samples, key=lambda s: s.index),
        )

    def _ensure_done(self) -> None:
        if not self._done:
            raise InvariantViolation(
                f"{self.phase} aggregates requested before all {self.expected} results arrived "
                f"({self._received} so far)"
            )
