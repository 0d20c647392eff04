"""Bounded concurrency permits."""

import asyncio

from .errors import ConfigurationError, InvariantViolation


class AdmissionController:
    """Counting permit pool limiting how many operations are in flight."""

    def __init__(self, limit: int):
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ConfigurationError(f"concurrency limit must be an integer >= 1, got {limit!r}")
        self.limit = limit
        self._semaphore = asyncio.BoundedSemaphore(limit)
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def in_flight(self) -> int:
        """Number of permits currently held by operations."""
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of permits held at once since creation."""
        return self._peak_in_flight

    async def acquire(self) -> None:
        """Wait until a permit is free and take it."""
        await self._semaphore.acquire()
        self._in_flight += 1
        self._peak_in_flight = max(self._peak_in_flight, self._in_flight)

    def release(self) -> None:
        """Return a permit taken with acquire()."""
        if self._in_flight == 0:
            raise InvariantViolation("permit released without having been acquired")
        self._in_flight -= 1
        self._semaphore.release()

    async def drain(self) -> None:
        """
        Wait until every permit is back in the pool.

        All permits are taken and then handed back, so once this returns no
        operation admitted before the call is still running.
        """
        taken = 0
        try:
            for _ in range(self.limit):
                await self._semaphore.acquire()
                taken += 1
        finally:
            for _ in range(taken):
                self._semaphore.release()
