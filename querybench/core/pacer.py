"""Fixed-rate dispatch pacing."""

import asyncio
import math
import time
from typing import Awaitable, Callable, Optional

from .errors import ConfigurationError


class Pacer:
    """
    Authorizes dispatches at a fixed target rate.

    Ticks are laid out on an absolute grid (origin + k * period) so a slow
    caller does not stretch every following interval. When the caller comes
    back after the scheduled instant the tick fires immediately; if it fell a
    whole period or more behind, the grid is re-anchored at that instant so
    only one tick is ever issued back-to-back.
    """

    def __init__(
        self,
        rate: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the pacer.

        Args:
            rate: Ticks per second; math.inf disables pacing
            clock: Monotonic clock in seconds
            sleep: Coroutine function used to wait for the next tick
        """
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise ConfigurationError(f"rate must be a number, got {rate!r}")
        if math.isnan(rate) or rate <= 0:
            raise ConfigurationError(f"rate must be > 0 ticks/second, got {rate}")

        self.rate = rate
        self.period = 0.0 if math.isinf(rate) else 1.0 / rate
        self._clock = clock
        self._sleep = sleep
        self._next_deadline: Optional[float] = None
        self.ticks = 0

    def reset(self) -> None:
        """Forget the current grid; the next tick fires immediately and anchors a new one."""
        self._next_deadline = None

    async def tick(self) -> float:
        """
        Wait for the next dispatch authorization.

        Returns:
            The clock instant the tick was issued for
        """
        now = self._clock()
        deadline = now if self._next_deadline is None else self._next_deadline

        if deadline > now:
            await self._sleep(deadline - now)
            fired = deadline
        else:
            if self.period == 0.0:
                # Still yield so in-flight operations get to run
                await self._sleep(0)
            fired = now

        next_deadline = deadline + self.period
        if next_deadline <= fired and self.period > 0.0:
            # Overran by at least a full period: re-anchor instead of bursting
            next_deadline = fired + self.period
        self._next_deadline = next_deadline
        self.ticks += 1
        return fired
