"""Inter-call pacing for rate-limited platform calls."""

import asyncio
import time
from typing import Awaitable, Callable


class Pacer:
    """Enforce a minimum interval between consecutive calls.

    The first call passes straight through; each later call waits until
    `interval_seconds` have elapsed since the previous one was released.
    """

    def __init__(
        self,
        interval_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_seconds < 0:
            raise ValueError("interval_seconds cannot be negative")
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._clock = clock
        self._last_release: float | None = None

    async def wait(self) -> None:
        """Block until the next call is allowed."""
        if self._last_release is not None and self.interval_seconds > 0:
            remaining = self.interval_seconds - (self._clock() - self._last_release)
            if remaining > 0:
                await self._sleep(remaining)
        self._last_release = self._clock()

    def reset(self) -> None:
        """Forget the previous call so the next one passes immediately."""
        self._last_release = None


class NoPacing(Pacer):
    """Pacer that never waits (tests, mock mode)."""

    def __init__(self):
        super().__init__(0)
