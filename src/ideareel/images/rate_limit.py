"""Sliding-window request rate limiting shared by concurrent image jobs."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

_MIN_SLEEP = 1e-6


class SlidingWindowRateLimiter:
    """At most ``max_requests`` per rolling ``window_seconds``.

    Consecutive requests are also spaced by ``window_seconds / max_requests``.
    Check-and-record happens under one lock, so waiters are served in order.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            msg = f"max_requests must be at least 1, got {max_requests}"
            raise ValueError(msg)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.min_interval = window_seconds / max_requests
        self._clock = clock
        self._sleep = sleep
        self._timestamps: deque[float] = deque(maxlen=max_requests)
        self._lock = asyncio.Lock()

    def _wait_time(self, now: float) -> float:
        # A timestamp stays in the window while now - ts < window_seconds
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()

        wait = 0.0
        if len(self._timestamps) >= self.max_requests:
            wait = self.window_seconds - (now - self._timestamps[0])
        if self._timestamps:
            wait = max(wait, self.min_interval - (now - self._timestamps[-1]))
        return max(0.0, wait)

    async def acquire(self) -> None:
        """Wait for a free slot and record the request."""
        async with self._lock:
            while True:
                now = self._clock()
                wait = self._wait_time(now)
                if wait <= 0:
                    self._timestamps.append(now)
                    return
                logger.debug("Rate limit reached, waiting %.2fs", wait)
                # A sub-resolution wait would not move the clock forward
                await self._sleep(max(wait, _MIN_SLEEP))

    def requests_in_window(self) -> int:
        """Number of recorded requests inside the current window."""
        now = self._clock()
        return sum(1 for ts in self._timestamps if now - ts < self.window_seconds)
