"""Rate limiter for outgoing crawler requests.

Spaces calls out so that no more than `calls_per_second` requests are sent.
The crawler runs outside the simulation, in a single thread, so a blocking
sleep is all that is needed.

Usage:
    limiter = RateLimiter(calls_per_second=2.0)
    limiter.acquire()
    # ... make the API call ...
"""

from __future__ import annotations

import time
from collections.abc import Callable


class RateLimiter:
    """Minimum-interval rate limiter.

    Args:
        calls_per_second: Maximum number of calls allowed per second.
        clock: Monotonic clock, injectable for tests.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        calls_per_second: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if calls_per_second <= 0:
            msg = f"calls_per_second must be > 0, got {calls_per_second}"
            raise ValueError(msg)
        self.calls_per_second = calls_per_second
        self.min_interval = 1.0 / calls_per_second
        self.last_call: float | None = None
        self._clock = clock
        self._sleep = sleep

    def acquire(self) -> None:
        """Block until a request is allowed under the rate limit."""
        if self.last_call is not None:
            wait_time = self.min_interval - (self._clock() - self.last_call)
            if wait_time > 0:
                self._sleep(wait_time)
        self.last_call = self._clock()
