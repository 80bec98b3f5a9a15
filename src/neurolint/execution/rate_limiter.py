"""Client-side sliding-window rate limiting for transform calls.

Keeps the timestamps of recent requests and blocks new ones while the
window is full. Used by the fix runner when ``api.requests_per_minute`` is
configured, on top of the concurrency gate.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from neurolint.core.logging import get_logger

_logger = get_logger("rate_limiter")

T = TypeVar("T")


@dataclass
class RateLimitStatus:
    """Result of a limit check.

    Attributes:
        allowed: Whether a request may be sent now.
        reset_at: Monotonic time when the oldest request leaves the window.
        remaining: Requests still available in the current window.
    """

    allowed: bool
    reset_at: float
    remaining: int


class SlidingWindowRateLimiter:
    """At most ``max_requests`` per ``window_seconds``."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        *,
        skip_successful: bool = False,
        skip_failed: bool = False,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            raise ValueError(f"max_requests must be >= 1, got {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {window_seconds}")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.skip_successful = skip_successful
        self.skip_failed = skip_failed
        self._clock = clock
        self._sleep = sleep
        self._requests: deque[float] = deque()

    @classmethod
    def per_minute(cls, requests_per_minute: int) -> SlidingWindowRateLimiter:
        return cls(max_requests=requests_per_minute, window_seconds=60.0)

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window_seconds:
            self._requests.popleft()

    def check(self) -> RateLimitStatus:
        now = self._clock()
        self._prune(now)
        if len(self._requests) >= self.max_requests:
            return RateLimitStatus(
                allowed=False,
                reset_at=self._requests[0] + self.window_seconds,
                remaining=0,
            )
        return RateLimitStatus(
            allowed=True,
            reset_at=now + self.window_seconds,
            remaining=self.max_requests - len(self._requests),
        )

    async def wait_if_needed(self) -> float:
        """Sleep until a request is allowed.

        Returns:
            Seconds spent waiting.
        """
        waited = 0.0
        status = self.check()
        while not status.allowed:
            wait = max(status.reset_at - self._clock(), 0.0)
            _logger.info("rate_limit.waiting", wait_seconds=round(wait, 2))
            await self._sleep(wait)
            waited += wait
            status = self.check()
        return waited

    def record(self, successful: bool = True) -> None:
        if successful and self.skip_successful:
            return
        if not successful and self.skip_failed:
            return
        self._requests.append(self._clock())

    @property
    def remaining(self) -> int:
        self._prune(self._clock())
        return max(0, self.max_requests - len(self._requests))

    def reset(self) -> None:
        self._requests.clear()


async def with_rate_limit(
    operation: Callable[[], Awaitable[T]],
    limiter: SlidingWindowRateLimiter,
) -> T:
    """Run ``operation`` once the limiter allows it, recording the outcome."""
    await limiter.wait_if_needed()
    try:
        result = await operation()
    except Exception:
        limiter.record(successful=False)
        raise
    limiter.record(successful=True)
    return result


__all__ = ["RateLimitStatus", "SlidingWindowRateLimiter", "with_rate_limit"]
