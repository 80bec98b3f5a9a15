"""Concurrency gate bounding how many file tasks run at once.

A counting semaphore with strict FIFO hand-off: a released permit goes to
the oldest waiter instead of back to the pool, so late arrivals cannot
overtake tasks that are already queued.

Example:
    gate = ConcurrencyGate(2)

    async def fix(path):
        async with gate:
            await backend.transform(...)
"""

from __future__ import annotations

import asyncio
from collections import deque
from types import TracebackType

from neurolint.core.logging import get_logger

_logger = get_logger("gate")


class ConcurrencyGate:
    """Counting semaphore with FIFO fairness.

    Attributes:
        capacity: Maximum permits outstanding at once.
        peak_in_use: Highest number of permits held simultaneously.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.peak_in_use = 0
        self._free = capacity
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def in_use(self) -> int:
        """Permits currently held."""
        return self.capacity - self._free

    @property
    def waiting(self) -> int:
        """Callers currently queued for a permit."""
        return sum(1 for fut in self._waiters if not fut.done())

    async def acquire(self) -> None:
        """Suspend until a permit is available, then take it."""
        if self._free > 0 and not self.waiting:
            self._free -= 1
            self._record_peak()
            return

        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Permit was handed over before the cancellation landed
                self.release()
            elif fut in self._waiters:
                self._waiters.remove(fut)
            raise
        # Hand-off keeps _free unchanged: the releaser's permit is now ours
        self._record_peak()

    def release(self) -> None:
        """Return a permit, handing it to the oldest live waiter if any.

        Raises:
            RuntimeError: If more permits are released than were acquired.
        """
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                fut.set_result(None)
                return
        if self._free >= self.capacity:
            raise RuntimeError("ConcurrencyGate released more times than acquired")
        self._free += 1

    def _record_peak(self) -> None:
        if self.in_use > self.peak_in_use:
            self.peak_in_use = self.in_use
            _logger.debug("gate.peak", in_use=self.in_use, capacity=self.capacity)

    async def __aenter__(self) -> ConcurrencyGate:
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()
