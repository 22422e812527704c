"""
Deadlines for External Calls
============================

Every external call (search, detail lookup, AI analysis) runs in a worker
thread under ``asyncio.wait_for``. A caller may pass an overall deadline in
seconds; each call then gets the smaller of its own timeout and the time
left. An elapsed deadline raises ``asyncio.TimeoutError`` before the call is
even started, which callers handle like any other failure.
"""

import asyncio
import time
from typing import Any, Callable, Optional


class Deadline:
    """Absolute point in (monotonic) time after which no new call may start."""

    def __init__(self, seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds if seconds is not None else None

    def remaining(self) -> Optional[float]:
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def bound(self, timeout: Optional[float]) -> Optional[float]:
        """Smaller of ``timeout`` and the remaining time."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)


async def call_blocking(
    func: Callable[..., Any],
    *args,
    timeout: Optional[float] = None,
    deadline: Optional[Deadline] = None,
    **kwargs,
) -> Any:
    """Run a blocking call in a thread, bounded by its timeout and the deadline."""
    if deadline is not None:
        if deadline.expired:
            raise asyncio.TimeoutError("deadline exceeded")
        timeout = deadline.bound(timeout)
    return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout=timeout)


async def call_async(
    coro_func: Callable[..., Any],
    *args,
    timeout: Optional[float] = None,
    deadline: Optional[Deadline] = None,
    **kwargs,
) -> Any:
    """Await a coroutine function, bounded by its timeout and the deadline."""
    if deadline is not None:
        if deadline.expired:
            raise asyncio.TimeoutError("deadline exceeded")
        timeout = deadline.bound(timeout)
    return await asyncio.wait_for(coro_func(*args, **kwargs), timeout=timeout)
