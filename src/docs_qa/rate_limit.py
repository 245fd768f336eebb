"""
Fixed-window rate limiter shared by every outbound Gemini call.

The limiter is local to one process. Several running instances each enforce
their own budget.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from .config import resolve_max_requests_per_minute

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RateLimitUsage:
    """Snapshot of the current window."""

    count: int
    limit: int
    window_seconds: float

    def describe(self) -> str:
        return f"{self.count}/{self.limit} requests this minute"


class RateLimiter:
    """
    Allow at most `max_requests` acquisitions per window.

    When the window is exhausted the caller sleeps until the window ends
    (plus a small buffer) and a fresh window starts. Counter updates are
    serialized, so concurrent callers never overshoot the budget; only the
    callers waiting for a slot are suspended.
    """

    def __init__(
        self,
        max_requests: int | None = None,
        *,
        window_seconds: float = 60.0,
        buffer_seconds: float = 1.0,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.max_requests = resolve_max_requests_per_minute(max_requests)
        if self.max_requests <= 0:
            raise ValueError("max_requests must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.window_seconds = window_seconds
        self.buffer_seconds = buffer_seconds
        self._clock = clock
        self._sleep = sleep
        self._count = 0
        self._window_start = clock()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait for a slot in the current window and reserve it."""
        async with self._lock:
            now = self._clock()
            if now - self._window_start > self.window_seconds:
                self._count = 0
                self._window_start = now
                logger.debug("Rate limit window reset")

            if self._count >= self.max_requests:
                remaining = max(self.window_seconds - (now - self._window_start), 0.0)
                logger.info(
                    "Rate limit reached (%d/%d), waiting %.0f seconds",
                    self._count,
                    self.max_requests,
                    remaining + self.buffer_seconds,
                )
                await self._sleep(remaining + self.buffer_seconds)
                self._count = 0
                self._window_start = self._clock()

            self._count += 1
            logger.debug("API requests this window: %d/%d", self._count, self.max_requests)

    def usage(self) -> RateLimitUsage:
        count = self._count
        if self._clock() - self._window_start > self.window_seconds:
            count = 0
        return RateLimitUsage(
            count=count,
            limit=self.max_requests,
            window_seconds=self.window_seconds,
        )


_DEFAULT_LIMITER: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter, creating it on first use."""
    global _DEFAULT_LIMITER
    if _DEFAULT_LIMITER is None:
        _DEFAULT_LIMITER = RateLimiter()
    return _DEFAULT_LIMITER


def reset_rate_limiter() -> None:
    global _DEFAULT_LIMITER
    _DEFAULT_LIMITER = None
