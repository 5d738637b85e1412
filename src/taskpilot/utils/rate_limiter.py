"""Concurrency gate for outbound vendor API calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

MAX_CONCURRENT_REQUESTS = 10


class ConcurrencyLimiter:
    """Bound the number of vendor calls in flight at once.

    This limits concurrency, not requests per second. Callers that exceed
    the vendor's real rate limit still get a 429, surfaced as
    ``RateLimitError`` by the clients.

    The semaphore is created per event loop, so one limiter (including the
    process-wide ``api_limiter``) survives repeated ``asyncio.run`` calls.
    """

    def __init__(self, max_concurrency: int = MAX_CONCURRENT_REQUESTS):
        """
        Initialize the limiter

        Args:
            max_concurrency: Maximum number of calls allowed to run at once
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self._semaphore: asyncio.Semaphore | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._active = 0

    def _get_semaphore(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._loop is not loop:
            # Slots held in a finished loop are gone with it
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            self._loop = loop
            self._active = 0
        return self._semaphore

    async def __aenter__(self) -> ConcurrencyLimiter:
        await self._get_semaphore().acquire()
        self._active += 1
        return self

    async def __aexit__(self, *args: Any) -> None:
        self._active -= 1
        self._get_semaphore().release()

    async def run(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``fn(*args, **kwargs)`` once a slot is free."""
        async with self:
            return await fn(*args, **kwargs)

    @property
    def active(self) -> int:
        return self._active

    def get_status(self) -> dict[str, Any]:
        """Get current limiter status for debugging"""
        return {
            "active": self._active,
            "max_concurrency": self.max_concurrency,
            "utilization_percent": self._active / self.max_concurrency * 100,
        }


# Process-wide gate shared by every vendor client unless one is injected
api_limiter = ConcurrencyLimiter(MAX_CONCURRENT_REQUESTS)


async def with_rate_limit(fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
    """Run ``fn`` through the process-wide gate."""
    return await api_limiter.run(fn, *args, **kwargs)
