# backend/app/core/rate_limiter.py
"""
Fixed-window rate limiting for the public login and registration endpoints.

Routes only see the `RateLimiter` interface (via a dependency that reads the
instance from `app.state`), so the in-memory implementation below can be
replaced with a shared one without touching call sites.

The in-memory limiter is best effort: it lives in one process and resets on
restart. Good enough to slow down password guessing, not for billing.
"""
import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger("uvicorn.error")


class RateLimiter(ABC):
    """Rate limiter abstract base class"""

    @abstractmethod
    def is_allowed(self, key: str) -> bool:
        """Record an attempt for `key` and report whether it may proceed."""

    async def start(self) -> None:
        """Start background housekeeping (optional)."""

    async def stop(self) -> None:
        """Stop background housekeeping (optional)."""


@dataclass
class WindowEntry:
    count: int
    window_start: float


class FixedWindowRateLimiter(RateLimiter):
    """
    Counts attempts per key inside a fixed window.

    - Unknown key: start a window with count 1, allow.
    - Window elapsed (now - window_start > window): restart it with count 1, allow.
    - count >= limit: deny (the denied attempt is not counted).
    - Otherwise: increment, allow.

    A single lock guards the entry map; the sweeper takes the same lock.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "rate-limit",
    ):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.limit = limit
        self.window = window_seconds
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, WindowEntry] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def is_allowed(self, key: str) -> bool:
        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is None:
                self._entries[key] = WindowEntry(count=1, window_start=now)
                return True

            if now - entry.window_start > self.window:
                entry.count = 1
                entry.window_start = now
                return True

            if entry.count >= self.limit:
                return False

            entry.count += 1
            return True

    def sweep(self) -> int:
        """Drop entries whose window has fully elapsed. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if now - e.window_start > self.window]
            for k in expired:
                del self._entries[k]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.window)
            removed = self.sweep()
            if removed:
                logger.debug("[%s] swept %d expired entries", self.name, removed)

    async def start(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
