# src/gw2_stat_table/rate_limiter.py
"""
Token bucket shared by every outbound request so the wiki never sees more
than ``tokens`` requests per ``interval`` seconds.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from gw2_stat_table.config import RATE_LIMIT_INTERVAL, RATE_LIMIT_TOKENS

logger = logging.getLogger(__name__)


class TokenBucket:
    """Async token bucket with first-come first-served admission.

    The bucket starts full and refills continuously at ``tokens / interval``
    tokens per second, never holding more than ``tokens``.
    """

    def __init__(self, tokens: int = RATE_LIMIT_TOKENS,
                 interval: float = RATE_LIMIT_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        if tokens < 1 or interval <= 0:
            raise ValueError("token bucket needs tokens >= 1 and interval > 0")
        self.capacity = float(tokens)
        self.rate = tokens / interval
        self._clock = clock
        self._tokens = self.capacity
        self._last = clock()
        # asyncio.Lock wakes waiters in arrival order
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        self._tokens = min(self.capacity, self._tokens + (now - self._last) * self.rate)
        self._last = now

    async def acquire(self) -> None:
        """Wait until a token is available and take it."""
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                wait = (1 - self._tokens) / self.rate
                logger.debug(f"Rate limiting: waiting {wait:.2f}s for a token")
                await asyncio.sleep(wait)
                self._refill()
            self._tokens -= 1

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens
