"""
Async Utilities for Provider Calls.

Provides:
- Rate limiting with token bucket
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Rate Limiter (Token Bucket Algorithm)
# =============================================================================

@dataclass
class RateLimiter:
    """
    Token bucket rate limiter for provider calls.

    The Custom Search JSON API allows roughly 10 requests/second per
    project; a lower default keeps bursts from several sessions polite.

    Example:
        limiter = RateLimiter(rate=5, per=1.0)
        async with limiter:
            await make_api_call()
    """
    rate: float = 5.0  # requests per period
    per: float = 1.0   # period in seconds
    _tokens: float = field(init=False)
    _last_update: float = field(init=False)
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self._tokens = self.rate
        self._last_update = time.monotonic()

    async def acquire(self) -> None:
        """Acquire a token, waiting if necessary."""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_update
            self._tokens = min(self.rate, self._tokens + elapsed * (self.rate / self.per))
            self._last_update = now

            if self._tokens < 1:
                wait_time = (1 - self._tokens) * (self.per / self.rate)
                logger.debug(f"Rate limit: waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                self._last_update = time.monotonic()
                self._tokens = 0
            else:
                self._tokens -= 1

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass
