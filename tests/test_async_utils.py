"""Tests for async_utils.py: token bucket RateLimiter."""

import asyncio
import time

import pytest

from diagram_search.core.async_utils import RateLimiter

# ============================================================
# RateLimiter
# ============================================================


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_acquire_fast(self):
        rl = RateLimiter(rate=10.0, per=1.0)
        start = time.monotonic()
        await rl.acquire()
        assert time.monotonic() - start < 0.05

    @pytest.mark.asyncio
    async def test_context_manager(self):
        rl = RateLimiter(rate=10.0)
        async with rl as entered:
            assert entered is rl

    @pytest.mark.asyncio
    async def test_waits_when_bucket_empty(self):
        rl = RateLimiter(rate=20.0, per=1.0)
        for _ in range(20):
            await rl.acquire()
        start = time.monotonic()
        await rl.acquire()
        assert time.monotonic() - start >= 0.03

    @pytest.mark.asyncio
    async def test_tokens_replenish(self):
        rl = RateLimiter(rate=10.0, per=1.0)
        for _ in range(10):
            await rl.acquire()
        await asyncio.sleep(0.15)
        start = time.monotonic()
        await rl.acquire()
        assert time.monotonic() - start < 0.05
