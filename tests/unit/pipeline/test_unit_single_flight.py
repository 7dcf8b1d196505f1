# tests/unit/pipeline/test_single_flight.py — v1
"""Tests for pipeline/single_flight.py."""

from __future__ import annotations

import asyncio

import pytest

from salesintel.pipeline.single_flight import SingleFlight


class Counter:
    def __init__(self, delay: float = 0.05, error: Exception | None = None) -> None:
        self.calls = 0
        self._delay = delay
        self._error = error

    async def __call__(self) -> int:
        self.calls += 1
        await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self.calls


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_run(self):
        sf, fn = SingleFlight(), Counter()
        results = await asyncio.gather(*(sf.do("k", fn) for _ in range(5)))
        assert fn.calls == 1
        assert results == [1] * 5

    @pytest.mark.asyncio
    async def test_different_keys_run_independently(self):
        sf, fn = SingleFlight(), Counter()
        await asyncio.gather(sf.do("a", fn), sf.do("b", fn))
        assert fn.calls == 2

    @pytest.mark.asyncio
    async def test_key_released_after_completion(self):
        sf, fn = SingleFlight(), Counter(delay=0)
        assert await sf.do("k", fn) == 1
        assert not sf.in_flight("k")
        assert await sf.do("k", fn) == 2

    @pytest.mark.asyncio
    async def test_exception_shared_and_released(self):
        sf, fn = SingleFlight(), Counter(error=RuntimeError("boom"))
        results = await asyncio.gather(sf.do("k", fn), sf.do("k", fn), return_exceptions=True)
        assert fn.calls == 1
        assert all(isinstance(r, RuntimeError) for r in results)
        assert not sf.in_flight("k")

    @pytest.mark.asyncio
    async def test_follower_cancel_keeps_leader(self):
        sf, fn = SingleFlight(), Counter(delay=0.05)
        leader = asyncio.create_task(sf.do("k", fn))
        await asyncio.sleep(0)
        assert sf.in_flight("k")
        follower = asyncio.create_task(sf.do("k", fn))
        await asyncio.sleep(0)
        follower.cancel()
        assert await leader == 1
        with pytest.raises(asyncio.CancelledError):
            await follower

    @pytest.mark.asyncio
    async def test_starter_cancel_keeps_follower(self):
        sf, fn = SingleFlight(), Counter(delay=0.05)
        starter = asyncio.create_task(sf.do("k", fn))
        await asyncio.sleep(0)
        follower = asyncio.create_task(sf.do("k", fn))
        await asyncio.sleep(0)
        starter.cancel()
        assert await follower == 1
        assert fn.calls == 1
        with pytest.raises(asyncio.CancelledError):
            await starter

    @pytest.mark.asyncio
    async def test_work_finishes_after_every_caller_cancels(self):
        sf, fn = SingleFlight(), Counter(delay=0.02)
        caller = asyncio.create_task(sf.do("k", fn))
        await asyncio.sleep(0)
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller
        assert sf.in_flight("k")
        await asyncio.sleep(0.05)
        assert not sf.in_flight("k")
        assert await sf.do("k", fn) == 2
