"""Unit tests for the token bucket gating outbound requests."""

from __future__ import annotations

import asyncio
import time

import pytest

from gw2_stat_table.rate_limiter import TokenBucket

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_bucket_starts_full_and_refills_continuously() -> None:
    clock = FakeClock()

    async def scenario() -> TokenBucket:
        bucket = TokenBucket(tokens=2, interval=1.0, clock=clock)
        await bucket.acquire()
        await bucket.acquire()
        return bucket

    bucket = asyncio.run(scenario())
    assert bucket.available == pytest.approx(0.0)

    clock.now += 0.5
    assert bucket.available == pytest.approx(1.0)

    clock.now += 10
    assert bucket.available == pytest.approx(2.0)


def test_burst_is_immediate_then_paced() -> None:
    """A full bucket admits at once; further requests wait interval / tokens each."""

    async def scenario() -> tuple[float, float]:
        bucket = TokenBucket(tokens=3, interval=0.3)
        start = time.monotonic()
        for _ in range(3):
            await bucket.acquire()
        burst = time.monotonic() - start
        for _ in range(3):
            await bucket.acquire()
        return burst, time.monotonic() - start

    burst, total = asyncio.run(scenario())
    assert burst < 0.05
    assert total >= 0.25


def test_waiters_are_admitted_in_arrival_order() -> None:
    async def scenario() -> list[int]:
        bucket = TokenBucket(tokens=1, interval=0.02)
        order: list[int] = []

        async def worker(i: int) -> None:
            await bucket.acquire()
            order.append(i)

        await asyncio.gather(*(worker(i) for i in range(6)))
        return order

    assert asyncio.run(scenario()) == list(range(6))


def test_invalid_configuration_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenBucket(tokens=0, interval=1.0)
    with pytest.raises(ValueError):
        TokenBucket(tokens=1, interval=0)
