"""
Unit Tests for the Token Bucket Rate Limiter

These tests verify that TokenBucket:
- Starts full and hands out tokens without waiting
- Suspends callers when empty, for 1/rate per wait
- Refills whole tokens only, keeping fractional progress
- Never exceeds capacity and never goes negative
- Serves concurrent callers one at a time

Most tests drive the bucket with a fake clock, so they run instantly.

Run with:
    pytest tests/unit/test_rate_limit.py -v
"""

import asyncio
import time

import pytest

from core.rate_limit import TokenBucket


# ============================================
# Fake Clock
# ============================================

class FakeClock:
    """Manual clock; sleep() advances it instead of waiting."""

    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def make_bucket(capacity, rate, clock):
    return TokenBucket(capacity, rate, clock=clock, sleep=clock.sleep)


# ============================================
# Construction
# ============================================

class TestConstruction:
    """Tests for bucket creation"""

    def test_starts_full(self):
        bucket = make_bucket(15, 0.25, FakeClock())
        assert bucket.tokens == 15
        assert bucket.capacity == 15
        assert bucket.rate == 0.25

    def test_wait_time_is_inverse_of_rate(self):
        assert make_bucket(15, 0.25, FakeClock()).wait_time() == 4.0
        assert make_bucket(2, 1.0, FakeClock()).wait_time() == 1.0

    @pytest.mark.parametrize("capacity,rate", [(0, 1.0), (-1, 1.0), (5, 0), (5, -0.5)])
    def test_rejects_invalid_arguments(self, capacity, rate):
        with pytest.raises(ValueError):
            TokenBucket(capacity, rate)


# ============================================
# Acquire
# ============================================

class TestAcquire:
    """Tests for acquire()"""

    @pytest.mark.asyncio
    async def test_full_bucket_does_not_wait(self):
        clock = FakeClock()
        bucket = make_bucket(2, 1.0, clock)

        await bucket.acquire()
        await bucket.acquire()

        assert bucket.tokens == 0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_empty_bucket_waits_one_token_interval(self):
        clock = FakeClock()
        bucket = make_bucket(2, 1.0, clock)

        await bucket.acquire()
        await bucket.acquire()
        await bucket.acquire()

        assert clock.sleeps == [1.0]
        assert clock.now >= 1.0
        assert bucket.tokens == 0

    @pytest.mark.asyncio
    async def test_slow_rate_waits_longer(self):
        clock = FakeClock()
        bucket = make_bucket(1, 0.25, clock)

        await bucket.acquire()
        await bucket.acquire()

        assert clock.sleeps == [4.0]

    @pytest.mark.asyncio
    async def test_concurrent_callers_are_serialized(self):
        clock = FakeClock()
        bucket = make_bucket(1, 1.0, clock)

        await asyncio.gather(*(bucket.acquire() for _ in range(3)))

        # one token up front, then one per second for the other two
        assert clock.now == pytest.approx(2.0)
        assert bucket.tokens == 0

    @pytest.mark.asyncio
    async def test_real_clock_third_acquire_waits(self):
        """Capacity 2, rate 1/s: the third call in a burst waits about a second"""
        bucket = TokenBucket(capacity=2, rate=1.0)

        started = time.monotonic()
        await bucket.acquire()
        await bucket.acquire()
        burst = time.monotonic() - started
        await bucket.acquire()
        elapsed = time.monotonic() - started

        assert burst < 0.5
        assert elapsed >= 0.9


# ============================================
# Refill
# ============================================

class TestRefill:
    """Tests for refill()"""

    @pytest.mark.asyncio
    async def test_refill_adds_whole_tokens(self):
        clock = FakeClock()
        bucket = make_bucket(5, 1.0, clock)
        for _ in range(5):
            await bucket.acquire()

        clock.advance(3.0)

        assert bucket.refill() == 3
        assert bucket.tokens == 3

    @pytest.mark.asyncio
    async def test_partial_token_is_not_added(self):
        clock = FakeClock()
        bucket = make_bucket(5, 1.0, clock)
        await bucket.acquire()

        clock.advance(0.9)

        assert bucket.refill() == 0
        assert bucket.tokens == 4

    @pytest.mark.asyncio
    async def test_fractional_progress_is_kept(self):
        clock = FakeClock()
        bucket = make_bucket(5, 1.0, clock)
        for _ in range(5):
            await bucket.acquire()

        clock.advance(1.5)
        assert bucket.refill() == 1
        assert bucket.last_update == pytest.approx(1.0)

        # the leftover half second counts towards the next token
        clock.advance(0.5)
        assert bucket.refill() == 1
        assert bucket.tokens == 2

    @pytest.mark.asyncio
    async def test_refill_caps_at_capacity(self):
        clock = FakeClock()
        bucket = make_bucket(3, 1.0, clock)
        await bucket.acquire()

        clock.advance(100.0)

        assert bucket.refill() == 1
        assert bucket.tokens == 3
        assert bucket.last_update == 100.0

    def test_full_bucket_anchor_follows_clock(self):
        clock = FakeClock()
        bucket = make_bucket(2, 1.0, clock)

        clock.advance(10.0)

        assert bucket.refill() == 0
        assert bucket.tokens == 2
        assert bucket.last_update == 10.0

    @pytest.mark.asyncio
    async def test_tokens_stay_in_range(self):
        clock = FakeClock()
        bucket = make_bucket(3, 2.0, clock)

        for step in range(20):
            await bucket.acquire()
            clock.advance(0.3 * (step % 4))
            bucket.refill()
            assert 0 <= bucket.tokens <= bucket.capacity
