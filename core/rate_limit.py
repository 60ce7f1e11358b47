"""
Token Bucket Rate Limiter

Admission control for outbound API calls. Every request attempt takes one
token; tokens are refilled at a fixed rate up to the bucket capacity.

Kraken's default budget is 15 calls per minute, so the client uses a bucket of
15 tokens refilled at 0.25 tokens/second.

Refill accounting:
    - Tokens are added in whole units: floor(elapsed * rate)
    - The refill anchor (last_update) only moves when at least one whole token
      was added, and it moves by exactly the time those tokens account for,
      so fractional progress towards the next token is never thrown away
    - While the bucket is full the anchor follows the clock (a full bucket
      does not bank time)

Usage:
    limiter = TokenBucket(capacity=15, rate=0.25)
    await limiter.acquire()  # suspends until a token is available
"""

import asyncio
import math
import time
from typing import Awaitable, Callable, Optional

from core.logging import get_logger


class TokenBucket:
    """
    Async token bucket.

    Attributes:
        capacity: Maximum number of tokens
        rate: Refill rate in tokens per second
        tokens: Tokens currently available (0 <= tokens <= capacity)
        last_update: Clock reading the refill is measured from

    Example:
        >>> limiter = TokenBucket(capacity=2, rate=1.0)
        >>> await limiter.acquire()
        >>> limiter.tokens
        1
    """

    def __init__(
        self,
        capacity: int,
        rate: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        """
        Create a full bucket.

        Args:
            capacity: Maximum number of tokens (>= 1)
            rate: Tokens added per second (> 0)
            clock: Monotonic clock in seconds (injectable for tests)
            sleep: Async sleep used while waiting (defaults to asyncio.sleep)

        Raises:
            ValueError: If capacity or rate is out of range
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")

        self._capacity = int(capacity)
        self._rate = float(rate)
        self._tokens = self._capacity
        self._clock = clock
        self._sleep = sleep or asyncio.sleep
        self._last_update = clock()
        self._lock = asyncio.Lock()
        self.logger = get_logger(__name__)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def tokens(self) -> int:
        return self._tokens

    @property
    def last_update(self) -> float:
        return self._last_update

    def wait_time(self) -> float:
        """Seconds to wait for one token at the configured rate."""
        return 1.0 / self._rate

    def refill(self) -> int:
        """
        Add the whole tokens accrued since the last update.

        Returns:
            int: Number of tokens actually added (after capping)
        """
        now = self._clock()

        # Full bucket: nothing to add, just keep the anchor current
        if self._tokens >= self._capacity:
            self._tokens = self._capacity
            self._last_update = now
            return 0

        elapsed = max(0.0, now - self._last_update)
        new_tokens = math.floor(elapsed * self._rate)
        if new_tokens <= 0:
            return 0

        before = self._tokens
        self._tokens = min(self._tokens + new_tokens, self._capacity)

        # Advance the anchor only by the time the added tokens account for
        if self._tokens >= self._capacity:
            self._last_update = now
        else:
            self._last_update += new_tokens / self._rate

        return self._tokens - before

    async def acquire(self) -> None:
        """
        Wait until a token is available, then consume it.

        Concurrent callers are served one at a time; the wait is an
        asynchronous sleep, so other tasks keep running.
        """
        async with self._lock:
            self.refill()
            # Empty bucket - sleep one token interval and re-check
            while self._tokens == 0:
                wait = self.wait_time()
                self.logger.debug(f"Rate limit reached, waiting for {wait:.2f}s")
                await self._sleep(wait)
                self.refill()
            self._tokens -= 1

    def __repr__(self) -> str:
        return f"TokenBucket(capacity={self._capacity}, rate={self._rate}, tokens={self._tokens})"
