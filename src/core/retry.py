# src/core/retry.py — v1
"""Call policy: retry with exponential backoff, per-client rate limiting, timeout.

One CallPolicy instance is built from Settings and shared by every outbound
caller (source clients and the model-backed analyzer). Rate limiter state
is never shared: each client asks the policy for its own limiter.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from salesintel.core.errors import (
    ConfigurationError,
    RetryExhaustedError,
    TransientNetworkError,
    UpstreamApplicationError,
)

if TYPE_CHECKING:
    from salesintel.config.settings import Settings

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry transient errors with a doubling, capped delay."""

    max_attempts: int = 3
    base_delay_s: float = 1.0
    max_delay_s: float = 10.0
    backoff_factor: float = 2.0
    jitter: bool = False

    def compute_delay(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based)."""
        delay = self.base_delay_s * (self.backoff_factor ** (attempt - 1))
        delay = min(delay, self.max_delay_s)
        if self.jitter:
            delay *= 0.5 + random.random()  # noqa: S311
        return delay

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        if isinstance(error, (ConfigurationError, UpstreamApplicationError)):
            return False
        return isinstance(error, TransientNetworkError)

    async def run(
        self,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        operation: str = "call",
        sleep: SleepFn = asyncio.sleep,
        **kwargs: Any,
    ) -> Any:
        """Execute an async callable under this policy.

        Raises:
            ConfigurationError, UpstreamApplicationError: Immediately.
            RetryExhaustedError: When every attempt failed transiently.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await fn(*args, **kwargs)
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                if attempt >= self.max_attempts:
                    raise RetryExhaustedError(operation, attempt, e) from e
                delay = self.compute_delay(attempt)
                logger.warning(
                    "%s failed (attempt %d/%d): %s, retrying in %.2fs",
                    operation, attempt, self.max_attempts, e, delay,
                )
                await sleep(delay)


class RateLimiter:
    """Enforce a minimum spacing between calls of one client instance.

    Calls arriving early wait for their slot; none are dropped. Waiters are
    served one at a time in lock acquisition order.
    """

    def __init__(
        self,
        min_interval_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if min_interval_s < 0:
            raise ValueError("min_interval_s must be >= 0")
        self._min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, calls_per_minute: int) -> RateLimiter:
        return cls(60.0 / calls_per_minute)

    @property
    def min_interval_s(self) -> float:
        return self._min_interval_s

    async def acquire(self) -> float:
        """Wait for the next slot. Returns the seconds spent waiting."""
        async with self._lock:
            waited = 0.0
            if self._last_call is not None:
                waited = self._last_call + self._min_interval_s - self._clock()
                if waited > 0:
                    logger.debug("Rate limiting: waiting %.3fs", waited)
                    await self._sleep(waited)
                else:
                    waited = 0.0
            self._last_call = self._clock()
            return waited


@dataclass(frozen=True)
class CallPolicy:
    """Retry, rate limit and timeout for outbound calls, in one place."""

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    calls_per_minute: int = 600
    timeout_s: float = 10.0

    def new_rate_limiter(self) -> RateLimiter:
        return RateLimiter.per_minute(self.calls_per_minute)

    def with_overrides(self, **changes: Any) -> CallPolicy:
        """Copy of this policy with some fields replaced (e.g. a slower upstream)."""
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: Settings) -> CallPolicy:
        return cls(
            retry=RetryPolicy(
                max_attempts=settings.retry_max_attempts,
                base_delay_s=settings.retry_base_delay_s,
                max_delay_s=settings.retry_max_delay_s,
            ),
            calls_per_minute=settings.source_rate_limit_per_minute,
            timeout_s=settings.serpapi_timeout_s,
        )
