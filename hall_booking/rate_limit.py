from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Callable
import time


@dataclass
class RateLimitBucket:
    tokens: int
    last_refill_ms: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_ms: int


@dataclass(frozen=True)
class RateLimitProfile:
    max_tokens: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be greater than zero")
        if self.window_ms <= 0:
            raise ValueError("window_ms must be greater than zero")


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class RateLimiter:
    """Per-key token bucket with a full refill once the window has elapsed.

    Buckets are created lazily and kept for the lifetime of the limiter. The
    bucket map and clock are supplied by the owner so tests and multi-process
    deployments can swap them.
    """

    def __init__(
        self,
        clock_ms: Callable[[], int] | None = None,
        buckets: dict[str, RateLimitBucket] | None = None,
    ) -> None:
        self._clock_ms: Callable[[], int] = clock_ms or _monotonic_ms
        self._buckets: dict[str, RateLimitBucket] = buckets if buckets is not None else {}
        self._lock = Lock()

    def allow(self, key: str, max_tokens: int, window_ms: int) -> RateLimitDecision:
        with self._lock:
            now = self._clock_ms()
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = RateLimitBucket(tokens=max_tokens, last_refill_ms=now)
                self._buckets[key] = bucket

            if now - bucket.last_refill_ms > window_ms:
                bucket.tokens = max_tokens
                bucket.last_refill_ms = now

            reset_ms = window_ms - (now - bucket.last_refill_ms)
            if bucket.tokens <= 0:
                return RateLimitDecision(allowed=False, remaining=0, reset_ms=reset_ms)

            bucket.tokens -= 1
            return RateLimitDecision(allowed=True, remaining=bucket.tokens, reset_ms=reset_ms)

    def allow_profile(self, key: str, profile: RateLimitProfile) -> RateLimitDecision:
        return self.allow(key, profile.max_tokens, profile.window_ms)
