"""Runtime settings for the booking engine.

Values come from environment variables; explicit arguments passed to
`create_app` take precedence. Leaving `HALL_BOOKING_DATA_DIR` unset runs the
engine in demo mode.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping
import os

from .booking import DEFAULT_PRICE_PER_HOUR
from .rate_limit import RateLimitProfile

ENV_PREFIX = "HALL_BOOKING_"

AVAILABILITY_LIMIT = RateLimitProfile(max_tokens=100, window_ms=15 * 60_000)
BOOKING_LIMIT = RateLimitProfile(max_tokens=20, window_ms=60 * 60_000)
HALL_LOOKUP_LIMIT = RateLimitProfile(max_tokens=60, window_ms=15 * 60_000)


@dataclass(frozen=True)
class BookingSettings:
    data_dir: Path | None = None
    default_price_per_hour: Decimal = DEFAULT_PRICE_PER_HOUR
    availability_limit: RateLimitProfile = field(default=AVAILABILITY_LIMIT)
    booking_limit: RateLimitProfile = field(default=BOOKING_LIMIT)
    hall_lookup_limit: RateLimitProfile = field(default=HALL_LOOKUP_LIMIT)

    @property
    def demo_mode(self) -> bool:
        return self.data_dir is None

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> "BookingSettings":
        env = os.environ if environ is None else environ

        data_dir = env.get(f"{ENV_PREFIX}DATA_DIR", "").strip()
        return BookingSettings(
            data_dir=Path(data_dir) if data_dir else None,
            default_price_per_hour=_decimal(env, "DEFAULT_PRICE", DEFAULT_PRICE_PER_HOUR),
            availability_limit=RateLimitProfile(
                max_tokens=_int(env, "AVAILABILITY_LIMIT", AVAILABILITY_LIMIT.max_tokens),
                window_ms=_int(env, "AVAILABILITY_WINDOW_MS", AVAILABILITY_LIMIT.window_ms),
            ),
            booking_limit=RateLimitProfile(
                max_tokens=_int(env, "BOOKING_LIMIT", BOOKING_LIMIT.max_tokens),
                window_ms=_int(env, "BOOKING_WINDOW_MS", BOOKING_LIMIT.window_ms),
            ),
            hall_lookup_limit=RateLimitProfile(
                max_tokens=_int(env, "HALL_LOOKUP_LIMIT", HALL_LOOKUP_LIMIT.max_tokens),
                window_ms=_int(env, "HALL_LOOKUP_WINDOW_MS", HALL_LOOKUP_LIMIT.window_ms),
            ),
        )


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from error


def _decimal(env: Mapping[str, str], name: str, default: Decimal) -> Decimal:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as error:
        raise ValueError(f"{ENV_PREFIX}{name} must be a decimal amount, got {raw!r}") from error
    if not value.is_finite() or value < 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be a non-negative amount")
    return value
