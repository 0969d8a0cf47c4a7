"""Error taxonomy for the booking engine.

Each category maps to one response class at the boundary layer, so callers
can tell a bad request from a taken slot, a throttled caller or a broken
backend.
"""

from __future__ import annotations

from typing import Iterable

from .time_range import TimeWindow


class BookingError(Exception):
    """Base error with a machine-readable code and a user-safe message."""

    code = "BOOKING_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(BookingError):
    code = "VALIDATION_FAILED"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__("Validation failed")
        self.errors = errors


class ConflictError(BookingError):
    code = "TIME_CONFLICT"

    def __init__(self, conflicts: Iterable[TimeWindow] = ()) -> None:
        super().__init__("Time conflicts with existing booking")
        self.conflicts = tuple(conflicts)


class RateLimitError(BookingError):
    code = "RATE_LIMITED"

    def __init__(self, reset_ms: int) -> None:
        super().__init__("Too many requests")
        self.reset_ms = reset_ms


class BackendError(BookingError):
    code = "BACKEND_ERROR"

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)


class ReservationStorageError(BackendError):
    pass
