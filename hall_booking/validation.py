"""Structured input validation for the two public operations.

Validators collect every field problem before raising, so a caller gets the
full list in one round trip. Field names in the error map use the wire
(camelCase) spelling.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping

from .errors import ValidationError
from .models import AvailabilityQuery, BookingRequest, CustomerDetails

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 7
_CUSTOMER = "customerDetails."


class _Collector:
    def __init__(self) -> None:
        self.errors: dict[str, list[str]] = {}

    def add(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def validate_availability_query(payload: Any) -> AvailabilityQuery:
    errors = _Collector()
    data = _require_mapping(payload, errors)

    hall_id = _required_string(data, "hallId", errors)
    day = _date_field(data, "date", errors)
    start_time, end_time = _window_fields(data, errors)
    errors.raise_if_any()

    return AvailabilityQuery(hall_id=hall_id, date=day, start_time=start_time, end_time=end_time)


def validate_booking_request(payload: Any) -> BookingRequest:
    errors = _Collector()
    data = _require_mapping(payload, errors)

    venue_id = _required_string(data, "venueId", errors)
    hall_id = _required_string(data, "hallId", errors)
    day = _date_field(data, "date", errors)
    start_time, end_time = _window_fields(data, errors)

    guest_count = data.get("guestCount")
    if isinstance(guest_count, bool) or not isinstance(guest_count, int):
        errors.add("guestCount", "must be an integer")
        guest_count = 0
    elif guest_count < 1:
        errors.add("guestCount", "must be at least 1")

    customer = _customer_fields(data.get("customerDetails"), errors)
    errors.raise_if_any()

    return BookingRequest(
        venue_id=venue_id,
        hall_id=hall_id,
        date=day,
        start_time=start_time,
        end_time=end_time,
        guest_count=guest_count,
        customer=customer,
    )


def _require_mapping(payload: Any, errors: _Collector) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        errors.add("body", "must be a JSON object")
        errors.raise_if_any()
    return payload


def _required_string(
    data: Mapping[str, Any],
    key: str,
    errors: _Collector,
    min_length: int = 1,
    prefix: str = "",
) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        errors.add(prefix + key, "must be a string")
        return ""
    value = value.strip()
    if len(value) < min_length:
        errors.add(prefix + key, f"must be at least {min_length} characters")
    return value


def _date_field(data: Mapping[str, Any], key: str, errors: _Collector) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not _DATE_RE.match(value):
        errors.add(key, "must match YYYY-MM-DD")
        return ""
    try:
        date.fromisoformat(value)
    except ValueError:
        errors.add(key, "is not a valid calendar date")
    return value


def _window_fields(data: Mapping[str, Any], errors: _Collector) -> tuple[str, str]:
    start_time = _time_field(data, "startTime", errors)
    end_time = _time_field(data, "endTime", errors)
    if start_time and end_time and end_time <= start_time:
        errors.add("endTime", "must be later than startTime")
    return start_time, end_time


def _time_field(data: Mapping[str, Any], key: str, errors: _Collector) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not _TIME_RE.match(value):
        errors.add(key, "must match HH:MM (24h)")
        return ""
    return value


def _customer_fields(payload: Any, errors: _Collector) -> CustomerDetails:
    if not isinstance(payload, Mapping):
        errors.add("customerDetails", "must be an object")
        return CustomerDetails(name="", phone="", email="")

    name = _required_string(payload, "name", errors, min_length=MIN_NAME_LENGTH, prefix=_CUSTOMER)
    phone = _required_string(payload, "phone", errors, min_length=MIN_PHONE_LENGTH, prefix=_CUSTOMER)
    email = _required_string(payload, "email", errors, prefix=_CUSTOMER)
    if email and not _EMAIL_RE.match(email):
        errors.add(_CUSTOMER + "email", "must be a valid email address")

    return CustomerDetails(name=name, phone=phone, email=email)
