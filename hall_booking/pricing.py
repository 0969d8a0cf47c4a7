from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

GUEST_SURCHARGE = Decimal("1.50")
_CENTS = Decimal("0.01")


def total_price(hours: float, price_per_hour: Decimal | float | int, guest_count: int) -> Decimal:
    """Return the charge for a booking: hourly rate plus a flat per-guest fee.

    The result is rounded half-up to two decimal places.
    """
    base = _to_decimal(hours) * _to_decimal(price_per_hour)
    surcharge = GUEST_SURCHARGE * guest_count
    return (base + surcharge).quantize(_CENTS, rounding=ROUND_HALF_UP)


def _to_decimal(value: Decimal | float | int) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
