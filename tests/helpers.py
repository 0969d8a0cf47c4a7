from datetime import datetime
from decimal import Decimal
import random

from hall_booking import CustomerDetails, Reservation, ReservationStatus

FIXED_NOW = datetime(2025, 5, 20, 9, 0)


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def make_reservation(
    reservation_id: str,
    start_time: str,
    end_time: str,
    hall_id: str = "h_1",
    date: str = "2025-06-01",
    status: ReservationStatus = ReservationStatus.CONFIRMED,
) -> Reservation:
    return Reservation(
        id=reservation_id,
        venue_id="v_1",
        hall_id=hall_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        guest_count=10,
        total_amount=Decimal("100.00"),
        status=status,
        customer=CustomerDetails(name="Grace Hopper", phone="5550100200", email="grace@example.com"),
        created_at=FIXED_NOW,
    )


def booking_payload(**overrides):
    payload = {
        "venueId": "v_1",
        "hallId": "h_1",
        "date": "2025-06-01",
        "startTime": "10:00",
        "endTime": "12:00",
        "guestCount": 50,
        "customerDetails": {"name": "Ada Lovelace", "phone": "+44 20 7946 0000", "email": "ada@example.com"},
    }
    payload.update(overrides)
    return payload
