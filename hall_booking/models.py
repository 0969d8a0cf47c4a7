from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .time_range import TimeWindow


class ReservationStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"


@dataclass(frozen=True)
class Hall:
    id: str
    venue_id: str
    name: str
    price_per_hour: Decimal
    capacity_min: int
    capacity_max: int
    amenities: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "venue_id": self.venue_id,
            "name": self.name,
            "price_per_hour": str(self.price_per_hour),
            "capacity_min": self.capacity_min,
            "capacity_max": self.capacity_max,
            "amenities": list(self.amenities),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Hall":
        return Hall(
            id=str(data["id"]),
            venue_id=str(data["venue_id"]),
            name=str(data.get("name", data["id"])),
            price_per_hour=Decimal(str(data["price_per_hour"])),
            capacity_min=int(data.get("capacity_min", 1)),
            capacity_max=int(data.get("capacity_max", 1)),
            amenities=tuple(str(item) for item in data.get("amenities") or ()),
        )


@dataclass(frozen=True)
class CustomerDetails:
    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class AvailabilityQuery:
    hall_id: str
    date: str
    start_time: str
    end_time: str

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)


@dataclass(frozen=True)
class BookingRequest:
    venue_id: str
    hall_id: str
    date: str
    start_time: str
    end_time: str
    guest_count: int
    customer: CustomerDetails

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)


@dataclass(frozen=True)
class Reservation:
    id: str
    venue_id: str
    hall_id: str
    date: str
    start_time: str
    end_time: str
    guest_count: int
    total_amount: Decimal
    status: ReservationStatus
    customer: CustomerDetails
    created_at: datetime
    caller: str | None = None

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_time, self.end_time)

    @property
    def is_blocking(self) -> bool:
        return self.status is ReservationStatus.CONFIRMED

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "venue_id": self.venue_id,
            "hall_id": self.hall_id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "guest_count": self.guest_count,
            "total_amount": str(self.total_amount),
            "status": self.status.value,
            "customer_name": self.customer.name,
            "customer_phone": self.customer.phone,
            "customer_email": self.customer.email,
            "created_at": self.created_at.isoformat(timespec="seconds"),
        }
        if self.caller is not None:
            payload["caller"] = self.caller
        return payload

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Reservation":
        return Reservation(
            id=str(data["id"]),
            venue_id=str(data["venue_id"]),
            hall_id=str(data["hall_id"]),
            date=str(data["date"]),
            start_time=str(data["start_time"]),
            end_time=str(data["end_time"]),
            guest_count=int(data["guest_count"]),
            total_amount=Decimal(str(data["total_amount"])),
            status=ReservationStatus(str(data.get("status", ReservationStatus.CONFIRMED.value))),
            customer=CustomerDetails(
                name=str(data.get("customer_name", "")),
                phone=str(data.get("customer_phone", "")),
                email=str(data.get("customer_email", "")),
            ),
            created_at=datetime.fromisoformat(str(data["created_at"])),
            caller=(str(data["caller"]) if data.get("caller") is not None else None),
        )


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflicts: tuple[TimeWindow, ...] = ()
    demo: bool = False
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "available": self.available,
            "conflicts": [window.to_dict() for window in self.conflicts],
        }
        if self.demo:
            payload["demo"] = True
            payload["note"] = self.note
        return payload


@dataclass(frozen=True)
class BookingConfirmation:
    reservation: Reservation
    demo: bool = False
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.reservation.id,
            "status": self.reservation.status.value,
            "totalAmount": float(self.reservation.total_amount),
            "user": self.reservation.caller or "guest",
        }
        if self.demo:
            payload["demo"] = True
            payload["note"] = self.note
        return payload
