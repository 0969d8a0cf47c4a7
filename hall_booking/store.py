"""Store interfaces and the in-memory implementation.

Stores must be swappable: the engine only talks to `HallCatalog` and
`ReservationStore`. `insert` enforces the non-overlap constraint itself, so
a write that would put two confirmed reservations on the same hall-time is
rejected even if the caller skipped its own check.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from threading import Lock
from typing import Iterable

from .errors import ConflictError
from .models import Hall, Reservation
from .time_range import TimeWindow, find_conflicts

DEMO_HALLS: tuple[Hall, ...] = (
    Hall(
        id="h_1",
        venue_id="v_1",
        name="Emerald Hall",
        price_per_hour=Decimal("150"),
        capacity_min=50,
        capacity_max=200,
        amenities=("Stage", "Sound system", "Lighting"),
    ),
    Hall(
        id="h_2",
        venue_id="v_1",
        name="Sapphire Ballroom",
        price_per_hour=Decimal("300"),
        capacity_min=100,
        capacity_max=400,
        amenities=("Chandeliers", "Dance floor", "Catering area"),
    ),
)


class HallCatalog(ABC):
    """Read-only lookup of hall reference data."""

    @abstractmethod
    def get_hall(self, hall_id: str) -> Hall | None:
        """Return a hall by ID, or None if not found."""
        ...

    @abstractmethod
    def list_halls(self) -> list[Hall]:
        ...


class ReservationStore(ABC):
    """Persistence for reservations."""

    @abstractmethod
    def list_by_hall_and_date(self, hall_id: str, date: str) -> list[Reservation]:
        """Return every reservation for the hall on that date, regardless of status."""
        ...

    @abstractmethod
    def insert(self, reservation: Reservation) -> Reservation:
        """Persist a reservation.

        Raises:
            ConflictError: If a confirmed reservation would overlap another
                confirmed reservation on the same hall and date.
            BackendError: If the underlying storage fails.
        """
        ...


def blocking_windows(existing: Iterable[Reservation]) -> list[TimeWindow]:
    """Return the windows of confirmed reservations, ordered by start time."""
    return sorted(
        (row.window for row in existing if row.is_blocking),
        key=lambda window: (window.start_time, window.end_time),
    )


def blocking_conflicts(reservation: Reservation, existing: Iterable[Reservation]) -> list[TimeWindow]:
    if not reservation.is_blocking:
        return []
    return find_conflicts(reservation.window, blocking_windows(existing))


class InMemoryReservationStore(HallCatalog, ReservationStore):
    """Process-local store; the backing collections are supplied by the owner."""

    def __init__(
        self,
        reservations: dict[str, Reservation] | None = None,
        halls: Iterable[Hall] | None = None,
    ) -> None:
        self._items: dict[str, Reservation] = reservations if reservations is not None else {}
        self._halls: dict[str, Hall] = {hall.id: hall for hall in (halls or ())}
        self._lock = Lock()

    def get_hall(self, hall_id: str) -> Hall | None:
        return self._halls.get(hall_id)

    def list_halls(self) -> list[Hall]:
        return list(self._halls.values())

    def list_by_hall_and_date(self, hall_id: str, date: str) -> list[Reservation]:
        with self._lock:
            return [row for row in self._items.values() if row.hall_id == hall_id and row.date == date]

    def list_all(self) -> list[Reservation]:
        with self._lock:
            return list(self._items.values())

    def insert(self, reservation: Reservation) -> Reservation:
        with self._lock:
            same_slot = [
                row
                for row in self._items.values()
                if row.hall_id == reservation.hall_id and row.date == reservation.date
            ]
            conflicts = blocking_conflicts(reservation, same_slot)
            if conflicts:
                raise ConflictError(conflicts)
            self._items[reservation.id] = reservation
            return reservation
