from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from threading import Lock
from typing import Callable
from uuid import uuid4
import logging
import weakref

from .availability import AvailabilityChecker
from .errors import BackendError, ConflictError
from .models import (
    AvailabilityQuery,
    BookingConfirmation,
    BookingRequest,
    Reservation,
    ReservationStatus,
)
from .pricing import total_price
from .store import HallCatalog, ReservationStore
from .time_range import duration_hours

logger = logging.getLogger(__name__)

DEFAULT_PRICE_PER_HOUR = Decimal("150")
DEMO_BOOKING_NOTE = "Mock booking (configure a data directory to persist)"


class SlotLocks:
    """One lock per (hall_id, date), created on first use.

    Entries are held weakly: a slot drops out of the registry once no caller
    references its lock.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[tuple[str, str], Lock] = weakref.WeakValueDictionary()
        self._registry_lock = Lock()

    def for_slot(self, hall_id: str, date: str) -> Lock:
        with self._registry_lock:
            lock = self._locks.get((hall_id, date))
            if lock is None:
                lock = Lock()
                self._locks[(hall_id, date)] = lock
            return lock


class BookingCommitter:
    """Price, conflict-check and persist one booking request.

    The conflict check and the insert for a given hall and date run under the
    same lock, and the store rejects overlapping confirmed rows on write, so
    concurrent requests for overlapping windows cannot both be committed.
    """

    def __init__(
        self,
        store: ReservationStore | None,
        catalog: HallCatalog | None,
        checker: AvailabilityChecker,
        default_price_per_hour: Decimal = DEFAULT_PRICE_PER_HOUR,
        now_provider: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        slot_locks: SlotLocks | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._checker = checker
        self._default_price = default_price_per_hour
        self._clock: Callable[[], datetime] = now_provider or datetime.now
        self._new_id: Callable[[], str] = id_factory or (lambda: str(uuid4()))
        self._slot_locks = slot_locks or SlotLocks()

    def price_per_hour(self, hall_id: str) -> Decimal:
        if self._catalog is None:
            return self._default_price
        try:
            hall = self._catalog.get_hall(hall_id)
        except BackendError:
            raise
        except Exception as error:
            logger.exception("Hall lookup failed for %s", hall_id)
            raise BackendError() from error
        if hall is None:
            logger.info("Hall %s not in catalog, using default hourly rate %s", hall_id, self._default_price)
            return self._default_price
        return hall.price_per_hour

    def quote(self, request: BookingRequest) -> Decimal:
        hours = duration_hours(request.start_time, request.end_time)
        return total_price(hours, self.price_per_hour(request.hall_id), request.guest_count)

    def book(self, request: BookingRequest, caller: str | None = None) -> BookingConfirmation:
        amount = self.quote(request)

        if self._store is None:
            reservation = self._build_reservation(request, amount, caller)
            return BookingConfirmation(reservation=reservation, demo=True, note=DEMO_BOOKING_NOTE)

        query = AvailabilityQuery(
            hall_id=request.hall_id,
            date=request.date,
            start_time=request.start_time,
            end_time=request.end_time,
        )
        with self._slot_locks.for_slot(request.hall_id, request.date):
            conflicts = self._checker.find_conflicts(query)
            if conflicts:
                logger.warning(
                    "Booking rejected for hall %s on %s %s-%s: %d conflict(s)",
                    request.hall_id,
                    request.date,
                    request.start_time,
                    request.end_time,
                    len(conflicts),
                )
                raise ConflictError(conflicts)

            reservation = self._build_reservation(request, amount, caller)
            try:
                stored = self._store.insert(reservation)
            except (ConflictError, BackendError):
                raise
            except Exception as error:
                logger.exception("Reservation insert failed for hall %s on %s", request.hall_id, request.date)
                raise BackendError() from error

        logger.info(
            "Reservation %s confirmed for hall %s on %s %s-%s (total %s)",
            stored.id,
            stored.hall_id,
            stored.date,
            stored.start_time,
            stored.end_time,
            stored.total_amount,
        )
        return BookingConfirmation(reservation=stored)

    def _build_reservation(self, request: BookingRequest, amount: Decimal, caller: str | None) -> Reservation:
        return Reservation(
            id=self._new_id(),
            venue_id=request.venue_id,
            hall_id=request.hall_id,
            date=request.date,
            start_time=request.start_time,
            end_time=request.end_time,
            guest_count=request.guest_count,
            total_amount=amount,
            status=ReservationStatus.CONFIRMED,
            customer=request.customer,
            created_at=self._clock(),
            caller=caller,
        )
