from __future__ import annotations

import logging
import random

from .errors import BackendError
from .models import AvailabilityQuery, AvailabilityResult
from .store import ReservationStore, blocking_windows
from .time_range import TimeWindow, find_conflicts

logger = logging.getLogger(__name__)

DEMO_CONFLICT_PROBABILITY = 0.2
DEMO_CONFLICT_WINDOW = TimeWindow("10:00", "12:00")
DEMO_AVAILABILITY_NOTE = "Synthetic availability (no reservation store configured)"


class AvailabilityChecker:
    """Answer whether a hall window is free on a date.

    Only confirmed reservations block; pending ones are ignored. Without a
    store the checker runs in demo mode and every result is marked as such.
    """

    def __init__(self, store: ReservationStore | None, rng: random.Random | None = None) -> None:
        self._store = store
        self._rng = rng or random.Random()

    @property
    def demo_mode(self) -> bool:
        return self._store is None

    def check(self, query: AvailabilityQuery) -> AvailabilityResult:
        if self._store is None:
            return self._demo_result()

        conflicts = self.find_conflicts(query)
        return AvailabilityResult(available=not conflicts, conflicts=tuple(conflicts))

    def find_conflicts(self, query: AvailabilityQuery) -> list[TimeWindow]:
        if self._store is None:
            raise BackendError("No reservation store configured")

        try:
            existing = self._store.list_by_hall_and_date(query.hall_id, query.date)
        except BackendError:
            raise
        except Exception as error:
            logger.exception("Reservation lookup failed for hall %s on %s", query.hall_id, query.date)
            raise BackendError() from error

        return find_conflicts(query.window, blocking_windows(existing))

    def _demo_result(self) -> AvailabilityResult:
        if self._rng.random() < DEMO_CONFLICT_PROBABILITY:
            return AvailabilityResult(
                available=False,
                conflicts=(DEMO_CONFLICT_WINDOW,),
                demo=True,
                note=DEMO_AVAILABILITY_NOTE,
            )
        return AvailabilityResult(available=True, demo=True, note=DEMO_AVAILABILITY_NOTE)
