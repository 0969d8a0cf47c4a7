"""Availability-and-booking engine: rate-limit gate, check, commit.

Both public operations follow the same order: the caller is throttled first,
then the input is validated, then the store is consulted. Every failure is
raised as a typed `BookingError` subclass for the boundary layer to map.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable
import logging
import random

from .availability import AvailabilityChecker
from .booking import BookingCommitter
from .config import BookingSettings
from .errors import RateLimitError
from .models import AvailabilityResult, BookingConfirmation, Hall
from .rate_limit import RateLimiter, RateLimitProfile
from .store import DEMO_HALLS, HallCatalog, InMemoryReservationStore, ReservationStore
from .validation import validate_availability_query, validate_booking_request
from .yaml_store import ReservationYamlRepository

logger = logging.getLogger(__name__)

ANONYMOUS_CALLER = "anon"


class BookingEngine:
    def __init__(
        self,
        store: ReservationStore | None,
        catalog: HallCatalog | None,
        settings: BookingSettings | None = None,
        rate_limiter: RateLimiter | None = None,
        now_provider: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.settings = settings or BookingSettings()
        self.store = store
        self.catalog = catalog
        self.rate_limiter = rate_limiter or RateLimiter()
        self.checker = AvailabilityChecker(store, rng=rng)
        self.committer = BookingCommitter(
            store,
            catalog,
            self.checker,
            default_price_per_hour=self.settings.default_price_per_hour,
            now_provider=now_provider,
            id_factory=id_factory,
        )

    @staticmethod
    def from_settings(settings: BookingSettings, **kwargs: Any) -> "BookingEngine":
        """Build an engine backed by YAML files, or a demo engine when no data dir is set."""
        if settings.data_dir is None:
            logger.warning("No data directory configured; running in demo mode with synthetic results")
            return BookingEngine(None, InMemoryReservationStore(halls=DEMO_HALLS), settings=settings, **kwargs)

        repository = ReservationYamlRepository(settings.data_dir)
        if not repository.list_halls():
            repository.seed_halls(DEMO_HALLS)
        return BookingEngine(repository, repository, settings=settings, **kwargs)

    @property
    def demo_mode(self) -> bool:
        return self.store is None

    def check_availability(self, venue_id: str, payload: Any, caller_key: str | None = None) -> AvailabilityResult:
        caller = caller_key or ANONYMOUS_CALLER
        self._gate(f"avail:{venue_id}:{caller}", self.settings.availability_limit)
        query = validate_availability_query(payload)
        return self.checker.check(query)

    def create_booking(
        self,
        payload: Any,
        caller_key: str | None = None,
        caller_subject: str | None = None,
    ) -> BookingConfirmation:
        caller = caller_key or ANONYMOUS_CALLER
        self._gate(f"book:{caller}", self.settings.booking_limit)
        request = validate_booking_request(payload)
        return self.committer.book(request, caller=caller_subject)

    def get_hall(self, hall_id: str, caller_key: str | None = None) -> Hall | None:
        caller = caller_key or ANONYMOUS_CALLER
        self._gate(f"halls:{hall_id}:{caller}", self.settings.hall_lookup_limit)
        if self.catalog is None:
            return None
        return self.catalog.get_hall(hall_id)

    def _gate(self, key: str, profile: RateLimitProfile) -> None:
        decision = self.rate_limiter.allow_profile(key, profile)
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s (reset in %d ms)", key, decision.reset_ms)
            raise RateLimitError(decision.reset_ms)
