from .availability import AvailabilityChecker
from .booking import BookingCommitter
from .config import BookingSettings
from .engine import BookingEngine
from .errors import (
	BackendError,
	BookingError,
	ConflictError,
	RateLimitError,
	ReservationStorageError,
	ValidationError,
)
from .models import (
	AvailabilityQuery,
	AvailabilityResult,
	BookingConfirmation,
	BookingRequest,
	CustomerDetails,
	Hall,
	Reservation,
	ReservationStatus,
)
from .pricing import total_price
from .rate_limit import RateLimitDecision, RateLimiter, RateLimitProfile
from .store import DEMO_HALLS, HallCatalog, InMemoryReservationStore, ReservationStore
from .time_range import TimeWindow, duration_hours, overlaps
from .yaml_store import ReservationYamlRepository

__all__ = [
	"AvailabilityChecker",
	"BookingCommitter",
	"BookingSettings",
	"BookingEngine",
	"BackendError",
	"BookingError",
	"ConflictError",
	"RateLimitError",
	"ReservationStorageError",
	"ValidationError",
	"AvailabilityQuery",
	"AvailabilityResult",
	"BookingConfirmation",
	"BookingRequest",
	"CustomerDetails",
	"Hall",
	"Reservation",
	"ReservationStatus",
	"total_price",
	"RateLimitDecision",
	"RateLimiter",
	"RateLimitProfile",
	"DEMO_HALLS",
	"HallCatalog",
	"InMemoryReservationStore",
	"ReservationStore",
	"TimeWindow",
	"duration_hours",
	"overlaps",
	"ReservationYamlRepository",
]
