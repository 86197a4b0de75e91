"""Core data models for identity and tracking."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Generic, TypeVar

from usertrack.exceptions import TrackingError

T = TypeVar("T")


class DeviceIdType(str, Enum):
    """How the device identifier was obtained."""

    PREFERRED = "idfa"  # Platform advertising identifier
    FALLBACK = "uuid"  # Random UUID, advertising id unavailable


class EventType(str, Enum):
    """Trackable user/session events. Values double as the default tag."""

    SEARCH_BUTTON_CLICK = "search_button_click"
    AD_CLICK = "ad_click"
    APP_LAUNCH = "app_launch"
    FLIGHT_SEARCH = "flight_search"
    HOTEL_SEARCH = "hotel_search"
    RENTAL_SEARCH = "rental_search"
    FILTER_APPLIED = "filter_applied"
    RESULT_SELECTED = "result_selected"
    BOOKING_ATTEMPT = "booking_attempt"
    LOCATION_SELECTED = "location_selected"
    DATE_SELECTED = "date_selected"


class Vertical(str, Enum):
    """Product category an event belongs to."""

    FLIGHT = "flight"
    HOTEL = "hotel"
    CAR = "car"
    GENERAL = "general"


class ManagerState(str, Enum):
    """Bootstrap state of a session manager."""

    NO_USER = "no_user"
    USER_PENDING = "user_pending"
    USER_READY = "user_ready"


@dataclass(frozen=True)
class DeviceIdentity:
    """Install-scoped identifiers. Stable once persisted."""

    device_id: str
    device_id_type: DeviceIdType
    vendor_id: str
    pseudo_id: str


@dataclass
class UserAccount:
    """Server-side user registered for this install."""

    user_id: int | None = None
    is_created: bool = False
    installed_at: datetime | None = None

    @property
    def is_valid(self) -> bool:
        """A user is valid only when created and holding an id."""
        return self.is_created and self.user_id is not None


@dataclass
class TrackingResult(Generic[T]):
    """Outcome of a tracking call: a decoded value or a typed error."""

    value: T | None = None
    error: TrackingError | None = None
    latency_ms: float = 0.0
    completed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def success(self) -> bool:
        """Check if the call succeeded."""
        return self.error is None and self.value is not None

    @classmethod
    def ok(cls, value: T, latency_ms: float = 0.0) -> "TrackingResult[T]":
        return cls(value=value, latency_ms=latency_ms)

    @classmethod
    def fail(cls, error: TrackingError, latency_ms: float = 0.0) -> "TrackingResult[T]":
        return cls(error=error, latency_ms=latency_ms)
