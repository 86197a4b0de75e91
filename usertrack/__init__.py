"""Anonymous install identity and event tracking client."""

from usertrack.client import TrackingClient
from usertrack.manager import SessionManager, build_session_manager
from usertrack.models import (
    DeviceIdentity,
    DeviceIdType,
    EventType,
    ManagerState,
    TrackingResult,
    UserAccount,
    Vertical,
)
from usertrack.schemas import Attribution

__version__ = "0.1.0"

__all__ = [
    "Attribution",
    "DeviceIdType",
    "DeviceIdentity",
    "EventType",
    "ManagerState",
    "SessionManager",
    "TrackingClient",
    "TrackingResult",
    "UserAccount",
    "Vertical",
    "build_session_manager",
]
