"""User bootstrap and session/event tracking."""

import asyncio
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import structlog

from usertrack.client import TrackingClient
from usertrack.config import Settings, get_settings
from usertrack.exceptions import PreconditionError, StorageError
from usertrack.identifiers import IdentifierProvisioner
from usertrack.models import EventType, ManagerState, TrackingResult, Vertical
from usertrack.platform import (
    PlatformIdentifiers,
    SettingsPlatform,
    current_country_code,
    current_language_code,
)
from usertrack.schemas import (
    Attribution,
    SessionCreated,
    SessionCreationRequest,
    UserCreated,
    UserCreationRequest,
)
from usertrack.storage.backends import JsonFileStore, KeyValueStore, MemoryStore
from usertrack.storage.identity import IdentityStore

logger = structlog.get_logger(__name__)


class SessionManager:
    """
    Bootstrap-or-resume the install's user and report events against it.

    State moves NO_USER -> USER_PENDING -> USER_READY. Sessions are only sent
    once a user id is known. In-memory fields change only after a response has
    been received, on the event loop that owns the manager.
    """

    def __init__(
        self,
        client: TrackingClient,
        provisioner: IdentifierProvisioner,
        store: IdentityStore,
        settings: Settings | None = None,
        platform: PlatformIdentifiers | None = None,
    ):
        self.client = client
        self.provisioner = provisioner
        self.store = store
        self.settings = settings or get_settings()
        self.platform = platform or provisioner.platform

        self.user_id: int | None = None
        self.current_session_id: int | None = None
        self.is_user_created = False
        self._state = ManagerState.NO_USER
        self._pending: set[asyncio.Task[TrackingResult[SessionCreated]]] = set()

        self._load_stored_user_data()

    def _load_stored_user_data(self) -> None:
        account = self.store.load_account()
        self.user_id = account.user_id
        self.is_user_created = account.is_created
        if account.is_valid:
            self._state = ManagerState.USER_READY
            logger.debug("stored_user_loaded", user_id=account.user_id)

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def is_valid_user(self) -> bool:
        """Check if a user exists and is valid."""
        return self.is_user_created and self.user_id is not None

    @property
    def install_date(self) -> datetime | None:
        return self.store.install_date()

    async def initialize(self) -> ManagerState:
        """
        Resume the stored user or create a new one, then report an app launch.

        A failed user creation leaves the manager in USER_PENDING. Nothing is
        retried; call ``initialize()`` again (e.g. on next launch).

        Returns:
            The state after the bootstrap attempt
        """
        if self.is_valid_user:
            logger.info("user_exists", user_id=self.user_id)
            self._state = ManagerState.USER_READY
            self._schedule_launch_session()
            return self._state

        self._state = ManagerState.USER_PENDING
        logger.info("user_creating")

        identity = self.provisioner.get_or_create_identity()
        request = UserCreationRequest(
            device_id=identity.device_id,
            device_id_type=identity.device_id_type.value,
            app=self.settings.app_code,
            vendor_id=identity.vendor_id,
            pseudo_id=identity.pseudo_id,
            email=None,
            acquired_route=self.settings.default_acquired_route,
            referrer_url=None,
        )

        result = await self.client.create_user(request)
        if result.success:
            self._handle_user_creation_success(result.value)
        else:
            logger.error("user_creation_failed", **result.error.to_dict())

        return self._state

    def _handle_user_creation_success(self, response: UserCreated) -> None:
        self.store.save_account(response.user_id)
        self.user_id = response.user_id
        self.is_user_created = True
        self._state = ManagerState.USER_READY

        logger.info("user_created", user_id=response.user_id, msg=response.msg)
        self._schedule_launch_session()

    def _schedule_launch_session(self) -> None:
        """Fire-and-forget app launch session."""
        task = asyncio.create_task(
            self.create_session(
                EventType.APP_LAUNCH,
                vertical=Vertical(self.settings.launch_vertical),
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def wait_for_pending(self) -> None:
        """Wait for scheduled sessions to finish."""
        if self._pending:
            await asyncio.gather(*self._pending)

    async def create_session(
        self,
        event_type: EventType,
        vertical: Vertical = Vertical.FLIGHT,
        tag: str | None = None,
        attribution: Attribution | Mapping[str, Any] | None = None,
    ) -> TrackingResult[SessionCreated]:
        """
        Report one event as a new session.

        Args:
            event_type: The event being tracked
            vertical: Product category of the event
            tag: Free-text label; None means the event type's value
            attribution: Campaign metadata, structured or as a plain mapping

        Returns:
            TrackingResult with the created session or the failure
        """
        user_id = self.user_id
        if user_id is None:
            error = PreconditionError("Cannot create session: User ID not available")
            logger.warning("session_skipped_no_user", event_type=event_type.value)
            return TrackingResult.fail(error)

        if attribution is not None and not isinstance(attribution, Attribution):
            attribution = Attribution.from_mapping(attribution)

        request = SessionCreationRequest(
            user_id=user_id,
            type=self.settings.default_session_type,
            tag=tag if tag is not None else event_type.value,
            route=self.settings.default_session_route,
            vertical=vertical.value,
            country_code=current_country_code(self.platform, self.settings.default_country_code),
            attribution=attribution,
        )

        result = await self.client.create_session(request)
        if result.success:
            self.current_session_id = result.value.user_session_id
            logger.info(
                "session_created",
                event_type=event_type.value,
                user_id=user_id,
                session_id=result.value.user_session_id,
            )
            logger.debug(
                "session_created_details",
                type=request.type,
                tag=request.tag,
                route=request.route,
                vertical=request.vertical,
                country_code=request.country_code,
            )
        else:
            logger.error(
                "session_create_failed",
                event_type=event_type.value,
                **result.error.to_dict(),
            )
        return result

    async def track_search_button_click(
        self, vertical: Vertical = Vertical.FLIGHT
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.SEARCH_BUTTON_CLICK, vertical, tag="search")

    async def track_flight_search(self) -> TrackingResult[SessionCreated]:
        return await self.create_session(
            EventType.FLIGHT_SEARCH, Vertical.FLIGHT, tag="flight_search"
        )

    async def track_hotel_search(self) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.HOTEL_SEARCH, Vertical.HOTEL, tag="hotel_search")

    async def track_rental_search(self) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.RENTAL_SEARCH, Vertical.CAR, tag="rental_search")

    async def track_ad_click(
        self,
        attribution: Attribution | Mapping[str, Any] | None = None,
        vertical: Vertical = Vertical.FLIGHT,
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.AD_CLICK, vertical, attribution=attribution)

    async def track_filter_applied(
        self, vertical: Vertical = Vertical.FLIGHT
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.FILTER_APPLIED, vertical)

    async def track_result_selected(
        self, vertical: Vertical = Vertical.FLIGHT
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.RESULT_SELECTED, vertical)

    async def track_booking_attempt(
        self, vertical: Vertical = Vertical.FLIGHT
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.BOOKING_ATTEMPT, vertical)

    async def track_location_selected(
        self, vertical: Vertical = Vertical.FLIGHT
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.LOCATION_SELECTED, vertical)

    async def track_date_selected(
        self, vertical: Vertical = Vertical.FLIGHT
    ) -> TrackingResult[SessionCreated]:
        return await self.create_session(EventType.DATE_SELECTED, vertical)

    def clear_user_data(self) -> None:
        """Forget the account (logout / testing). Device identifiers are kept."""
        self.store.clear_account()
        self.user_id = None
        self.current_session_id = None
        self.is_user_created = False
        self._state = ManagerState.NO_USER
        logger.info("user_data_cleared")

    def app_info(self) -> dict[str, Any]:
        """App and locale details for debugging."""
        return {
            "app_code": self.settings.app_code,
            "app_name": self.settings.app_name,
            "app_version": self.settings.full_app_version,
            "country_code": current_country_code(
                self.platform, self.settings.default_country_code
            ),
            "language_code": current_language_code(self.platform, self.settings),
            "is_debug": self.settings.debug,
        }


def build_backend(settings: Settings) -> KeyValueStore:
    """Construct the configured key/value backend."""
    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "redis":
        if not settings.redis_url:
            raise StorageError("USERTRACK_REDIS_URL is required for the redis backend", "redis")
        from usertrack.storage.redis import RedisStore, get_redis_connection

        return RedisStore(get_redis_connection(settings.redis_url))
    return JsonFileStore(settings.storage_path)


def build_session_manager(
    settings: Settings | None = None,
    backend: KeyValueStore | None = None,
    platform: PlatformIdentifiers | None = None,
    client: TrackingClient | None = None,
) -> SessionManager:
    """Wire a manager from settings. The caller owns its lifetime."""
    settings = settings or get_settings()
    store = IdentityStore(backend or build_backend(settings), prefix=settings.storage_key_prefix)
    platform = platform or SettingsPlatform(settings)
    client = client or TrackingClient(
        settings.api_base_url,
        timeout=settings.request_timeout_seconds,
    )
    return SessionManager(
        client=client,
        provisioner=IdentifierProvisioner(store, platform),
        store=store,
        settings=settings,
        platform=platform,
    )
