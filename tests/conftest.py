"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator

import pytest
import structlog

# Set test environment before any client code runs
os.environ["USERTRACK_ENV"] = "test"
os.environ["USERTRACK_STORAGE_BACKEND"] = "memory"

from tests.fixtures.fakes import BASE_URL, ApiRecorder, FakePlatform  # noqa: E402
from usertrack.client import TrackingClient  # noqa: E402
from usertrack.config import UNAVAILABLE_ADVERTISING_ID, Settings  # noqa: E402
from usertrack.identifiers import IdentifierProvisioner  # noqa: E402
from usertrack.manager import SessionManager  # noqa: E402
from usertrack.storage import IdentityStore, MemoryStore  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        env="test",
        api_base_url=BASE_URL,
        storage_backend="memory",
        default_country_code="IN",
    )


@pytest.fixture
def backend() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def store(backend: MemoryStore) -> IdentityStore:
    return IdentityStore(backend)


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def unavailable_platform() -> FakePlatform:
    return FakePlatform(advertising_id=UNAVAILABLE_ADVERTISING_ID, vendor_id=None)


@pytest.fixture
def provisioner(store: IdentityStore, platform: FakePlatform) -> IdentifierProvisioner:
    return IdentifierProvisioner(store, platform)


@pytest.fixture
def api() -> ApiRecorder:
    return ApiRecorder()


@pytest.fixture
def client(api: ApiRecorder) -> TrackingClient:
    return TrackingClient(BASE_URL, timeout=5.0, transport=api.transport)


@pytest.fixture
def manager(
    client: TrackingClient,
    provisioner: IdentifierProvisioner,
    store: IdentityStore,
    settings: Settings,
    platform: FakePlatform,
) -> SessionManager:
    return SessionManager(
        client=client,
        provisioner=provisioner,
        store=store,
        settings=settings,
        platform=platform,
    )


@pytest.fixture
def ready_manager(
    client: TrackingClient,
    provisioner: IdentifierProvisioner,
    store: IdentityStore,
    settings: Settings,
    platform: FakePlatform,
) -> SessionManager:
    """Manager resuming a stored user with id 42."""
    store.save_account(42)
    return SessionManager(
        client=client,
        provisioner=provisioner,
        store=store,
        settings=settings,
        platform=platform,
    )


@pytest.fixture(autouse=True)
def captured_logs() -> Generator[list[dict], None, None]:
    """Capture structlog events instead of printing them."""
    with structlog.testing.capture_logs() as logs:
        yield logs
