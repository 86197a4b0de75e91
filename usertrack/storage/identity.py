"""Namespaced access to persisted identity state."""

from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from usertrack.models import UserAccount
from usertrack.storage.backends import KeyValueStore

logger = structlog.get_logger(__name__)

DEFAULT_KEY_PREFIX = "D2Flight_"


class IdentityKey(str, Enum):
    """Persisted identity fields."""

    DEVICE_ID = "DeviceID"
    DEVICE_ID_TYPE = "DeviceIDType"
    VENDOR_ID = "VendorID"
    PSEUDO_ID = "PseudoID"
    USER_ID = "UserID"
    USER_CREATED = "UserCreated"
    INSTALL_DATE = "InstallDate"


# Account-scoped keys. Device-scoped identifiers outlive an account reset.
ACCOUNT_KEYS = (IdentityKey.USER_ID, IdentityKey.USER_CREATED, IdentityKey.INSTALL_DATE)


class IdentityStore:
    """Identity state on top of a key/value backend, keys prefixed to avoid collisions."""

    def __init__(self, backend: KeyValueStore, prefix: str = DEFAULT_KEY_PREFIX):
        self.backend = backend
        self.prefix = prefix

    def _key(self, key: IdentityKey) -> str:
        return f"{self.prefix}{key.value}"

    def get(self, key: IdentityKey) -> Any | None:
        return self.backend.get(self._key(key))

    def set(self, key: IdentityKey, value: Any) -> None:
        self.backend.set(self._key(key), value)

    def clear(self, keys: Iterable[IdentityKey]) -> None:
        self.backend.clear([self._key(key) for key in keys])

    def get_str(self, key: IdentityKey) -> str | None:
        value = self.get(key)
        return value if isinstance(value, str) and value else None

    def load_account(self) -> UserAccount:
        """Read the stored account. A created flag without a user id is not a user."""
        raw_id = self.get(IdentityKey.USER_ID)
        user_id = raw_id if isinstance(raw_id, int) and not isinstance(raw_id, bool) else None
        is_created = self.get(IdentityKey.USER_CREATED) is True

        if is_created and user_id is None:
            logger.warning("stored_account_missing_user_id")
            is_created = False

        return UserAccount(
            user_id=user_id if is_created else None,
            is_created=is_created,
            installed_at=self.install_date(),
        )

    def save_account(self, user_id: int, installed_at: datetime | None = None) -> UserAccount:
        """Persist a freshly created user."""
        installed_at = installed_at or datetime.now(UTC)
        self.set(IdentityKey.USER_ID, user_id)
        self.set(IdentityKey.USER_CREATED, True)
        self.set(IdentityKey.INSTALL_DATE, installed_at.isoformat())
        return UserAccount(user_id=user_id, is_created=True, installed_at=installed_at)

    def clear_account(self) -> None:
        """Remove account fields, leaving device identifiers in place."""
        self.clear(ACCOUNT_KEYS)

    def install_date(self) -> datetime | None:
        value = self.get_str(IdentityKey.INSTALL_DATE)
        if value is None:
            return None
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            logger.warning("stored_install_date_invalid", value=value)
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
