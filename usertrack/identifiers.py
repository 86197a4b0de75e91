"""Device, vendor and pseudo identifier provisioning."""

import secrets
import string
import uuid

import structlog

from usertrack.config import UNAVAILABLE_ADVERTISING_ID
from usertrack.models import DeviceIdentity, DeviceIdType
from usertrack.platform import PlatformIdentifiers
from usertrack.storage.identity import IdentityKey, IdentityStore

logger = structlog.get_logger(__name__)

PSEUDO_ID_LENGTH = 21
PSEUDO_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_pseudo_id(length: int = PSEUDO_ID_LENGTH) -> str:
    """Random lowercase alphanumeric string, each symbol drawn uniformly."""
    return "".join(secrets.choice(PSEUDO_ID_ALPHABET) for _ in range(length))


def generate_uuid() -> str:
    """Random UUID in the platform's upper-case string form."""
    return str(uuid.uuid4()).upper()


class IdentifierProvisioner:
    """
    Get-or-create install identifiers.

    Each identifier is generated at most once per install: stored values are
    returned untouched and the platform is only consulted on a miss.
    """

    def __init__(self, store: IdentityStore, platform: PlatformIdentifiers):
        self.store = store
        self.platform = platform

    def _stored_device_identifier(self) -> tuple[str, DeviceIdType] | None:
        device_id = self.store.get_str(IdentityKey.DEVICE_ID)
        raw_type = self.store.get_str(IdentityKey.DEVICE_ID_TYPE)
        if device_id is None or raw_type is None:
            return None
        try:
            return device_id, DeviceIdType(raw_type)
        except ValueError:
            logger.warning("stored_device_id_type_unknown", device_id_type=raw_type)
            return None

    def get_or_create_device_identifier(self) -> tuple[str, DeviceIdType]:
        """
        Return the device identifier and how it was obtained.

        Returns:
            Tuple of (device_id, device_id_type)
        """
        stored = self._stored_device_identifier()
        if stored is not None:
            logger.debug("device_id_loaded", device_id=stored[0], device_id_type=stored[1].value)
            return stored

        device_id = self.platform.advertising_identifier()
        if not device_id or device_id == UNAVAILABLE_ADVERTISING_ID:
            device_id = generate_uuid()
            device_id_type = DeviceIdType.FALLBACK
            logger.debug("advertising_id_unavailable")
        else:
            device_id_type = DeviceIdType.PREFERRED

        self.store.set(IdentityKey.DEVICE_ID, device_id)
        self.store.set(IdentityKey.DEVICE_ID_TYPE, device_id_type.value)

        logger.info("device_id_generated", device_id=device_id, device_id_type=device_id_type.value)
        return device_id, device_id_type

    def get_or_create_vendor_identifier(self) -> str:
        stored = self.store.get_str(IdentityKey.VENDOR_ID)
        if stored is not None:
            return stored

        vendor_id = self.platform.vendor_identifier() or generate_uuid()
        self.store.set(IdentityKey.VENDOR_ID, vendor_id)

        logger.info("vendor_id_generated", vendor_id=vendor_id)
        return vendor_id

    def get_or_create_pseudo_identifier(self) -> str:
        stored = self.store.get_str(IdentityKey.PSEUDO_ID)
        if stored is not None:
            return stored

        pseudo_id = generate_pseudo_id()
        self.store.set(IdentityKey.PSEUDO_ID, pseudo_id)

        logger.info("pseudo_id_generated", pseudo_id=pseudo_id)
        return pseudo_id

    def get_or_create_identity(self) -> DeviceIdentity:
        """Provision all install identifiers."""
        device_id, device_id_type = self.get_or_create_device_identifier()
        return DeviceIdentity(
            device_id=device_id,
            device_id_type=device_id_type,
            vendor_id=self.get_or_create_vendor_identifier(),
            pseudo_id=self.get_or_create_pseudo_identifier(),
        )
