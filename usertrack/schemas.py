"""Tracking API request and response schemas."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class Attribution(BaseModel):
    """Marketing attribution attached to a session. Unset members are omitted."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    ad_id: str | None = None
    adgroup_id: str | None = None
    campaign_id: str | None = None
    campaign_group_id: str | None = None
    account_id: str | None = None
    ad_objective_name: str | None = None
    gclid: str | None = None
    fbclid: str | None = None
    msclkid: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "Attribution | None":
        """Build from a loose mapping, dropping unknown keys and empty values."""
        if not data:
            return None
        known = {
            key: str(value)
            for key, value in data.items()
            if key in cls.model_fields and value not in (None, "")
        }
        return cls(**known) if known else None

    def to_payload(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class UserCreationRequest(BaseModel):
    """Body of ``POST /users/add/``."""

    device_id: str
    device_id_type: str = "idfa"
    app: str
    vendor_id: str
    pseudo_id: str
    email: str | None = None
    acquired_route: str = "unknown"
    referrer_url: str | None = None


class UserCreated(BaseModel):
    """Response of ``POST /users/add/``."""

    model_config = ConfigDict(strict=True)

    msg: str
    user_id: int


class SessionCreationRequest(BaseModel):
    """Body of ``POST /users/session/``."""

    user_id: int
    type: str = "api"
    tag: str | None = None
    route: str = "unknown"
    vertical: str = "flight"
    country_code: str = "IN"
    attribution: Attribution | None = None

    def to_payload(self) -> dict[str, Any]:
        """Flatten attribution members into the top-level body."""
        payload = self.model_dump(exclude_none=True, exclude={"attribution"})
        if self.attribution is not None:
            payload.update(self.attribution.to_payload())
        return payload


class SessionCreated(BaseModel):
    """Response of ``POST /users/session/``."""

    model_config = ConfigDict(strict=True)

    msg: str
    user_id: int
    user_session_id: int
