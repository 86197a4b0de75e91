"""HTTP client for the tracking API."""

import time
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from usertrack.exceptions import ApiStatusError, ResponseDecodeError, TransportError
from usertrack.models import TrackingResult
from usertrack.schemas import (
    SessionCreated,
    SessionCreationRequest,
    UserCreated,
    UserCreationRequest,
)

logger = structlog.get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

USERS_ADD_PATH = "/users/add/"
USERS_SESSION_PATH = "/users/session/"


class TrackingClient:
    """
    Stateless transport for user and session creation.

    Every call returns a ``TrackingResult``; network, status and decode
    failures are captured as typed errors. Nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def create_user(self, request: UserCreationRequest) -> TrackingResult[UserCreated]:
        """Register the install with the tracking API."""
        logger.debug(
            "user_create_request",
            device_id=request.device_id,
            app=request.app,
            vendor_id=request.vendor_id,
            pseudo_id=request.pseudo_id,
        )
        result = await self._post(
            USERS_ADD_PATH,
            request.model_dump(exclude_none=True),
            UserCreated,
        )
        if result.success:
            logger.info("user_create_succeeded", user_id=result.value.user_id)
        else:
            logger.debug("user_create_request_failed", **result.error.to_dict())
        return result

    async def create_session(
        self, request: SessionCreationRequest
    ) -> TrackingResult[SessionCreated]:
        """Record a session/event for a known user."""
        logger.debug(
            "session_create_request",
            user_id=request.user_id,
            type=request.type,
            vertical=request.vertical,
            country_code=request.country_code,
            route=request.route,
        )
        result = await self._post(USERS_SESSION_PATH, request.to_payload(), SessionCreated)
        if result.success:
            logger.info(
                "session_create_succeeded",
                user_id=result.value.user_id,
                session_id=result.value.user_session_id,
            )
        else:
            logger.debug("session_create_request_failed", **result.error.to_dict())
        return result

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        response_model: type[ResponseT],
    ) -> TrackingResult[ResponseT]:
        url = f"{self.base_url}{path}"
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return TrackingResult.fail(
                TransportError(f"Request timed out after {self.timeout}s", url=url),
                latency_ms=latency_ms,
            )
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            return TrackingResult.fail(
                TransportError(str(e) or type(e).__name__, url=url),
                latency_ms=latency_ms,
            )

        latency_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            return TrackingResult.fail(
                ApiStatusError(response.status_code, body=response.text, url=url),
                latency_ms=latency_ms,
            )

        try:
            value = response_model.model_validate_json(response.content)
        except ValidationError as e:
            return TrackingResult.fail(
                ResponseDecodeError(
                    f"Unexpected {response_model.__name__} response: {e.error_count()} error(s)",
                    body=response.text,
                ),
                latency_ms=latency_ms,
            )

        return TrackingResult.ok(value, latency_ms=latency_ms)
