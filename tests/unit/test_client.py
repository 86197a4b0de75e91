"""Tests for the tracking API client."""

import httpx
import pytest

from tests.fixtures.fakes import BASE_URL, ApiRecorder
from usertrack.client import TrackingClient
from usertrack.exceptions import ApiStatusError, ResponseDecodeError, TransportError
from usertrack.schemas import Attribution, SessionCreationRequest, UserCreationRequest


def _user_request() -> UserCreationRequest:
    return UserCreationRequest(
        device_id="DEVICE",
        device_id_type="idfa",
        app="d1_ios_flight",
        vendor_id="VENDOR",
        pseudo_id="abcdefghijklmnopqrstu",
    )


class TestCreateUser:
    """Tests for POST /users/add/."""

    @pytest.mark.asyncio
    async def test_success(self, client: TrackingClient, api: ApiRecorder) -> None:
        result = await client.create_user(_user_request())

        assert result.success is True
        assert result.value.user_id == 42
        assert result.value.msg == "ok"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_request_shape(self, client: TrackingClient, api: ApiRecorder) -> None:
        await client.create_user(_user_request())

        request = api.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/users/add/"
        assert request.headers["content-type"] == "application/json"
        assert api.bodies("/users/add/") == [
            {
                "device_id": "DEVICE",
                "device_id_type": "idfa",
                "app": "d1_ios_flight",
                "vendor_id": "VENDOR",
                "pseudo_id": "abcdefghijklmnopqrstu",
                "acquired_route": "unknown",
            }
        ]

    @pytest.mark.asyncio
    async def test_non_success_status(self, api: ApiRecorder) -> None:
        api.user_response = (500, "server exploded")
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_user(_user_request())

        assert result.success is False
        assert isinstance(result.error, ApiStatusError)
        assert result.error.status_code == 500
        assert result.error.body == "server exploded"

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, api: ApiRecorder) -> None:
        api.user_response = (200, {"msg": "ok"})
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_user(_user_request())

        assert isinstance(result.error, ResponseDecodeError)
        assert result.error.code == "response_decode_error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["42", True, 42.0])
    async def test_user_id_must_be_integer(self, api: ApiRecorder, user_id: object) -> None:
        api.user_response = (200, {"msg": "ok", "user_id": user_id})
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_user(_user_request())

        assert result.success is False
        assert isinstance(result.error, ResponseDecodeError)

    @pytest.mark.asyncio
    async def test_failure_logged_at_debug(
        self, api: ApiRecorder, captured_logs: list[dict]
    ) -> None:
        api.user_response = (500, "server exploded")
        client = TrackingClient(BASE_URL, transport=api.transport)

        await client.create_user(_user_request())

        (event,) = [e for e in captured_logs if e["event"] == "user_create_request_failed"]
        assert event["log_level"] == "debug"
        assert event["status_code"] == 500

    @pytest.mark.asyncio
    async def test_invalid_json(self, api: ApiRecorder) -> None:
        api.user_response = (200, "<html>maintenance</html>")
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_user(_user_request())

        assert isinstance(result.error, ResponseDecodeError)

    @pytest.mark.asyncio
    async def test_network_failure(self, api: ApiRecorder) -> None:
        api.raise_error = lambda request: httpx.ConnectError("connection refused", request=request)
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_user(_user_request())

        assert isinstance(result.error, TransportError)
        assert "connection refused" in result.error.message
        assert len(api.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout(self, api: ApiRecorder) -> None:
        api.raise_error = lambda request: httpx.ReadTimeout("slow", request=request)
        client = TrackingClient(BASE_URL, timeout=2.0, transport=api.transport)

        result = await client.create_user(_user_request())

        assert isinstance(result.error, TransportError)
        assert "timed out" in result.error.message


class TestCreateSession:
    """Tests for POST /users/session/."""

    @pytest.mark.asyncio
    async def test_success(self, client: TrackingClient) -> None:
        result = await client.create_session(SessionCreationRequest(user_id=42, tag="app_launch"))

        assert result.success is True
        assert result.value.user_id == 42
        assert result.value.user_session_id == 1001

    @pytest.mark.asyncio
    async def test_attribution_flattened(self, client: TrackingClient, api: ApiRecorder) -> None:
        request = SessionCreationRequest(
            user_id=42,
            tag="ad_click",
            vertical="hotel",
            country_code="GB",
            attribution=Attribution(gclid="g-1", campaign_id="c-9"),
        )

        await client.create_session(request)

        assert api.bodies("/users/session/") == [
            {
                "user_id": 42,
                "type": "api",
                "tag": "ad_click",
                "route": "unknown",
                "vertical": "hotel",
                "country_code": "GB",
                "gclid": "g-1",
                "campaign_id": "c-9",
            }
        ]

    @pytest.mark.asyncio
    async def test_not_found(self, api: ApiRecorder) -> None:
        api.session_responses.append((404, "no such user"))
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_session(SessionCreationRequest(user_id=1))

        assert isinstance(result.error, ApiStatusError)
        assert result.error.status_code == 404

    @pytest.mark.asyncio
    async def test_session_id_must_be_integer(self, api: ApiRecorder) -> None:
        api.session_responses.append(
            (200, {"msg": "ok", "user_id": 1, "user_session_id": "1001"})
        )
        client = TrackingClient(BASE_URL, transport=api.transport)

        result = await client.create_session(SessionCreationRequest(user_id=1))

        assert isinstance(result.error, ResponseDecodeError)

    @pytest.mark.asyncio
    async def test_no_retry(self, api: ApiRecorder) -> None:
        api.session_responses.append((503, "unavailable"))
        client = TrackingClient(BASE_URL, transport=api.transport)

        await client.create_session(SessionCreationRequest(user_id=1))

        assert len(api.requests) == 1

    def test_base_url_trailing_slash(self) -> None:
        client = TrackingClient(f"{BASE_URL}/")
        assert client.base_url == BASE_URL
