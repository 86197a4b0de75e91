"""Tracking error taxonomy.

Errors raised by the transport are captured into ``TrackingResult`` objects
instead of propagating, so tracking degrades silently in the caller.
"""

from typing import Any


class TrackingError(Exception):
    """Base exception for the tracking client."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {"code": self.code, "message": self.message, **self.details}


class TransportError(TrackingError):
    """Network failure or timeout before a response was received."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message=message, code="transport_error", details=details)


class ApiStatusError(TrackingError):
    """The tracking API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "", url: str | None = None):
        self.status_code = status_code
        self.body = body
        details: dict[str, Any] = {"status_code": status_code}
        if url:
            details["url"] = url
        super().__init__(
            message=f"HTTP {status_code}: {body[:200]}" if body else f"HTTP {status_code}",
            code="api_status_error",
            details=details,
        )


class ResponseDecodeError(TrackingError):
    """Response body was not valid JSON or did not match the expected schema."""

    def __init__(self, message: str, body: str = ""):
        self.body = body
        super().__init__(message=message, code="response_decode_error")


class PreconditionError(TrackingError):
    """A session was requested before a user id is known."""

    def __init__(self, message: str = "User ID not available"):
        super().__init__(message=message, code="precondition_failed")


class StorageError(TrackingError):
    """Local identity storage is misconfigured."""

    def __init__(self, message: str, backend: str | None = None):
        details = {"backend": backend} if backend else {}
        super().__init__(message=message, code="storage_error", details=details)
