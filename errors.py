"""
Error taxonomy for calls against the order API.

Every failure a caller can see is one of these; the HTTP layer maps
``status_code`` straight onto the response.
"""
from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """Base class: a failure surfaced to the user as a notification."""

    status_code = 500
    kind = "unknown"

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class Unauthorized(StoreError):
    """Missing, invalid or expired token."""

    status_code = 401
    kind = "unauthorized"


class NotFound(StoreError):
    status_code = 404
    kind = "not_found"


class ValidationFailed(StoreError):
    """The order API rejected the request body."""

    status_code = 422
    kind = "validation_error"


class Unavailable(StoreError):
    """Transport or deserialization failure; the cause is kept for display."""

    status_code = 503
    kind = "unavailable"


class UnknownError(StoreError):
    status_code = 500
    kind = "unknown"


class Conflict(StoreError):
    """The resource changed between read and write."""

    status_code = 409
    kind = "conflict"
