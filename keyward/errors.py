"""keyward error types.

Error codes are stable strings for programmatic handling by the API layer
that sits in front of this package. Store-level failures (SQLAlchemy
exceptions) are never wrapped; only the authentication boundary raises
these.
"""

from __future__ import annotations

from typing import Any


class KeywardError(Exception):
    """Base error for all keyward exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Serialize to the error envelope used by API responses."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }
        if request_id:
            error["request_id"] = request_id
        return {"error": error}


class UnauthorizedError(KeywardError):
    """Authentication required (401)."""

    code = "unauthorized"
    message = "Authentication required"
    status_code = 401


class ApiKeyNotFoundError(UnauthorizedError):
    """No active API key matches the presented key."""

    code = "api_key_not_found"
    message = "API key not found"


class ApiKeyInvalidError(UnauthorizedError):
    """Presented credential is malformed or the secret does not match."""

    code = "api_key_invalid"
    message = "API key invalid"


class ApiKeyExpiredError(UnauthorizedError):
    """API key validity window has ended."""

    code = "api_key_expired"
    message = "API key expired"


class ApiKeyNotYetValidError(UnauthorizedError):
    """API key validity window has not started yet."""

    code = "api_key_not_yet_valid"
    message = "API key not yet valid"
