"""Client-side error taxonomy.

Server failures arrive as ``{message_code, message, details}`` bodies and are
turned into one of these by :meth:`ApiError.from_response`. The contexts catch
:class:`ClientError` at their boundary; nothing here escapes to the caller.
"""

from typing import Any

import httpx


class ClientError(Exception):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        message_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.message_code = message_code
        self.details = details or {}


class ApiError(ClientError):
    """Non-2xx response from the Grant Tracker API."""

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message_code = body.get("message_code")
        message = body.get("message") or f"Request failed with status {response.status_code}"
        details = body.get("details") if isinstance(body.get("details"), dict) else None

        error_cls: type[ApiError] = cls
        if response.status_code == 403:
            error_cls = AccessDeniedError
        elif message_code and str(message_code).startswith("SESSION_"):
            error_cls = SessionError
        elif response.status_code == 401:
            error_cls = AuthError

        return error_cls(
            message,
            status_code=response.status_code,
            message_code=message_code,
            details=details,
        )


class AuthError(ApiError):
    """Credential or token problem, from the auth backend or the API."""


class SessionError(ApiError):
    """Session Bridge failure: missing, invalid, revoked or expired session."""


class MutationError(ApiError):
    """A grant write failed."""


class AccessDeniedError(ApiError):
    """The active role or organization does not allow the operation."""


class RoleResolutionError(ApiError):
    """Role lookup failed; always absorbed into viewer-only access."""
