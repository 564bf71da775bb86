"""Identity-provider types shared by the server and the client SDK.

The rest of the code base only sees these normalized shapes; the Supabase
adapter in :mod:`src.integrations.supabase_auth` converts to and from them.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol
from uuid import UUID


class AuthEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


@dataclass(frozen=True)
class AuthUser:
    id: UUID
    email: str
    full_name: str | None = None
    created_at: datetime | None = None
    last_sign_in_at: datetime | None = None


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user: AuthUser
    refresh_token: str | None = None
    expires_at: int | None = None


@dataclass(frozen=True)
class SignUpOutcome:
    user: AuthUser | None
    # None when the provider requires email confirmation first
    session: AuthSession | None


class AuthBackendError(Exception):
    """Raised by auth backends for rejected credentials or provider failures."""

    def __init__(self, message: str, status: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


AuthStateListener = Callable[[AuthEvent, AuthSession | None], None]


class AuthBackend(Protocol):
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession: ...

    async def sign_up(
        self, email: str, password: str, full_name: str | None = None
    ) -> SignUpOutcome: ...

    async def sign_out(self) -> None: ...

    async def reset_password(self, email: str, redirect_to: str | None = None) -> None: ...

    async def get_session(self) -> AuthSession | None: ...

    def on_auth_state_change(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        ...


class AuthAdminBackend(Protocol):
    async def list_users(self) -> list[AuthUser]: ...
