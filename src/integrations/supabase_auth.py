"""Supabase Auth adapters.

``SupabaseAuthBackend`` wraps an anon-key client for end-user flows;
``SupabaseAdminBackend`` wraps a service-role client for admin listing and
must only ever run server side.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from supabase import AsyncClient, AuthError, acreate_client

from src.integrations.auth import (
    AuthBackendError,
    AuthEvent,
    AuthSession,
    AuthStateListener,
    AuthUser,
    SignUpOutcome,
)
from src.utils.logger import get_logger
from src.utils.settings.auth import AuthSettings

logger = get_logger(__name__)

ADMIN_PAGE_SIZE = 100


def to_auth_user(user: Any) -> AuthUser:
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=UUID(str(user.id)),
        email=getattr(user, "email", None) or "",
        full_name=metadata.get("full_name") or metadata.get("name"),
        created_at=getattr(user, "created_at", None),
        last_sign_in_at=getattr(user, "last_sign_in_at", None),
    )


def to_auth_session(session: Any) -> AuthSession | None:
    if session is None or getattr(session, "user", None) is None:
        return None
    return AuthSession(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
        user=to_auth_user(session.user),
    )


def _to_event(event: Any) -> AuthEvent | None:
    try:
        return AuthEvent(str(getattr(event, "value", event)))
    except ValueError:
        return None


def _backend_error(e: AuthError) -> AuthBackendError:
    return AuthBackendError(
        getattr(e, "message", None) or str(e),
        status=getattr(e, "status", None),
        code=getattr(e, "code", None),
    )


class SupabaseAuthBackend:
    def __init__(self, client: AsyncClient):
        self.client = client

    @classmethod
    async def from_settings(cls, settings: AuthSettings | None = None) -> "SupabaseAuthBackend":
        settings = settings or AuthSettings()
        client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        return cls(client)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise _backend_error(e) from e

        session = to_auth_session(response.session)
        if session is None:
            raise AuthBackendError("Sign-in returned no session")
        return session

    async def sign_up(
        self, email: str, password: str, full_name: str | None = None
    ) -> SignUpOutcome:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if full_name:
            credentials["options"] = {"data": {"full_name": full_name}}
        try:
            response = await self.client.auth.sign_up(credentials)
        except AuthError as e:
            raise _backend_error(e) from e

        return SignUpOutcome(
            user=to_auth_user(response.user) if response.user else None,
            session=to_auth_session(response.session),
        )

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except AuthError as e:
            raise _backend_error(e) from e

    async def reset_password(self, email: str, redirect_to: str | None = None) -> None:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            await self.client.auth.reset_password_for_email(email, options)
        except AuthError as e:
            raise _backend_error(e) from e

    async def get_session(self) -> AuthSession | None:
        try:
            return to_auth_session(await self.client.auth.get_session())
        except AuthError as e:
            raise _backend_error(e) from e

    def on_auth_state_change(self, listener: AuthStateListener) -> Callable[[], None]:
        def _callback(event: Any, session: Any) -> None:
            auth_event = _to_event(event)
            if auth_event is None:
                logger.debug("Ignoring unknown auth event", auth_event=str(event))
                return
            listener(auth_event, to_auth_session(session))

        subscription = self.client.auth.on_auth_state_change(_callback)
        return subscription.unsubscribe


class SupabaseAdminBackend:
    def __init__(self, client: AsyncClient):
        self.client = client

    @classmethod
    async def from_settings(
        cls, settings: AuthSettings | None = None
    ) -> "SupabaseAdminBackend | None":
        """Service-role backend, or None when no service key is configured."""
        settings = settings or AuthSettings()
        if not settings.has_service_role:
            logger.warning("Supabase service role not configured, admin listing disabled")
            return None
        client = await acreate_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
        )
        return cls(client)

    async def list_users(self) -> list[AuthUser]:
        users: list[AuthUser] = []
        page = 1
        while True:
            try:
                batch = await self.client.auth.admin.list_users(
                    page=page, per_page=ADMIN_PAGE_SIZE
                )
            except AuthError as e:
                raise _backend_error(e) from e

            users.extend(to_auth_user(user) for user in batch)
            if len(batch) < ADMIN_PAGE_SIZE:
                return users
            page += 1
