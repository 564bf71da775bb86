"""Client-side authentication state machine.

``AuthContext`` owns the signed-in user, the backend session, the resolved
role set and the active role. It moves through::

    UNKNOWN -> RESOLVING -> AUTHENTICATED | SIGNED_OUT

Every public coroutine catches client errors at its boundary, records them
in ``error`` and reports them through the :class:`Notifier`; none of them
raise for expected failures.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

from src.client.api import GrantTrackerClient
from src.client.errors import AuthError, ClientError
from src.client.notifications import Notifier
from src.client.storage import ActiveRoleStore, InMemoryActiveRoleStore
from src.database.models import Permission, Role, get_permissions_for_role
from src.integrations.auth import (
    AuthBackend,
    AuthBackendError,
    AuthEvent,
    AuthSession,
    AuthUser,
)
from src.modules.roles.definitions import (
    DEFAULT_ROLES,
    first_available_role,
    has_role,
    normalize_roles,
)
from src.modules.roles.resolver import display_name_from_email
from src.utils.logger import get_logger

logger = get_logger(__name__)


class AuthState(str, Enum):
    UNKNOWN = "unknown"
    RESOLVING = "resolving"
    AUTHENTICATED = "authenticated"
    SIGNED_OUT = "signed_out"


@dataclass(frozen=True)
class AuthResult:
    error: ClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SignUpResult:
    error: ClientError | None = None
    # True when the backend wants the email confirmed before a session exists
    confirmation_required: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class AuthContext:
    def __init__(
        self,
        auth_backend: AuthBackend,
        api: GrantTrackerClient,
        role_store: ActiveRoleStore | None = None,
        notifier: Notifier | None = None,
    ):
        self.auth_backend = auth_backend
        self.api = api
        self.role_store = role_store or InMemoryActiveRoleStore()
        self.notifier = notifier or Notifier()

        self.state = AuthState.UNKNOWN
        self.user: AuthUser | None = None
        self.session: AuthSession | None = None
        self.roles: frozenset[Role] = frozenset()
        self.active_role: Role | None = None
        self.display_name: str | None = None
        self.error: ClientError | None = None
        self.loading = False

        self._closed = False
        self._signing_in = False
        self._resolution_seq = 0
        self._role_lock = asyncio.Lock()
        self._unsubscribe = None
        self._event_tasks: set[asyncio.Task] = set()

    # State writes

    def _write(self, **fields) -> bool:
        """Apply state fields unless the context was closed."""
        if self._closed:
            return False
        for name, value in fields.items():
            setattr(self, name, value)
        return True

    def _clear(self) -> None:
        self._resolution_seq += 1
        self._write(
            state=AuthState.SIGNED_OUT,
            user=None,
            session=None,
            roles=frozenset(),
            active_role=None,
            display_name=None,
        )
        self.api.clear_credentials()

    # Lifecycle

    async def start(self) -> None:
        """Subscribe to auth events and resolve the existing session, if any."""
        if self._closed:
            return
        if self._unsubscribe is None:
            self._unsubscribe = self.auth_backend.on_auth_state_change(
                self._on_auth_state_change
            )

        try:
            session = await self.auth_backend.get_session()
        except AuthBackendError as e:
            logger.warning("Could not read existing session", error=e.message)
            session = None

        await self._apply_session(session)

    def close(self) -> None:
        """Stop listening; in-flight work finishes but no longer writes state."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_auth_state_change(
        self, event: AuthEvent, session: AuthSession | None
    ) -> None:
        # sign_in/sign_up resolve on their own once the app session exists
        if event == AuthEvent.SIGNED_IN and self._signing_in:
            return
        task = asyncio.get_running_loop().create_task(
            self.handle_auth_event(event, session)
        )
        self._event_tasks.add(task)
        task.add_done_callback(self._event_tasks.discard)

    async def handle_auth_event(
        self, event: AuthEvent, session: AuthSession | None
    ) -> None:
        if self._closed:
            return

        if event == AuthEvent.SIGNED_OUT:
            self._clear()
            return

        await self._apply_session(session)

    # Resolution

    async def _apply_session(self, session: AuthSession | None) -> None:
        if session is None:
            self._clear()
            return

        self._resolution_seq += 1
        seq = self._resolution_seq
        self._write(state=AuthState.RESOLVING)
        self.api.set_access_token(session.access_token)

        roles, display_name = await self._resolve(session.user)
        active_role = await self._restore_active_role(session.user, roles)

        if seq != self._resolution_seq:
            logger.debug("Discarding stale role resolution", user_id=str(session.user.id))
            return

        self._write(
            state=AuthState.AUTHENTICATED,
            user=session.user,
            session=session,
            roles=roles,
            active_role=active_role,
            display_name=display_name,
        )

    async def _resolve(self, user: AuthUser) -> tuple[frozenset[Role], str]:
        try:
            data = await self.api.resolve_roles()
        except ClientError as e:
            # RoleResolutionError or a transport failure; never surfaced
            logger.warning(
                "Role resolution failed, using viewer",
                user_id=str(user.id),
                error=e.message,
                error_type=type(e).__name__,
            )
            return DEFAULT_ROLES, user.full_name or display_name_from_email(user.email)

        roles = normalize_roles(data.get("roles")) or DEFAULT_ROLES
        display_name = data.get("display_name") or display_name_from_email(user.email)
        return roles, display_name

    async def _restore_active_role(
        self, user: AuthUser, roles: frozenset[Role]
    ) -> Role:
        try:
            stored = await self.role_store.get(user.id)
        except OSError as e:
            logger.warning("Could not read active role", user_id=str(user.id), error=str(e))
            stored = None

        stored_role = next(iter(normalize_roles([stored])), None) if stored else None
        if stored_role is not None and stored_role in roles:
            return stored_role
        return first_available_role(roles)

    # Auth flows

    def _fail(self, title: str, error: ClientError) -> ClientError:
        self._clear()
        self._write(error=error)
        self.notifier.error(title, error.message)
        return error

    async def sign_in(
        self, email: str, password: str, remember_me: bool = True
    ) -> AuthResult:
        """Sign in, open an application session and resolve roles."""
        self._write(loading=True, error=None)
        self._signing_in = True
        try:
            try:
                session = await self.auth_backend.sign_in_with_password(email, password)
            except AuthBackendError as e:
                return AuthResult(
                    error=self._fail(
                        "Sign in failed", AuthError(e.message, status_code=e.status)
                    )
                )

            self.api.set_access_token(session.access_token)
            try:
                await self.api.create_session(session.user.id, persistent=remember_me)
            except ClientError as e:
                try:
                    await self.auth_backend.sign_out()
                except AuthBackendError as sign_out_error:
                    logger.warning(
                        "Backend sign-out after session failure failed",
                        error=sign_out_error.message,
                    )
                return AuthResult(error=self._fail("Sign in failed", e))

            # Accounts confirmed by email reach the server here for the first time
            try:
                await self.api.onboard()
            except ClientError as e:
                logger.warning("Onboarding failed", error=e.message)

            await self._apply_session(session)
            return AuthResult()
        finally:
            self._signing_in = False
            self._write(loading=False)

    async def sign_up(
        self, email: str, password: str, full_name: str | None = None
    ) -> SignUpResult:
        self._write(loading=True, error=None)
        self._signing_in = True
        try:
            try:
                outcome = await self.auth_backend.sign_up(email, password, full_name)
            except AuthBackendError as e:
                error = self._fail(
                    "Sign up failed", AuthError(e.message, status_code=e.status)
                )
                return SignUpResult(error=error)

            if outcome.session is None:
                self.notifier.info(
                    "Check your email", "Confirm your address to finish signing up."
                )
                return SignUpResult(confirmation_required=True)

            self.api.set_access_token(outcome.session.access_token)
            try:
                await self.api.onboard(full_name)
            except ClientError as e:
                # Resolution falls back to creating default rows
                logger.warning("Onboarding failed", error=e.message)

            await self._apply_session(outcome.session)
            self.notifier.success("Account created")
            return SignUpResult()
        finally:
            self._signing_in = False
            self._write(loading=False)

    async def reset_password(self, email: str) -> AuthResult:
        try:
            await self.auth_backend.reset_password(email)
        except AuthBackendError as e:
            error = AuthError(e.message, status_code=e.status)
            self._write(error=error)
            self.notifier.error("Password reset failed", error.message)
            return AuthResult(error=error)

        self.notifier.success("Password reset email sent")
        return AuthResult()

    async def sign_out(self) -> None:
        """Revoke the app session, sign out of the backend and clear local state."""
        user = self.user
        self._write(loading=True)
        try:
            try:
                await self.api.revoke_session()
            except ClientError as e:
                logger.warning("Session revocation failed", error=e.message)

            try:
                await self.auth_backend.sign_out()
            except AuthBackendError as e:
                logger.warning("Backend sign-out failed", error=e.message)

            if user is not None:
                try:
                    await self.role_store.clear(user.id)
                except OSError as e:
                    logger.warning("Could not clear active role", error=str(e))

            self._clear()
        finally:
            self._write(loading=False)

    # Roles

    async def switch_role(self, role: Role | str) -> bool:
        """Make ``role`` the active role; it must be one the user holds."""
        target = next(iter(normalize_roles([role])), None)
        if target is None:
            return False

        async with self._role_lock:
            if self._closed or self.state != AuthState.AUTHENTICATED or self.user is None:
                return False
            if target == self.active_role:
                return True
            if target not in self.roles:
                logger.info(
                    "Refusing switch to a role not held",
                    user_id=str(self.user.id),
                    role=target.value,
                )
                return False

            try:
                await self.role_store.set(self.user.id, target.value)
            except OSError as e:
                logger.error("Could not persist active role", error=str(e))
                self.notifier.error("Could not switch role", str(e))
                return False

            return self._write(active_role=target)

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED and self.user is not None

    def has_role(self, role: Role | str) -> bool:
        required = normalize_roles([role])
        return bool(required) and has_role(self.roles, required)

    def can(self, permission: Permission) -> bool:
        """Permission check against the active role only."""
        if not self.is_authenticated or self.active_role is None:
            return False
        return permission in get_permissions_for_role(self.active_role)
