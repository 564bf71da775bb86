"""Client-side grant cache with write-through mutations."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel

from src.api.grant.schemas import GrantModel
from src.client.api import GrantTrackerClient
from src.client.auth_context import AuthContext
from src.client.errors import AccessDeniedError, AuthError, ClientError, MutationError
from src.client.notifications import Notifier
from src.database.models import Permission
from src.utils.logger import get_logger

logger = get_logger(__name__)


class GrantContext:
    """
    Holds the caller's non-deleted grants.

    Every mutation is sent to the server and followed by a full ``fetch()``,
    so after a successful call the cache equals what the server returns.
    Failures are recorded in ``error`` and reported through the notifier.
    """

    def __init__(
        self,
        api: GrantTrackerClient,
        auth: AuthContext,
        notifier: Notifier | None = None,
    ):
        self.api = api
        self.auth = auth
        self.notifier = notifier or auth.notifier
        self.grants: list[GrantModel] = []
        self.loading = False
        self.error: str | None = None

    def get(self, grant_id: UUID) -> GrantModel | None:
        return next((grant for grant in self.grants if grant.id == grant_id), None)

    async def fetch(self) -> None:
        """Replace the cache with the server's list; keeps the old list on failure."""
        if not self.auth.is_authenticated:
            self.grants = []
            return

        self.loading = True
        try:
            self.grants = await self.api.list_grants()
            self.error = None
        except ClientError as e:
            logger.warning("Grant fetch failed", error=e.message)
            self.error = e.message
            self.notifier.error("Could not load grants", e.message)
        finally:
            self.loading = False

    def _check_can_edit(self) -> ClientError | None:
        if not self.auth.is_authenticated:
            return AuthError("Sign in to change grants")
        if not self.auth.can(Permission.EDIT):
            role = self.auth.active_role.value if self.auth.active_role else "none"
            return AccessDeniedError(f"The {role} role cannot change grants")
        return None

    def _record_failure(self, title: str, error: ClientError) -> None:
        logger.warning(title, error=error.message, error_type=type(error).__name__)
        self.error = error.message
        self.notifier.error(title, error.message)

    async def add(self, grant: BaseModel | dict[str, Any]) -> GrantModel | None:
        error = self._check_can_edit()
        if error:
            self._record_failure("Could not add grant", error)
            return None

        try:
            created = await self.api.create_grant(grant)
        except ClientError as e:
            self._record_failure("Could not add grant", e)
            return None

        self.notifier.success("Grant added", created.name)
        await self.fetch()
        return created

    async def update(
        self, grant_id: UUID, changes: BaseModel | dict[str, Any]
    ) -> GrantModel | None:
        error = self._check_can_edit()
        if error:
            self._record_failure("Could not update grant", error)
            return None

        if isinstance(changes, BaseModel):
            changes = changes.model_dump(mode="json", exclude_unset=True)
        else:
            changes = dict(changes)

        if "organization_id" in changes:
            cached = self.get(grant_id)
            new_org = changes.pop("organization_id")
            if cached is None or str(new_org) != str(cached.organization_id):
                self._record_failure(
                    "Could not update grant",
                    MutationError("A grant cannot move to another organization"),
                )
                return None

        try:
            updated = await self.api.update_grant(grant_id, changes)
        except ClientError as e:
            self._record_failure("Could not update grant", e)
            return None

        self.notifier.success("Grant updated", updated.name)
        await self.fetch()
        return updated

    async def delete(self, grant_id: UUID) -> bool:
        """Soft delete; the grant can be brought back with :meth:`restore`."""
        error = self._check_can_edit()
        if error:
            self._record_failure("Could not delete grant", error)
            return False

        try:
            await self.api.delete_grant(grant_id)
        except ClientError as e:
            self._record_failure("Could not delete grant", e)
            return False

        self.notifier.success("Grant deleted")
        await self.fetch()
        return True

    async def restore(self, grant_id: UUID) -> bool:
        error = self._check_can_edit()
        if error:
            self._record_failure("Could not restore grant", error)
            return False

        try:
            await self.api.restore_grant(grant_id)
        except ClientError as e:
            self._record_failure("Could not restore grant", e)
            return False

        self.notifier.success("Grant restored")
        await self.fetch()
        return True
