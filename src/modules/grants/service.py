"""Organization-scoped grant CRUD with soft delete."""

from uuid import UUID

from fastapi import status
from sqlalchemy import select

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.api.grant.schemas import (
    NON_NULLABLE_UPDATE_FIELDS,
    GrantCreateRequest,
    GrantUpdateRequest,
)
from src.core.base import BaseService
from src.core.context import AuthenticatedUserContext
from src.database.models import Grant, Organization
from src.utils.dates import utc_now


class GrantService(BaseService):
    """
    Grants are scoped to the caller's organization unless the caller holds an
    elevated role. Deleting only stamps ``deleted_at``; restore clears it.
    """

    def _scoped(self, stmt, user: AuthenticatedUserContext):
        if user.is_elevated:
            return stmt
        return stmt.where(Grant.organization_id == user.organization_id)

    async def list_grants(
        self, user: AuthenticatedUserContext, deleted: bool = False
    ) -> list[Grant]:
        if not user.is_elevated and user.organization_id is None:
            return []

        stmt = select(Grant)
        if deleted:
            stmt = stmt.where(Grant.deleted_at.is_not(None))
        else:
            stmt = stmt.where(Grant.deleted_at.is_(None))
        stmt = self._scoped(stmt, user).order_by(Grant.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_grant(
        self,
        user: AuthenticatedUserContext,
        grant_id: UUID,
        deleted: bool | None = False,
    ) -> Grant:
        """Fetch a grant in scope. ``deleted=None`` matches either state."""
        stmt = self._scoped(select(Grant).where(Grant.id == grant_id), user)
        if deleted is True:
            stmt = stmt.where(Grant.deleted_at.is_not(None))
        elif deleted is False:
            stmt = stmt.where(Grant.deleted_at.is_(None))

        result = await self.db.execute(stmt)
        grant = result.scalar_one_or_none()
        if grant is None:
            raise GrantTrackerException(
                MessageCode.GRANT_NOT_FOUND,
                status.HTTP_404_NOT_FOUND,
                {"grant_id": str(grant_id)},
            )
        return grant

    async def _target_organization(
        self, user: AuthenticatedUserContext, requested: UUID | None
    ) -> UUID:
        if user.is_elevated and requested is not None:
            if await self.db.get(Organization, requested) is None:
                raise GrantTrackerException(
                    MessageCode.ORGANIZATION_NOT_FOUND,
                    status.HTTP_404_NOT_FOUND,
                    {"organization_id": str(requested)},
                )
            return requested

        if user.organization_id is None:
            raise GrantTrackerException(
                MessageCode.ORGANIZATION_REQUIRED,
                status.HTTP_403_FORBIDDEN,
                {"description": "Ask an administrator to assign an organization"},
            )
        return user.organization_id

    async def create_grant(
        self, user: AuthenticatedUserContext, data: GrantCreateRequest
    ) -> Grant:
        organization_id = await self._target_organization(user, data.organization_id)
        now = utc_now()

        grant = Grant(
            **data.model_dump(exclude={"organization_id"}),
            organization_id=organization_id,
            user_id=user.user_id,
            created_by=user.user_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(grant)
        await self._commit_and_refresh(grant)

        self.logger.info(
            "Grant created",
            grant_id=str(grant.id),
            organization_id=str(organization_id),
            user_id=str(user.user_id),
        )
        return grant

    async def update_grant(
        self, user: AuthenticatedUserContext, grant_id: UUID, data: GrantUpdateRequest
    ) -> Grant:
        grant = await self.get_grant(user, grant_id)
        changes = data.model_dump(exclude_unset=True)

        requested_org = changes.pop("organization_id", None)
        if requested_org is not None and requested_org != grant.organization_id:
            raise GrantTrackerException(
                MessageCode.GRANT_ORGANIZATION_IMMUTABLE,
                status.HTTP_400_BAD_REQUEST,
                {"grant_id": str(grant_id)},
            )

        cleared = sorted(
            field
            for field, value in changes.items()
            if value is None and field in NON_NULLABLE_UPDATE_FIELDS
        )
        if cleared:
            raise GrantTrackerException(
                MessageCode.INVALID_INPUT,
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                {"description": "Required fields cannot be cleared", "fields": cleared},
            )

        for field, value in changes.items():
            setattr(grant, field, value)
        grant.updated_by = user.user_id
        grant.updated_at = utc_now()
        await self._commit_and_refresh(grant)

        self.logger.info(
            "Grant updated",
            grant_id=str(grant.id),
            fields=sorted(changes),
            user_id=str(user.user_id),
        )
        return grant

    async def delete_grant(self, user: AuthenticatedUserContext, grant_id: UUID) -> Grant:
        grant = await self.get_grant(user, grant_id)
        now = utc_now()
        grant.deleted_at = now
        grant.updated_by = user.user_id
        grant.updated_at = now
        await self._commit_and_refresh(grant)

        self.logger.info("Grant soft-deleted", grant_id=str(grant.id))
        return grant

    async def restore_grant(self, user: AuthenticatedUserContext, grant_id: UUID) -> Grant:
        grant = await self.get_grant(user, grant_id, deleted=None)
        if grant.deleted_at is None:
            return grant

        grant.deleted_at = None
        grant.updated_by = user.user_id
        grant.updated_at = utc_now()
        await self._commit_and_refresh(grant)

        self.logger.info("Grant restored", grant_id=str(grant.id))
        return grant
