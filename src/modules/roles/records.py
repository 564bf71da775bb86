from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from src.core.base import BaseService
from src.database.models import Role, UserRolesRecord
from src.modules.roles.definitions import (
    DEFAULT_ROLES,
    apply_roles_to_record,
    record_flags,
    roles_from_record,
)


class RoleRecordService(BaseService):
    """Reads and writes the denormalized per-user role record."""

    async def get_record(self, user_id: UUID) -> UserRolesRecord | None:
        return await self.db.get(UserRolesRecord, user_id)

    async def get_roles(self, user_id: UUID) -> frozenset[Role]:
        """Role set of a user; a missing or empty record reads as viewer."""
        return roles_from_record(await self.get_record(user_id))

    async def count_records(self) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(UserRolesRecord)
        )
        return result.scalar_one()

    async def ensure_record(
        self, user_id: UUID, roles: Iterable[Role] = DEFAULT_ROLES
    ) -> UserRolesRecord:
        """Create the record with ``roles`` unless one exists. Does not commit.

        A concurrent insert for the same user loses the race on the primary
        key; the existing row is returned untouched in that case.
        """
        record = await self.get_record(user_id)
        if record is not None:
            return record

        record = UserRolesRecord(user_id=user_id, **record_flags(roles))
        try:
            async with self.db.begin_nested():
                self.db.add(record)
        except IntegrityError:
            self.logger.info(
                "Role record already created by another request",
                user_id=str(user_id),
            )
            existing = await self.db.get(
                UserRolesRecord, user_id, populate_existing=True
            )
            if existing is None:
                raise
            record = existing
        return record

    async def set_roles(
        self, user_id: UUID, roles: Iterable[Role]
    ) -> UserRolesRecord:
        """Replace the role set of a user. Does not commit."""
        roles = frozenset(roles)
        record = await self.get_record(user_id)
        if record is None:
            record = await self.ensure_record(user_id, roles)
        apply_roles_to_record(record, roles)
        await self.db.flush()
        self.logger.info(
            "Roles replaced",
            user_id=str(user_id),
            roles=sorted(role.value for role in roles_from_record(record)),
        )
        return record
