"""Application sessions layered on top of Supabase authentication.

The browser holds an opaque token in an HTTP-only cookie; only its SHA-256
digest is stored. Sessions are created at sign-in, revoked at sign-out and
never mutated otherwise.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import AppSession
from src.utils.dates import ensure_utc, utc_now
from src.utils.hashing import HashingService
from src.utils.settings.session import SessionSettings


@dataclass(frozen=True)
class IssuedSession:
    record: AppSession
    token: str


class SessionBridgeService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        settings: SessionSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(db)
        self.settings = settings or SessionSettings()
        self._clock = clock

    def ttl_for(self, persistent: bool) -> timedelta:
        if persistent:
            return timedelta(seconds=self.settings.PERSISTENT_SESSION_TTL_SECONDS)
        return timedelta(seconds=self.settings.EPHEMERAL_SESSION_TTL_SECONDS)

    async def create(self, user_id: UUID, persistent: bool) -> IssuedSession:
        token = HashingService.generate_session_token()
        now = self._clock()
        record = AppSession(
            user_id=user_id,
            token_hash=HashingService.hash_session_token(token),
            persistent=persistent,
            revoked=False,
            created_at=now,
            expires_at=now + self.ttl_for(persistent),
        )
        self.db.add(record)
        await self._commit_and_refresh(record)

        self.logger.info(
            "Session created",
            user_id=str(user_id),
            session_id=str(record.id),
            persistent=persistent,
        )
        return IssuedSession(record=record, token=token)

    async def _find(self, token: str) -> AppSession | None:
        stmt = select(AppSession).where(
            AppSession.token_hash == HashingService.hash_session_token(token)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def revoke(self, token: str | None) -> AppSession | None:
        """Mark the session revoked. Unknown tokens are ignored."""
        if not token:
            raise GrantTrackerException(
                MessageCode.SESSION_MISSING, status.HTTP_400_BAD_REQUEST
            )

        record = await self._find(token)
        if record is None:
            self.logger.info("Revoke requested for unknown session token")
            return None

        if not record.revoked:
            record.revoked = True
            await self._commit_and_refresh(record)
            self.logger.info(
                "Session revoked",
                user_id=str(record.user_id),
                session_id=str(record.id),
            )
        return record

    async def validate(self, token: str | None) -> AppSession:
        """Return the live session for ``token`` or raise a 401."""
        if not token:
            raise GrantTrackerException(
                MessageCode.SESSION_MISSING, status.HTTP_401_UNAUTHORIZED
            )

        record = await self._find(token)
        if record is None:
            raise GrantTrackerException(
                MessageCode.SESSION_INVALID, status.HTTP_401_UNAUTHORIZED
            )

        if record.revoked:
            raise GrantTrackerException(
                MessageCode.SESSION_REVOKED, status.HTTP_401_UNAUTHORIZED
            )

        if ensure_utc(record.expires_at) <= self._clock():
            raise GrantTrackerException(
                MessageCode.SESSION_EXPIRED,
                status.HTTP_401_UNAUTHORIZED,
                {"expired_at": ensure_utc(record.expires_at).isoformat()},
            )

        return record
