"""Tests for SessionBridgeService."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.database.models import AppSession
from src.modules.session.bridge import SessionBridgeService
from src.utils.hashing import HashingService
from src.utils.settings.session import SessionSettings
from tests.factories import AppSessionFactory
from tests.utils.assertions import assert_grant_tracker_exception


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def bridge(db_session, clock) -> SessionBridgeService:
    settings = SessionSettings(
        PERSISTENT_SESSION_TTL_SECONDS=30 * 24 * 3600,
        EPHEMERAL_SESSION_TTL_SECONDS=3600,
    )
    return SessionBridgeService(db_session, settings=settings, clock=clock)


def test_ttl_depends_on_persistence(bridge):
    assert bridge.ttl_for(True) == timedelta(days=30)
    assert bridge.ttl_for(False) == timedelta(hours=1)


@pytest.mark.asyncio
async def test_create_stores_only_the_token_hash(bridge, clock):
    user_id = uuid4()

    issued = await bridge.create(user_id, persistent=False)

    assert issued.token
    assert issued.record.user_id == user_id
    assert issued.record.token_hash == HashingService.hash_session_token(issued.token)
    assert issued.record.token_hash != issued.token
    assert issued.record.revoked is False
    assert issued.record.persistent is False


@pytest.mark.asyncio
async def test_persistent_session_lives_thirty_days(bridge, clock):
    issued = await bridge.create(uuid4(), persistent=True)

    clock.advance(days=29)
    record = await bridge.validate(issued.token)
    assert record.id == issued.record.id

    clock.advance(days=2)
    with pytest.raises(GrantTrackerException) as exc_info:
        await bridge.validate(issued.token)
    assert_grant_tracker_exception(exc_info.value, MessageCode.SESSION_EXPIRED, 401)


@pytest.mark.asyncio
async def test_ephemeral_session_expires_after_an_hour(bridge, clock):
    issued = await bridge.create(uuid4(), persistent=False)

    clock.advance(minutes=59)
    await bridge.validate(issued.token)

    clock.advance(minutes=1)
    with pytest.raises(GrantTrackerException) as exc_info:
        await bridge.validate(issued.token)
    assert_grant_tracker_exception(exc_info.value, MessageCode.SESSION_EXPIRED, 401)
    assert "expired_at" in exc_info.value.details


@pytest.mark.asyncio
async def test_each_sign_in_gets_its_own_session(bridge):
    user_id = uuid4()

    first = await bridge.create(user_id, persistent=False)
    second = await bridge.create(user_id, persistent=True)

    assert first.token != second.token
    assert first.record.id != second.record.id


@pytest.mark.asyncio
async def test_validate_missing_token(bridge):
    for token in (None, ""):
        with pytest.raises(GrantTrackerException) as exc_info:
            await bridge.validate(token)
        assert_grant_tracker_exception(exc_info.value, MessageCode.SESSION_MISSING, 401)


@pytest.mark.asyncio
async def test_validate_unknown_token(bridge):
    with pytest.raises(GrantTrackerException) as exc_info:
        await bridge.validate(HashingService.generate_session_token())
    assert_grant_tracker_exception(exc_info.value, MessageCode.SESSION_INVALID, 401)


@pytest.mark.asyncio
async def test_revoke_marks_session_revoked(bridge, session_factory):
    issued = await bridge.create(uuid4(), persistent=False)

    record = await bridge.revoke(issued.token)

    assert record.revoked is True
    with pytest.raises(GrantTrackerException) as exc_info:
        await bridge.validate(issued.token)
    assert_grant_tracker_exception(exc_info.value, MessageCode.SESSION_REVOKED, 401)

    async with session_factory() as fresh:
        stored = await fresh.get(AppSession, issued.record.id)
        assert stored.revoked is True


@pytest.mark.asyncio
async def test_revoke_twice_is_harmless(bridge):
    issued = await bridge.create(uuid4(), persistent=False)

    await bridge.revoke(issued.token)
    record = await bridge.revoke(issued.token)

    assert record.revoked is True


@pytest.mark.asyncio
async def test_revoke_unknown_token_returns_none(bridge):
    assert await bridge.revoke("not-a-known-token") is None


@pytest.mark.asyncio
async def test_revoke_without_token_is_a_bad_request(bridge):
    with pytest.raises(GrantTrackerException) as exc_info:
        await bridge.revoke(None)
    assert_grant_tracker_exception(exc_info.value, MessageCode.SESSION_MISSING, 400)


@pytest.mark.asyncio
async def test_revoking_one_session_leaves_others(bridge, db_session):
    user_id = uuid4()
    token = HashingService.generate_session_token()
    await AppSessionFactory.create_async(
        db_session,
        user_id=user_id,
        token_hash=HashingService.hash_session_token(token),
        expires_at=datetime(2026, 10, 19, tzinfo=timezone.utc),
    )
    issued = await bridge.create(user_id, persistent=False)

    await bridge.revoke(issued.token)

    record = await bridge.validate(token)
    assert record.user_id == user_id
