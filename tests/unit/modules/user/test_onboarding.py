"""Tests for UserOnboardingService."""

from uuid import uuid4

import pytest

from src.core.context import AuthIdentity
from src.database.models import FirstAdminClaim, Role, UserRolesRecord
from src.modules.user.onboarding import FIRST_USER_ROLES, UserOnboardingService
from tests.factories import ProfileFactory


def _identity(email: str, full_name: str | None = None) -> AuthIdentity:
    return AuthIdentity(user_id=uuid4(), email=email, full_name=full_name)


@pytest.mark.asyncio
async def test_first_user_becomes_admin(db_session, session_factory):
    identity = _identity("founder@example.org", "Founder")

    result = await UserOnboardingService(db_session).onboard(identity)

    assert result.created is True
    assert result.roles == FIRST_USER_ROLES == frozenset({Role.ADMIN, Role.VIEWER})
    assert result.profile.full_name == "Founder"
    async with session_factory() as fresh:
        claim = await fresh.get(FirstAdminClaim, 1)
        assert claim.user_id == identity.user_id


@pytest.mark.asyncio
async def test_later_users_are_viewers(db_session):
    service = UserOnboardingService(db_session)
    await service.onboard(_identity("first@example.org"))

    result = await service.onboard(_identity("second@example.org"))

    assert result.created is True
    assert result.roles == frozenset({Role.VIEWER})


@pytest.mark.asyncio
async def test_onboarding_is_idempotent(db_session, session_factory):
    service = UserOnboardingService(db_session)
    identity = _identity("again@example.org")

    first = await service.onboard(identity)
    second = await service.onboard(identity)

    assert second.created is False
    assert second.roles == first.roles
    async with session_factory() as fresh:
        record = await fresh.get(UserRolesRecord, identity.user_id)
        assert record.is_admin is True


@pytest.mark.asyncio
async def test_claimed_seat_blocks_admin_even_with_empty_role_table(db_session):
    # A concurrent first sign-up already claimed the seat
    db_session.add(FirstAdminClaim(user_id=uuid4()))
    await db_session.commit()

    result = await UserOnboardingService(db_session).onboard(
        _identity("racer@example.org")
    )

    assert result.roles == frozenset({Role.VIEWER})


@pytest.mark.asyncio
async def test_existing_profile_is_kept_and_name_updated(db_session):
    identity = _identity("kept@example.org")
    await ProfileFactory.create_async(
        db_session, id=identity.user_id, email=identity.email, full_name="Old Name"
    )

    result = await UserOnboardingService(db_session).onboard(identity, "New Name")

    assert result.profile.full_name == "New Name"


@pytest.mark.asyncio
async def test_name_falls_back_to_email_local_part(db_session):
    result = await UserOnboardingService(db_session).onboard(
        _identity("maria.lopez@example.org")
    )

    assert result.profile.full_name == "maria.lopez"
