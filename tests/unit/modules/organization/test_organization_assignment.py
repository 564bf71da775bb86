"""Tests for OrganizationAssignmentService."""

from uuid import uuid4

import pytest

from src.api.core.constants import DEFAULT_ORGANIZATION_NAME_PREFIX
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.database.models import Profile
from src.modules.organization.assignment import OrganizationAssignmentService
from tests.utils.assertions import assert_grant_tracker_exception


@pytest.fixture
def service(db_session) -> OrganizationAssignmentService:
    return OrganizationAssignmentService(db_session)


@pytest.mark.asyncio
async def test_existing_organization_is_returned(service, viewer_user, test_organization):
    organization, created = await service.assign(viewer_user.id)

    assert created is False
    assert organization.id == test_organization.id


@pytest.mark.asyncio
async def test_creates_named_organization(
    service, session_factory, create_user, admin_user
):
    user = await create_user()

    organization, created = await service.assign(
        user.id, "Riverside Trust", assigned_by=admin_user.id
    )

    assert created is True
    assert organization.name == "Riverside Trust"
    assert organization.created_by == admin_user.id
    async with session_factory() as fresh:
        profile = await fresh.get(Profile, user.id)
        assert profile.organization_id == organization.id


@pytest.mark.asyncio
async def test_default_name_when_none_given(service, create_user):
    user = await create_user()

    organization, created = await service.assign(user.id)

    assert created is True
    assert organization.name.startswith(DEFAULT_ORGANIZATION_NAME_PREFIX)
    assert organization.created_by == user.id


@pytest.mark.asyncio
async def test_unknown_user(service):
    with pytest.raises(GrantTrackerException) as exc_info:
        await service.assign(uuid4())
    assert_grant_tracker_exception(exc_info.value, MessageCode.USER_NOT_FOUND, 404)
