"""Tests for DonorRequestService."""

import pytest

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.database.models import DonorRequestStatus, Role
from src.modules.donor.service import DonorRequestService
from tests.factories import DonorRequestFactory
from tests.utils.assertions import assert_grant_tracker_exception


@pytest.fixture
def service(db_session) -> DonorRequestService:
    return DonorRequestService(db_session)


@pytest.mark.asyncio
async def test_status_without_request(service, viewer_user):
    status_value, request = await service.get_status(viewer_user.context)

    assert status_value == "none"
    assert request is None


@pytest.mark.asyncio
async def test_submit_creates_pending_request(service, viewer_user):
    request = await service.submit(viewer_user.context, "Happy to help")

    assert request.user_id == viewer_user.id
    assert request.status == DonorRequestStatus.PENDING
    assert request.notes == "Happy to help"

    status_value, current = await service.get_status(viewer_user.context)
    assert status_value == "pending"
    assert current.id == request.id


@pytest.mark.asyncio
async def test_second_submission_while_pending_is_rejected(service, viewer_user):
    await service.submit(viewer_user.context)

    with pytest.raises(GrantTrackerException) as exc_info:
        await service.submit(viewer_user.context)
    assert_grant_tracker_exception(exc_info.value, MessageCode.DONOR_REQUEST_PENDING, 400)


@pytest.mark.asyncio
async def test_donor_cannot_request_again(service, create_user):
    donor = await create_user(roles={Role.DONOR})

    with pytest.raises(GrantTrackerException) as exc_info:
        await service.submit(donor.context)
    assert_grant_tracker_exception(exc_info.value, MessageCode.DONOR_ALREADY, 400)

    status_value, _ = await service.get_status(donor.context)
    assert status_value == "approved"


@pytest.mark.asyncio
async def test_rejected_request_is_reopened(service, db_session, viewer_user):
    rejected = await DonorRequestFactory.create_async(
        db_session,
        user_id=viewer_user.id,
        status=DonorRequestStatus.REJECTED,
        notes="old notes",
    )

    request = await service.submit(viewer_user.context, "Trying again")

    assert request.id == rejected.id
    assert request.status == DonorRequestStatus.PENDING
    assert request.notes == "Trying again"
    assert request.reviewed_by is None


@pytest.mark.asyncio
async def test_approved_request_without_role_reads_approved(
    service, db_session, viewer_user
):
    await DonorRequestFactory.create_async(
        db_session, user_id=viewer_user.id, status=DonorRequestStatus.APPROVED
    )

    status_value, _ = await service.get_status(viewer_user.context)
    assert status_value == "approved"

    with pytest.raises(GrantTrackerException) as exc_info:
        await service.submit(viewer_user.context)
    assert_grant_tracker_exception(exc_info.value, MessageCode.DONOR_ALREADY, 400)
