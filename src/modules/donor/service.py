from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from fastapi import status

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.core.context import AuthenticatedUserContext
from src.database.models import DonorRequest, DonorRequestStatus, Role
from src.utils.dates import utc_now


class DonorRequestService(BaseService):
    """Creation and status polling of "become a donor" requests.

    Each user has at most one request row; a rejected request is reopened
    instead of creating a second one. Approval happens out of band.
    """

    async def get_request(self, user: AuthenticatedUserContext) -> DonorRequest | None:
        result = await self.db.execute(
            select(DonorRequest).where(DonorRequest.user_id == user.user_id)
        )
        return result.scalar_one_or_none()

    async def get_status(
        self, user: AuthenticatedUserContext
    ) -> tuple[str, DonorRequest | None]:
        request = await self.get_request(user)
        if Role.DONOR in user.roles:
            return DonorRequestStatus.APPROVED.value, request
        if request is None:
            return "none", None
        return DonorRequestStatus(request.status).value, request

    async def submit(
        self, user: AuthenticatedUserContext, notes: str | None = None
    ) -> DonorRequest:
        if Role.DONOR in user.roles:
            raise GrantTrackerException(
                MessageCode.DONOR_ALREADY, status.HTTP_400_BAD_REQUEST
            )

        request = await self.get_request(user)
        if request is not None:
            return await self._reopen(request, notes)

        request = DonorRequest(
            user_id=user.user_id,
            status=DonorRequestStatus.PENDING,
            requested_at=utc_now(),
            notes=notes,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(request)
        except IntegrityError:
            # Another submission for this user won the insert
            raise GrantTrackerException(
                MessageCode.DONOR_REQUEST_PENDING, status.HTTP_400_BAD_REQUEST
            )
        await self._commit_and_refresh(request)

        self.logger.info("Donor request created", user_id=str(user.user_id))
        return request

    async def _reopen(self, request: DonorRequest, notes: str | None) -> DonorRequest:
        current = DonorRequestStatus(request.status)
        if current == DonorRequestStatus.PENDING:
            raise GrantTrackerException(
                MessageCode.DONOR_REQUEST_PENDING, status.HTTP_400_BAD_REQUEST
            )
        if current == DonorRequestStatus.APPROVED:
            raise GrantTrackerException(
                MessageCode.DONOR_ALREADY, status.HTTP_400_BAD_REQUEST
            )

        request.status = DonorRequestStatus.PENDING
        request.requested_at = utc_now()
        request.reviewed_by = None
        request.reviewed_at = None
        request.notes = notes
        await self._commit_and_refresh(request)

        self.logger.info("Rejected donor request reopened", user_id=str(request.user_id))
        return request
