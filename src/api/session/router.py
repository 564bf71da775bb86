"""Session Bridge: application session cookie endpoints."""

from datetime import datetime

from fastapi import APIRouter, Request, Response, status

from src.api.core.decorators.rate_limit import rate_limit
from src.api.core.dependencies import (
    CurrentIdentityDep,
    RedisClientDep,
    SessionBridgeServiceDep,
)
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import APIResponse, MessageCode
from src.api.session.schemas import (
    SessionCreateRequest,
    SessionCreateResponse,
    SessionModel,
    SessionResponse,
    SessionRevokeResponse,
    SessionTokenData,
)
from src.utils.dates import ensure_utc
from src.utils.settings.app import AppSettings
from src.utils.settings.session import SessionSettings

router = APIRouter(prefix="/api/session", tags=["session"])


def _set_session_cookie(
    response: Response, token: str, persistent: bool, expires_at: datetime
) -> None:
    settings = SessionSettings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        secure=AppSettings().is_production,
        path="/",
        # Without Expires the browser drops the cookie when it closes
        expires=expires_at if persistent else None,
    )


def _clear_session_cookie(response: Response) -> None:
    settings = SessionSettings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite=settings.SESSION_COOKIE_SAMESITE,
        secure=AppSettings().is_production,
    )


@router.post("", response_model=SessionCreateResponse)
@rate_limit(
    lambda: AppSettings().SESSION_CREATE_RATE_LIMIT,
    lambda: AppSettings().SESSION_CREATE_RATE_WINDOW_SECONDS,
    scope="session",
)
async def create_session(
    request: Request,
    response: Response,
    identity: CurrentIdentityDep,
    session_bridge: SessionBridgeServiceDep,
    redis_client: RedisClientDep,
    payload: SessionCreateRequest | None = None,
) -> SessionCreateResponse:
    """Mint an application session for the signed-in user and set the cookie."""
    if payload is None or payload.user_id is None:
        raise GrantTrackerException(
            MessageCode.SESSION_USER_REQUIRED, status.HTTP_400_BAD_REQUEST
        )

    if payload.user_id != identity.user_id:
        raise GrantTrackerException(
            MessageCode.SESSION_USER_MISMATCH,
            status.HTTP_403_FORBIDDEN,
            {"user_id": str(payload.user_id)},
        )

    issued = await session_bridge.create(payload.user_id, payload.persistent)
    expires_at = ensure_utc(issued.record.expires_at)
    _set_session_cookie(response, issued.token, payload.persistent, expires_at)

    return APIResponse.success(
        message_code=MessageCode.SESSION_CREATED,
        data=SessionTokenData(token=issued.token, expires_at=expires_at),
    )


@router.delete("", response_model=SessionRevokeResponse)
async def revoke_session(
    request: Request,
    response: Response,
    session_bridge: SessionBridgeServiceDep,
) -> SessionRevokeResponse:
    """Revoke the session named by the cookie and clear the cookie."""
    token = request.cookies.get(SessionSettings().SESSION_COOKIE_NAME)
    await session_bridge.revoke(token)
    _clear_session_cookie(response)

    return APIResponse.success(message_code=MessageCode.SESSION_REVOKED_OK, data=True)


@router.get("", response_model=SessionResponse)
async def get_session(
    request: Request,
    session_bridge: SessionBridgeServiceDep,
) -> SessionResponse:
    """Validate the session cookie and return the stored session."""
    token = request.cookies.get(SessionSettings().SESSION_COOKIE_NAME)
    record = await session_bridge.validate(token)

    session = SessionModel.model_validate(record)
    session.created_at = ensure_utc(session.created_at)
    session.expires_at = ensure_utc(session.expires_at)
    return APIResponse.success(message_code=MessageCode.SESSION_VALID, data=session)
