import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.api.core.constants import SKIP_AUTH_PATHS, SKIP_AUTH_PATTERNS
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.modules.user.auth_handlers import handle_jwt_auth, parse_bearer_token
from src.utils.path_helpers import path_matches, path_matches_pattern

logger = structlog.get_logger(__name__)


def _error_response(exc: GrantTrackerException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response_dict(),
        headers=exc.headers,
    )


async def auth_middleware(request: Request, call_next):
    """
    Verify the Supabase bearer token and expose the caller identity.

    Sets ``request.state.identity``; roles and profile are loaded later by
    the ``CurrentUserAuthDep`` dependency, only for endpoints that need them.
    """
    request.state.identity = None

    if request.method == "OPTIONS" or path_matches(request.url.path, SKIP_AUTH_PATHS):
        return await call_next(request)

    if path_matches_pattern(request.url.path, SKIP_AUTH_PATTERNS, request.method):
        logger.debug("Skipping auth for cookie endpoint", path=request.url.path)
        return await call_next(request)

    authorization = request.headers.get("Authorization", "")
    if not authorization:
        logger.debug("No authentication provided - rejecting request")
        return _error_response(
            GrantTrackerException(
                MessageCode.AUTH_REQUIRED,
                status.HTTP_401_UNAUTHORIZED,
                {"description": "Provide an 'Authorization: Bearer <token>' header"},
            )
        )

    try:
        token = parse_bearer_token(authorization)
        identity = handle_jwt_auth(token)
    except GrantTrackerException as e:
        logger.debug(
            "Authentication rejected",
            message_code=e.message_code,
            status_code=e.status_code,
        )
        return _error_response(e)

    request.state.identity = identity
    structlog.contextvars.bind_contextvars(user_id=str(identity.user_id))

    return await call_next(request)
