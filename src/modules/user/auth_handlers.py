"""Access-token verification for bearer authentication."""

from fastapi import status
from jose import JWTError, jwt

from src.api.core.constants import JWT_ALGORITHM
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.core.context import AuthIdentity
from src.modules.user.jwt_claims import extract_identity_from_jwt
from src.utils.settings.auth import AuthSettings
from src.utils.logger import get_logger

logger = get_logger(__name__)


def decode_access_token(token: str) -> dict:
    settings = AuthSettings()
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {e}")
        raise GrantTrackerException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Invalid or expired authentication token"},
        )


def handle_jwt_auth(token: str) -> AuthIdentity:
    payload = decode_access_token(token)

    if payload.get("role") == "anon":
        raise GrantTrackerException(
            MessageCode.INSUFFICIENT_PERMISSIONS,
            status.HTTP_403_FORBIDDEN,
            {"description": "Anonymous access not permitted"},
        )

    try:
        return extract_identity_from_jwt(payload)
    except ValueError:
        raise GrantTrackerException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Token subject is not a valid user id"},
        )


def parse_bearer_token(authorization: str) -> str:
    auth_parts = authorization.split(" ")
    if len(auth_parts) != 2 or auth_parts[0].lower() != "bearer" or not auth_parts[1]:
        raise GrantTrackerException(
            MessageCode.INVALID_TOKEN,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Authorization header must be 'Bearer <token>'"},
        )
    return auth_parts[1]
