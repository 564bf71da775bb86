"""Authentication and permission decorators."""

from functools import wraps
from typing import Any

from fastapi import Request, status

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.core.context import AuthenticatedUserContext
from src.database.models import Permission, Role
from src.utils.logger import get_logger

logger = get_logger(__name__)


def _find_user_context(args: tuple, kwargs: dict[str, Any]) -> AuthenticatedUserContext:
    for value in (*args, *kwargs.values()):
        if isinstance(value, AuthenticatedUserContext):
            return value

    raise GrantTrackerException(
        MessageCode.AUTH_MISSING_CONTEXT,
        status.HTTP_401_UNAUTHORIZED,
        {"description": "User authentication required for permission check"},
    )


def _find_path(args: tuple, kwargs: dict[str, Any]) -> str | None:
    for value in (*args, *kwargs.values()):
        if isinstance(value, Request):
            return value.url.path
    return None


def require_permission(permission: Permission):
    """
    Decorator to check that the caller's roles grant ``permission``.

    The endpoint must take a ``CurrentUserAuthDep`` parameter.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            user = _find_user_context(args, kwargs)

            if not user.can(permission):
                logger.warning(
                    "Permission denied",
                    user_id=str(user.user_id),
                    permission=permission.value,
                    endpoint=_find_path(args, kwargs),
                )
                raise GrantTrackerException(
                    MessageCode.AUTH_INSUFFICIENT_ROLE_PERMISSIONS,
                    status.HTTP_403_FORBIDDEN,
                    details={"permission": permission.value},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_role(*roles: Role):
    """Decorator to check that the caller holds (or inherits) one of ``roles``."""

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            user = _find_user_context(args, kwargs)

            if not any(user.has_role(role) for role in roles):
                logger.warning(
                    "Unauthorized role-restricted access attempt",
                    user_id=str(user.user_id),
                    required=[role.value for role in roles],
                    endpoint=_find_path(args, kwargs),
                )
                raise GrantTrackerException(
                    MessageCode.FORBIDDEN,
                    status.HTTP_403_FORBIDDEN,
                    {"required_roles": [role.value for role in roles]},
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
