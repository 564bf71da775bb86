from functools import wraps
from typing import Any, Callable

from fastapi import Request, status
import redis.asyncio as redis

from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.api.core.models.rate_limit import (
    ClientIdentifier,
    RateLimitClientType,
)
from src.core.rate_limiting import RateLimiter
from src.utils.logger import get_client_ip, get_logger


logger = get_logger(__name__)


def create_rate_limit_key(request: Request, scope: str) -> ClientIdentifier:
    """
    Create rate limit client identifier.

    Authenticated callers are limited per user id, everyone else per IP.
    """
    identity = getattr(request.state, "identity", None)
    if identity is not None:
        return ClientIdentifier(
            client_type=RateLimitClientType.USER,
            client_id=str(identity.user_id),
            scope=scope,
        )

    return ClientIdentifier(
        client_type=RateLimitClientType.IP,
        client_id=get_client_ip(request),
        scope=scope,
    )


def rate_limit(
    limit: int | Callable[[], int],
    window_seconds: int | Callable[[], int],
    scope: str = "default",
):
    """
    Rate limiting decorator for FastAPI endpoints.

    Args:
        limit: Maximum requests allowed, or a callable returning it
        window_seconds: Time window in seconds, or a callable returning it
        scope: Key namespace so endpoints do not share a budget
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request: Request | None = None
            redis_client: redis.Redis | None = None

            for arg in args:
                if isinstance(arg, Request):
                    request = arg
                    break
            if not request:
                request = kwargs.get("request")

            for arg in args:
                if isinstance(arg, redis.Redis):
                    redis_client = arg
                    break
            if not redis_client:
                redis_client = kwargs.get("redis_client")

            if not request:
                logger.error("Rate limit decorator: Request not found")
                return await func(*args, **kwargs)

            if not redis_client:
                logger.warning(
                    "Rate limit decorator: Redis client not found, skipping rate limit"
                )
                return await func(*args, **kwargs)

            await check_rate_limit(
                request,
                redis_client,
                limit() if callable(limit) else limit,
                window_seconds() if callable(window_seconds) else window_seconds,
                scope,
            )

            return await func(*args, **kwargs)

        return wrapper

    return decorator


async def check_rate_limit(
    request: Request,
    redis_client: redis.Redis,
    limit: int,
    window_seconds: int,
    scope: str = "default",
) -> None:
    """
    Check rate limit for endpoint.

    Raises:
        GrantTrackerException: When rate limit is exceeded
    """
    client_identifier = create_rate_limit_key(request, scope)

    rate_limiter = RateLimiter(redis_client)
    result = await rate_limiter.is_allowed(client_identifier, limit, window_seconds)

    if not result.is_allowed:
        retry_after = result.time_to_reset or result.window_seconds
        logger.warning(
            f"Rate limit exceeded for {result.client_identifier} using key {client_identifier.to_cache_key()}: "
            f"{result.current_count}/{result.limit} in {result.window_seconds}s"
        )

        raise GrantTrackerException(
            MessageCode.RATE_LIMIT_EXCEEDED,
            status.HTTP_429_TOO_MANY_REQUESTS,
            details={
                "limit": result.limit,
                "window_seconds": result.window_seconds,
                "current_count": result.current_count,
                "retry_after": retry_after,
                "client_type": result.client_identifier.client_type.value,
            },
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(result.limit),
                "X-RateLimit-Reset": str(retry_after),
                "X-RateLimit-Window": str(result.window_seconds),
            },
        )
