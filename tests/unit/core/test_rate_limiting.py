"""Tests for rate limiting functionality."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from src.api.core.decorators.rate_limit import check_rate_limit, create_rate_limit_key
from src.api.core.exceptions.base import GrantTrackerException
from src.api.core.messages import MessageCode
from src.api.core.models.rate_limit import ClientIdentifier, RateLimitClientType
from src.core.context import AuthIdentity
from src.core.rate_limiting import RateLimiter


def _mock_redis(current_count: int, oldest_score: int | None = None) -> MagicMock:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, current_count, 1, True])

    redis_client = MagicMock()
    redis_client.pipeline.return_value = pipe
    redis_client.zrange = AsyncMock(
        return_value=[("req", oldest_score)] if oldest_score is not None else []
    )
    redis_client.zrem = AsyncMock(return_value=1)
    return redis_client


def test_client_identifier_creation_user():
    user_id = uuid4()
    mock_request = MagicMock()
    mock_request.state.identity = AuthIdentity(user_id=user_id, email="a@example.org")

    result = create_rate_limit_key(mock_request, "session")

    assert result.client_type == RateLimitClientType.USER
    assert result.client_id == str(user_id)
    assert result.to_cache_key() == f"rate_limit:session:user:{user_id}"
    assert str(result) == f"user:{user_id}"


def test_client_identifier_creation_ip_fallback():
    mock_request = MagicMock()
    mock_request.state.identity = None

    with patch(
        "src.api.core.decorators.rate_limit.get_client_ip", return_value="10.0.0.7"
    ):
        result = create_rate_limit_key(mock_request, "donor")

    assert result.client_type == RateLimitClientType.IP
    assert result.to_cache_key() == "rate_limit:donor:ip:10.0.0.7"


@pytest.mark.asyncio
async def test_rate_limiter_allows_requests_under_limit():
    limiter = RateLimiter(_mock_redis(current_count=2))
    identifier = ClientIdentifier(client_type=RateLimitClientType.IP, client_id="1.2.3.4")

    result = await limiter.is_allowed(identifier, limit=5, window_seconds=60)

    assert result.is_allowed is True
    assert result.current_count == 3
    assert result.time_to_reset is None


@pytest.mark.asyncio
async def test_rate_limiter_rejects_over_limit_and_removes_attempt():
    redis_client = _mock_redis(current_count=5, oldest_score=0)
    limiter = RateLimiter(redis_client)
    identifier = ClientIdentifier(client_type=RateLimitClientType.IP, client_id="1.2.3.4")

    with patch("src.core.rate_limiting.time.time", return_value=30):
        result = await limiter.is_allowed(identifier, limit=5, window_seconds=60)

    assert result.is_allowed is False
    assert result.current_count == 5
    assert result.time_to_reset == 30
    redis_client.zrem.assert_awaited_once()


@pytest.mark.asyncio
async def test_rate_limiter_fails_open_when_redis_errors():
    redis_client = MagicMock()
    redis_client.pipeline.side_effect = ConnectionError("redis down")
    limiter = RateLimiter(redis_client)
    identifier = ClientIdentifier(client_type=RateLimitClientType.USER, client_id="u1")

    result = await limiter.is_allowed(identifier, limit=1, window_seconds=60)

    assert result.is_allowed is True


@pytest.mark.asyncio
async def test_check_rate_limit_raises_429_with_retry_after():
    mock_request = MagicMock()
    mock_request.state.identity = AuthIdentity(user_id=uuid4(), email="a@example.org")
    redis_client = _mock_redis(current_count=10, oldest_score=None)

    with pytest.raises(GrantTrackerException) as exc_info:
        await check_rate_limit(mock_request, redis_client, 10, 60, scope="session")

    assert exc_info.value.status_code == 429
    assert exc_info.value.message_code == MessageCode.RATE_LIMIT_EXCEEDED
    assert exc_info.value.headers["Retry-After"] == "60"
