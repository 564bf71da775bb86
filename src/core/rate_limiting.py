import time
import uuid

import redis.asyncio as redis

from src.api.core.models.rate_limit import (
    ClientIdentifier,
    RateLimitResult,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Rate limiter using Redis sliding window algorithm."""

    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    async def is_allowed(
        self, client_identifier: ClientIdentifier, limit: int, window_seconds: int
    ) -> RateLimitResult:
        """
        Check if request is allowed within rate limit.

        Fails open: when Redis errors, the request is allowed.
        """
        try:
            key = client_identifier.to_cache_key()
            current_time = int(time.time())
            window_start = current_time - window_seconds

            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            # Score is the timestamp, member is unique per request
            request_id = f"req_{current_time}_{uuid.uuid4().hex}"
            pipe.zadd(key, {request_id: current_time})
            pipe.expire(key, window_seconds + 1)

            results = await pipe.execute()
            current_count = results[1] + 1

            is_allowed = current_count <= limit

            time_to_reset = None
            if not is_allowed:
                oldest_requests = await self.redis_client.zrange(
                    key, 0, 0, withscores=True
                )
                if oldest_requests:
                    oldest_time = int(oldest_requests[0][1])
                    time_to_reset = max(
                        0, window_seconds - (current_time - oldest_time)
                    )
                else:
                    time_to_reset = window_seconds

                await self.redis_client.zrem(key, request_id)
                current_count -= 1

            return RateLimitResult(
                is_allowed=is_allowed,
                current_count=current_count,
                time_to_reset=time_to_reset,
                client_identifier=client_identifier,
                limit=limit,
                window_seconds=window_seconds,
            )

        except Exception as e:
            logger.error(f"Rate limiter error for client {client_identifier}: {e}")
            return RateLimitResult(
                is_allowed=True,
                current_count=0,
                time_to_reset=None,
                client_identifier=client_identifier,
                limit=limit,
                window_seconds=window_seconds,
            )
