import asyncio
from dataclasses import dataclass, field
from typing import Literal

import redis.asyncio as redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.utils.dates import utc_now
from src.utils.logger import get_logger

logger = get_logger(__name__)

HealthStatus = Literal["healthy", "degraded", "unhealthy"]


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: HealthStatus
    connected: bool
    details: dict = field(default_factory=dict)
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: HealthStatus
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """
    Checks the database and Redis.

    The database is required; Redis only backs rate limiting, which fails
    open, so losing it degrades the service instead of taking it down.
    """

    def __init__(self, db: AsyncSession, redis_client: redis.Redis | None):
        self.db = db
        self.redis = redis_client

    async def check_database_health(self) -> HealthCheckResult:
        try:
            result = await self.db.execute(text("SELECT 1"))
            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": result.scalar()},
            )
        except Exception as e:
            logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database", status="unhealthy", connected=False, error=str(e)
            )

    async def check_redis_health(self) -> HealthCheckResult:
        if self.redis is None:
            return HealthCheckResult(
                service="redis",
                status="degraded",
                connected=False,
                details={"configured": False},
            )
        try:
            await self.redis.ping()
            return HealthCheckResult(service="redis", status="healthy", connected=True)
        except Exception as e:
            logger.error(f"Redis health check error: {e}")
            return HealthCheckResult(
                service="redis", status="degraded", connected=False, error=str(e)
            )

    async def run_all_checks(self) -> OverallHealthStatus:
        results = await asyncio.gather(
            self.check_database_health(), self.check_redis_health()
        )

        overall: HealthStatus = "healthy"
        for result in results:
            if result.status == "unhealthy":
                overall = "unhealthy"
            elif result.status == "degraded" and overall == "healthy":
                overall = "degraded"

        return OverallHealthStatus(
            status=overall,
            services={result.service: result for result in results},
            timestamp=utc_now().isoformat(),
        )
