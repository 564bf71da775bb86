"""Health check endpoints for monitoring."""

from fastapi import APIRouter

from src.api.core.dependencies import AsyncSessionDep, RedisClientDep
from src.modules.health.service import HealthService, OverallHealthStatus
from src.utils.settings.app import AppSettings

root_router = APIRouter()
router = APIRouter(prefix="/health", tags=["health"])


@root_router.get("/")
async def root():
    return {"service": "grant-tracker-api", "version": AppSettings().API_VERSION}


@router.get("/")
async def health_check(
    db: AsyncSessionDep,
    redis_client: RedisClientDep,
) -> OverallHealthStatus:
    """Health of the database and Redis."""
    return await HealthService(db, redis_client).run_all_checks()


@router.get("/liveness")
async def liveness_check():
    """Simple liveness check - indicates if service is running."""
    return {"status": "alive", "service": "grant-tracker-api"}
