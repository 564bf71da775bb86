from fastapi import APIRouter

from src.api.admin.router import router as admin_router
from src.api.donor.router import router as donor_router
from src.api.grant.router import router as grant_router
from src.api.health.router import router as health_router, root_router
from src.api.role.router import router as role_router
from src.api.session.router import router as session_router
from src.api.user.router import router as user_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Include domain routers
v1_router.include_router(admin_router)
v1_router.include_router(grant_router)
v1_router.include_router(role_router)
v1_router.include_router(user_router)

# Main API router; session and donor keep their browser-facing /api paths
api_router = APIRouter()
api_router.include_router(root_router)
api_router.include_router(health_router)
api_router.include_router(session_router)
api_router.include_router(donor_router)
api_router.include_router(v1_router)
