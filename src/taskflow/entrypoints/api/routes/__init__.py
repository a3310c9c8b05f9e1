"""API route modules."""

from fastapi import APIRouter

from taskflow.entrypoints.api.routes.auth import router as auth_router
from taskflow.entrypoints.api.routes.comments import router as comments_router
from taskflow.entrypoints.api.routes.dashboard import router as dashboard_router
from taskflow.entrypoints.api.routes.notifications import router as notifications_router
from taskflow.entrypoints.api.routes.tasks import router as tasks_router
from taskflow.entrypoints.api.routes.teams import router as teams_router
from taskflow.entrypoints.api.routes.users import router as users_router

# Create main API router
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(tasks_router)
api_router.include_router(comments_router)
api_router.include_router(teams_router)
api_router.include_router(notifications_router)
api_router.include_router(dashboard_router)

__all__ = ["api_router"]
