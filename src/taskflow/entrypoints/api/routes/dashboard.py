"""Dashboard routes: task counts."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from taskflow.core.tasks import TaskService
from taskflow.entrypoints.api.deps import get_task_service
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


@router.get("")
async def user_dashboard(actor: ActorDep, service: TaskServiceDep) -> dict[str, int]:
    """Counts over the current user's tasks."""
    return await service.user_dashboard(actor.user_id)


@router.get("/team/{team_id}")
async def team_dashboard(team_id: UUID, actor: ActorDep, service: TaskServiceDep) -> dict[str, int]:
    """Counts over a team's tasks. Team manager only."""
    return await service.team_dashboard(team_id, actor.user_id)
