"""Task routes: CRUD, status, priority, time tracking, assignment and review."""

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from taskflow.core.domain_types import Task, TimeLogEntry
from taskflow.core.tasks import TaskService
from taskflow.entrypoints.api.deps import get_task_service
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep

router = APIRouter(prefix="/tasks", tags=["tasks"])

TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


# Request models
class TaskCreateRequest(BaseModel):
    """New task body. Title is checked by the service."""

    title: str = ""
    description: str | None = None
    priority: str | None = None
    deadline: datetime | None = None
    urgent_before_minutes: int | None = None


class TaskUpdateRequest(BaseModel):
    """Descriptive task fields; omitted fields are left alone."""

    title: str | None = None
    description: str | None = None
    deadline: datetime | None = None
    urgent_before_minutes: int | None = None


class StatusUpdateRequest(BaseModel):
    """Status change body."""

    status: str | None = None


class PriorityUpdateRequest(BaseModel):
    """Priority change body."""

    priority: str | None = None


class TrackTimeRequest(BaseModel):
    """Time tracking body. Minutes is validated by the service."""

    minutes: Any = None
    note: str = ""


class AssignRequest(BaseModel):
    """Assign an existing task to a team member."""

    team_id: UUID
    user_id: UUID


class AssignNewRequest(TaskCreateRequest):
    """Create a task directly for a team member."""

    team_id: UUID
    user_id: UUID


class SubmitRequest(BaseModel):
    """Work submission body."""

    submission_link: str = ""
    submission_note: str = ""


class ReviewRequest(BaseModel):
    """Manager review body."""

    action: str
    feedback: str = ""


def _task_fields(body: BaseModel) -> dict[str, Any]:
    return body.model_dump(exclude_none=True, exclude={"team_id", "user_id"})


# Collections
@router.get("", response_model=list[Task])
async def list_tasks(
    actor: ActorDep,
    service: TaskServiceDep,
    search: Annotated[str | None, Query()] = None,
) -> list[Task]:
    """List the current user's tasks, newest first."""
    return await service.list_tasks(actor.user_id, search=search)


@router.post("", response_model=Task, status_code=201)
async def create_task(body: TaskCreateRequest, actor: ActorDep, service: TaskServiceDep) -> Task:
    """Create a personal task."""
    return await service.create_task(_task_fields(body), actor.user_id)


@router.get("/assigned", response_model=list[Task])
async def list_assigned(actor: ActorDep, service: TaskServiceDep) -> list[Task]:
    """Tasks managers assigned to the current user."""
    return await service.list_assigned(actor.user_id)


@router.get("/overdue", response_model=list[Task])
async def list_overdue(actor: ActorDep, service: TaskServiceDep) -> list[Task]:
    """Open tasks past their deadline."""
    return await service.list_overdue(actor.user_id)


@router.get("/urgent", response_model=list[Task])
async def list_urgent(actor: ActorDep, service: TaskServiceDep) -> list[Task]:
    """Open tasks close to their deadline."""
    return await service.list_urgent(actor.user_id)


@router.post("/assign-new", response_model=Task, status_code=201)
async def assign_new(body: AssignNewRequest, actor: ActorDep, service: TaskServiceDep) -> Task:
    """Create a task on a team member's plate. Team manager only."""
    return await service.assign_new(_task_fields(body), body.team_id, body.user_id, actor.user_id)


@router.get("/team/{team_id}", response_model=list[Task])
async def list_team_tasks(team_id: UUID, actor: ActorDep, service: TaskServiceDep) -> list[Task]:
    """Every task of a team. Team manager only."""
    return await service.list_team_tasks(team_id, actor.user_id)


@router.get("/team/{team_id}/mine", response_model=list[Task])
async def list_my_team_tasks(
    team_id: UUID, actor: ActorDep, service: TaskServiceDep
) -> list[Task]:
    """The current user's tasks within a team."""
    return await service.list_my_team_tasks(team_id, actor.user_id)


@router.get("/team/{team_id}/member/{user_id}", response_model=list[Task])
async def list_member_tasks(
    team_id: UUID, user_id: UUID, actor: ActorDep, service: TaskServiceDep
) -> list[Task]:
    """A member's tasks within a team."""
    return await service.list_member_tasks(team_id, user_id, actor.user_id)


# Single task
@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: UUID, actor: ActorDep, service: TaskServiceDep) -> Task:
    """Get one task."""
    return await service.get_task(task_id, actor.user_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: UUID, body: TaskUpdateRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Edit a task's descriptive fields."""
    return await service.update_task(task_id, _task_fields(body), actor.user_id)


@router.delete("/{task_id}")
async def delete_task(task_id: UUID, actor: ActorDep, service: TaskServiceDep) -> dict[str, str]:
    """Delete a task. Owner only."""
    await service.delete_task(task_id, actor.user_id)
    return {"message": "Task deleted successfully"}


@router.patch("/{task_id}/status", response_model=Task)
async def update_status(
    task_id: UUID, body: StatusUpdateRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Change a task's status."""
    return await service.update_status(task_id, body.status, actor.user_id)


@router.patch("/{task_id}/priority", response_model=Task)
async def update_priority(
    task_id: UUID, body: PriorityUpdateRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Change a task's priority."""
    return await service.update_priority(task_id, body.priority, actor.user_id)


@router.post("/{task_id}/time", response_model=Task)
async def track_time(
    task_id: UUID, body: TrackTimeRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Add minutes to a task."""
    return await service.track_time(task_id, body.minutes, actor.user_id, note=body.note)


@router.get("/{task_id}/time", response_model=list[TimeLogEntry])
async def list_time_logs(
    task_id: UUID, actor: ActorDep, service: TaskServiceDep
) -> list[TimeLogEntry]:
    """Time entries logged on a task."""
    return await service.list_time_logs(task_id, actor.user_id)


@router.post("/{task_id}/assign", response_model=Task)
async def assign(
    task_id: UUID, body: AssignRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Assign an existing task to a team member. Team manager only."""
    return await service.assign(task_id, body.team_id, body.user_id, actor.user_id)


@router.post("/{task_id}/submit", response_model=Task)
async def submit(
    task_id: UUID, body: SubmitRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Submit assigned work for review."""
    return await service.submit(
        task_id, actor.user_id, link=body.submission_link, note=body.submission_note
    )


@router.post("/{task_id}/review", response_model=Task)
async def review(
    task_id: UUID, body: ReviewRequest, actor: ActorDep, service: TaskServiceDep
) -> Task:
    """Approve or reject a submission."""
    return await service.review(task_id, actor.user_id, body.action, note=body.feedback)
