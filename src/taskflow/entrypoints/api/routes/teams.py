"""Team routes: creation, membership, profile and leave requests."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from taskflow.core.domain_types import LeaveRequest, Team
from taskflow.core.leave import LeaveRequestWorkflow
from taskflow.core.teams import TeamService
from taskflow.entrypoints.api.deps import get_leave_workflow, get_team_service
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep

router = APIRouter(prefix="/teams", tags=["teams"])

TeamServiceDep = Annotated[TeamService, Depends(get_team_service)]
LeaveWorkflowDep = Annotated[LeaveRequestWorkflow, Depends(get_leave_workflow)]


# Request/Response models
class TeamCreateRequest(BaseModel):
    """Team creation body."""

    name: str = ""


class MemberRequest(BaseModel):
    """Identify a user by id or username."""

    user: str


class TeamProfileRequest(BaseModel):
    """Editable team profile fields."""

    name: str | None = None
    bio: str | None = None
    profile_picture: str | None = None


class TeamListResponse(BaseModel):
    """Teams the user manages and belongs to."""

    managed: list[Team]
    member_of: list[Team]


class MembershipResponse(BaseModel):
    """Team after a membership change, and the user concerned."""

    team: Team
    user: dict[str, Any]


@router.post("", response_model=Team, status_code=201)
async def create_team(body: TeamCreateRequest, actor: ActorDep, service: TeamServiceDep) -> Team:
    """Create a team managed by the current user."""
    return await service.create_team(body.name, actor.user_id)


@router.get("", response_model=TeamListResponse)
async def list_teams(actor: ActorDep, service: TeamServiceDep) -> TeamListResponse:
    """Teams the current user manages or belongs to."""
    return TeamListResponse(
        managed=await service.list_by_manager(actor.user_id),
        member_of=await service.list_by_member(actor.user_id),
    )


@router.get("/{team_id}", response_model=Team)
async def get_team(team_id: UUID, actor: ActorDep, service: TeamServiceDep) -> Team:
    """Get one team."""
    return await service.get_team(team_id)


@router.put("/{team_id}/profile", response_model=Team)
async def update_team_profile(
    team_id: UUID, body: TeamProfileRequest, actor: ActorDep, service: TeamServiceDep
) -> Team:
    """Update a team's profile. Manager only."""
    return await service.update_profile(team_id, actor.user_id, body.model_dump(exclude_none=True))


@router.post("/{team_id}/members", response_model=MembershipResponse)
async def add_member(
    team_id: UUID, body: MemberRequest, actor: ActorDep, service: TeamServiceDep
) -> MembershipResponse:
    """Add a member. Manager only."""
    team, user = await service.add_member(team_id, body.user, actor.user_id)
    return MembershipResponse(team=team, user=user.to_public())


@router.delete("/{team_id}/members/{identifier}", response_model=MembershipResponse)
async def remove_member(
    team_id: UUID, identifier: str, actor: ActorDep, service: TeamServiceDep
) -> MembershipResponse:
    """Remove a member. Manager only."""
    team, user = await service.remove_member(team_id, identifier, actor.user_id)
    return MembershipResponse(team=team, user=user.to_public())


# Leave requests
@router.post("/{team_id}/leave-requests", response_model=LeaveRequest, status_code=201)
async def request_leave(
    team_id: UUID, actor: ActorDep, workflow: LeaveWorkflowDep
) -> LeaveRequest:
    """Ask to leave a team."""
    return await workflow.create(team_id, actor.user_id)


@router.get("/{team_id}/leave-requests", response_model=list[LeaveRequest])
async def list_leave_requests(
    team_id: UUID,
    actor: ActorDep,
    workflow: LeaveWorkflowDep,
    status: Annotated[str, Query()] = "pending",
) -> list[LeaveRequest]:
    """A team's leave requests. Manager only."""
    return await workflow.list_for_manager(team_id, actor.user_id, status)


@router.post("/leave-requests/{request_id}/approve", response_model=LeaveRequest)
async def approve_leave(
    request_id: UUID, actor: ActorDep, workflow: LeaveWorkflowDep
) -> LeaveRequest:
    """Approve a pending leave request; the member leaves the team."""
    return await workflow.approve(request_id, actor.user_id)


@router.post("/leave-requests/{request_id}/reject", response_model=LeaveRequest)
async def reject_leave(
    request_id: UUID, actor: ActorDep, workflow: LeaveWorkflowDep
) -> LeaveRequest:
    """Reject a pending leave request."""
    return await workflow.reject(request_id, actor.user_id)
