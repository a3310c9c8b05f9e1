"""Leave request workflow.

A member asks to leave a team; the team's manager approves or rejects.
``pending`` is the only non-terminal state. The pure transition refuses
to resolve a request twice, and the repository write is conditional on
the request still being pending, so two racing decisions cannot both
succeed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

import structlog

from taskflow.core import policy
from taskflow.core.domain_types import (
    LeaveRequest,
    LeaveStatus,
    NotificationKind,
    Team,
    Transition,
    TransitionEvent,
)
from taskflow.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
    infrastructure_boundary,
)
from taskflow.core.interfaces import EventDispatcher, LeaveRequestRepository, TeamRepository

logger = structlog.get_logger()

ALREADY_PROCESSED = "Request already processed"
STATUS_FILTERS = ("pending", "approved", "rejected", "all")


def request(team: Team, user_id: UUID) -> Transition[LeaveRequest]:
    """Open a leave request for a current member.

    Raises:
        ValidationError: If the user is not a member of the team.
    """
    if not policy.is_team_member(user_id, team):
        raise ValidationError("User is not a team member")
    leave_request = LeaveRequest(team_id=team.id, user_id=user_id)
    event = TransitionEvent(
        kind=NotificationKind.LEAVE_REQUESTED,
        recipient_id=team.manager_id,
        sender_id=user_id,
        message=f"A member asked to leave {team.name}",
        refs={"request_id": str(leave_request.id), "team_id": str(team.id)},
    )
    return Transition(entity=leave_request, events=(event,))


def resolve(
    leave_request: LeaveRequest,
    team: Team,
    actor_id: UUID,
    decision: LeaveStatus,
    now: datetime | None = None,
) -> Transition[LeaveRequest]:
    """Approve or reject a pending request.

    Raises:
        ForbiddenError: Unless the actor manages the request's team.
        ConflictError: If the request is no longer pending.
    """
    if decision is LeaveStatus.PENDING:
        raise ValueError("A request can only be resolved to approved or rejected")
    policy.require(
        team.id == leave_request.team_id and policy.can_manage_team(actor_id, team),
        f"Only the manager can {'approve' if decision is LeaveStatus.APPROVED else 'reject'} leave",
    )
    if leave_request.status is not LeaveStatus.PENDING:
        raise ConflictError(ALREADY_PROCESSED)

    resolved = leave_request.model_copy(
        update={
            "status": decision,
            "resolved_at": now or datetime.now(UTC),
            "resolved_by": actor_id,
        }
    )
    kind = (
        NotificationKind.LEAVE_APPROVED
        if decision is LeaveStatus.APPROVED
        else NotificationKind.LEAVE_REJECTED
    )
    event = TransitionEvent(
        kind=kind,
        recipient_id=leave_request.user_id,
        sender_id=actor_id,
        message=f"Your request to leave {team.name} was {decision.value}",
        refs={"request_id": str(leave_request.id), "team_id": str(team.id)},
    )
    return Transition(entity=resolved, events=(event,))


def parse_status_filter(status: str | None) -> LeaveStatus | None:
    """Map a listing filter to a status; None means all.

    Raises:
        ValidationError: On an unknown filter.
    """
    value = status or "pending"
    if value not in STATUS_FILTERS:
        raise ValidationError("Invalid status filter")
    return None if value == "all" else LeaveStatus(value)


class LeaveRequestWorkflow:
    """Runs leave request operations against the repositories."""

    def __init__(
        self,
        requests: LeaveRequestRepository,
        teams: TeamRepository,
        dispatcher: EventDispatcher,
    ) -> None:
        """Initialize the workflow.

        Args:
            requests: Leave request repository.
            teams: Team repository.
            dispatcher: Notification dispatcher.
        """
        self._requests = requests
        self._teams = teams
        self._dispatcher = dispatcher

    @infrastructure_boundary
    async def create(self, team_id: UUID, user_id: UUID) -> LeaveRequest:
        """Ask to leave a team.

        A member with a request already pending gets that request back
        rather than a duplicate.
        """
        team = await self._load_team(team_id)
        transition = request(team, user_id)

        existing = await self._requests.find_pending(team_id, user_id)
        if existing is not None:
            return existing

        created = await self._requests.create(transition.entity)
        await self._dispatcher.dispatch_all(transition.events)
        logger.info("leave_requested", request_id=str(created.id), team_id=str(team_id))
        return created

    @infrastructure_boundary
    async def approve(self, request_id: UUID, actor_id: UUID) -> LeaveRequest:
        """Approve a pending request and drop the requester from the team."""
        resolved = await self._resolve(request_id, actor_id, LeaveStatus.APPROVED)
        await self._teams.remove_member(resolved.team_id, resolved.user_id)
        return resolved

    @infrastructure_boundary
    async def reject(self, request_id: UUID, actor_id: UUID) -> LeaveRequest:
        """Reject a pending request."""
        return await self._resolve(request_id, actor_id, LeaveStatus.REJECTED)

    @infrastructure_boundary
    async def list_for_manager(
        self, team_id: UUID, actor_id: UUID, status: str | None = "pending"
    ) -> list[LeaveRequest]:
        """A team's requests filtered by status (default pending). Manager only."""
        status_filter = parse_status_filter(status)
        team = await self._load_team(team_id)
        policy.require(
            policy.can_manage_team(actor_id, team), "Only the manager can view leave requests"
        )
        return await self._requests.list_by_team(team_id, status_filter)

    async def _resolve(
        self, request_id: UUID, actor_id: UUID, decision: LeaveStatus
    ) -> LeaveRequest:
        leave_request = await self._requests.find_by_id(request_id)
        if leave_request is None:
            raise NotFoundError("Leave request not found")
        team = await self._load_team(leave_request.team_id)

        transition = resolve(leave_request, team, actor_id, decision)
        stored = await self._requests.update(
            transition.entity, expected_status=LeaveStatus.PENDING
        )
        if stored is None:
            # Another decision landed between our read and our write
            logger.warning("leave_request_race_lost", request_id=str(request_id))
            raise ConflictError(ALREADY_PROCESSED)

        await self._dispatcher.dispatch_all(transition.events)
        logger.info(
            "leave_request_resolved",
            request_id=str(request_id),
            status=decision.value,
            manager_id=str(actor_id),
        )
        return stored

    async def _load_team(self, team_id: UUID) -> Team:
        team = await self._teams.find_by_id(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team
