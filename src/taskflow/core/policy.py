"""Authorization policy.

Every role rule in the system lives here as a pure predicate over an
actor id and the entities involved. Workflows call these before they
mutate anything and turn a deny into ForbiddenError via ``require``.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from taskflow.core.domain_types import Comment, Task, Team
from taskflow.core.exceptions import ForbiddenError


class Owned(Protocol):
    """Anything with an owning user."""

    @property
    def user_id(self) -> UUID: ...


def is_owner(actor_id: UUID, resource: Owned) -> bool:
    """Actor owns the resource."""
    return resource.user_id == actor_id


def is_team_manager(actor_id: UUID, team: Team | None) -> bool:
    """Actor manages the team."""
    return team is not None and team.manager_id == actor_id


def is_team_member(actor_id: UUID, team: Team | None) -> bool:
    """Actor is a member of the team. Managers are not members by default."""
    return team is not None and actor_id in team.member_ids


def is_assignee(actor_id: UUID, task: Task) -> bool:
    """Actor is the task's assignee."""
    return task.assignee_id is not None and task.assignee_id == actor_id


def _managing_team(task: Task, team: Team | None) -> Team | None:
    # Only the team the task is actually linked to grants manager rights
    if team is None or task.team_id != team.id:
        return None
    return team


def can_modify_task(actor_id: UUID, task: Task, team: Team | None = None) -> bool:
    """Owner, assignee or the managing team's manager may change status,
    priority and time tracking."""
    return (
        is_owner(actor_id, task)
        or is_assignee(actor_id, task)
        or is_team_manager(actor_id, _managing_team(task, team))
    )


def can_view_task(actor_id: UUID, task: Task, team: Team | None = None) -> bool:
    """Anyone who may modify a task may read it."""
    return can_modify_task(actor_id, task, team)


def can_delete_task(actor_id: UUID, task: Task) -> bool:
    """Only the owner may delete."""
    return is_owner(actor_id, task)


def can_assign(actor_id: UUID, team: Team) -> bool:
    """Only the team manager hands out team work."""
    return is_team_manager(actor_id, team)


def can_assign_task(actor_id: UUID, task: Task, team: Team) -> bool:
    """The team manager may hand out the team's own tasks, or personal
    tasks they own themselves. Tasks linked to another team are off limits."""
    if not can_assign(actor_id, team):
        return False
    if task.team_id is None:
        return is_owner(actor_id, task)
    return task.team_id == team.id


def can_submit(actor_id: UUID, task: Task) -> bool:
    """Only the assignee submits work for review."""
    return is_assignee(actor_id, task)


def can_review(actor_id: UUID, task: Task, team: Team | None) -> bool:
    """Only the manager of the task's team reviews submissions."""
    return is_team_manager(actor_id, _managing_team(task, team))


def can_view_team(actor_id: UUID, team: Team) -> bool:
    """Manager or member."""
    return is_team_manager(actor_id, team) or is_team_member(actor_id, team)


def can_manage_team(actor_id: UUID, team: Team) -> bool:
    """Membership, profile, dashboards and leave decisions are manager-only."""
    return is_team_manager(actor_id, team)


def can_access_comments(actor_id: UUID, task: Task, team: Team | None = None) -> bool:
    """Personal tasks: owner only. Team tasks: manager or any member."""
    if task.team_id is None:
        return is_owner(actor_id, task)
    linked = _managing_team(task, team)
    return can_view_team(actor_id, linked) if linked is not None else False


def can_modify_comment(actor_id: UUID, comment: Comment) -> bool:
    """Only the author edits or deletes a comment, whoever owns the task."""
    return is_owner(actor_id, comment)


def require(allowed: bool, message: str) -> None:
    """Raise ForbiddenError unless allowed.

    Raises:
        ForbiddenError: When the predicate denied access.
    """
    if not allowed:
        raise ForbiddenError(message)
