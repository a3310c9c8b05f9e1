"""Task workflows: load, authorize, transition, persist, notify."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog

from taskflow.core import policy
from taskflow.core.domain_types import Task, TaskStatus, Team, TimeLogEntry, Transition
from taskflow.core.exceptions import NotFoundError, infrastructure_boundary
from taskflow.core.interfaces import (
    EventDispatcher,
    TaskRepository,
    TeamRepository,
    TimeLogRepository,
)
from taskflow.core.tasks import schedule, state_machine

logger = structlog.get_logger()


class TaskService:
    """Runs every task operation for an authenticated actor.

    Each call reloads what it needs from the repositories; nothing is
    cached between calls. Concurrent writes to the same task resolve as
    last-write-wins in the repository.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        teams: TeamRepository,
        time_logs: TimeLogRepository,
        dispatcher: EventDispatcher,
    ) -> None:
        """Initialize the task service.

        Args:
            tasks: Task repository.
            teams: Team repository, for manager/member checks.
            time_logs: Append-only time log store.
            dispatcher: Notification dispatcher for transition events.
        """
        self._tasks = tasks
        self._teams = teams
        self._time_logs = time_logs
        self._dispatcher = dispatcher

    # Single-task operations

    @infrastructure_boundary
    async def create_task(self, fields: dict[str, Any], actor_id: UUID) -> Task:
        """Create a personal task owned by the actor."""
        transition = state_machine.create(fields, actor_id)
        task = await self._tasks.create(transition.entity)
        logger.info("task_created", task_id=str(task.id), user_id=str(actor_id))
        return task

    @infrastructure_boundary
    async def get_task(self, task_id: UUID, actor_id: UUID) -> Task:
        """Fetch a task the actor may see.

        Raises:
            NotFoundError: If the task does not exist.
            ForbiddenError: If the actor has no access.
        """
        task = await self._load_task(task_id)
        team = await self._team_of(task)
        policy.require(policy.can_view_task(actor_id, task, team), "Not allowed to access this task")
        return task

    @infrastructure_boundary
    async def update_task(self, task_id: UUID, fields: dict[str, Any], actor_id: UUID) -> Task:
        """Edit title, description, deadline or urgency threshold."""
        task = await self._load_task(task_id)
        team = await self._team_of(task)
        return await self._apply(state_machine.edit(task, fields, actor_id, team))

    @infrastructure_boundary
    async def update_status(self, task_id: UUID, new_status: Any, actor_id: UUID) -> Task:
        """Move a task through pending / in-progress / completed."""
        task = await self._load_task(task_id)
        team = await self._team_of(task)
        updated = await self._apply(state_machine.update_status(task, new_status, actor_id, team))
        logger.info(
            "task_status_changed",
            task_id=str(task_id),
            from_status=task.status.value,
            to_status=updated.status.value,
        )
        return updated

    @infrastructure_boundary
    async def update_priority(self, task_id: UUID, new_priority: Any, actor_id: UUID) -> Task:
        """Change a task's priority."""
        task = await self._load_task(task_id)
        team = await self._team_of(task)
        return await self._apply(
            state_machine.update_priority(task, new_priority, actor_id, team)
        )

    @infrastructure_boundary
    async def track_time(
        self, task_id: UUID, minutes: Any, actor_id: UUID, note: str = ""
    ) -> Task:
        """Add minutes to a task and append a time-log entry.

        Raises:
            ValidationError: Unless minutes is positive; nothing is written.
        """
        # Reject bad input before touching the repository
        state_machine.validate_minutes(minutes)
        task = await self._load_task(task_id)
        team = await self._team_of(task)
        transition, entry = state_machine.track_time(task, minutes, actor_id, team, note=note)
        updated = await self._apply(transition)
        await self._time_logs.append(entry)
        logger.info(
            "time_tracked",
            task_id=str(task_id),
            minutes=entry.minutes,
            time_spent=updated.time_spent,
        )
        return updated

    @infrastructure_boundary
    async def list_time_logs(self, task_id: UUID, actor_id: UUID) -> list[TimeLogEntry]:
        """Time entries for a task the actor may see, newest first."""
        await self.get_task(task_id, actor_id)
        return await self._time_logs.find_by_task_id(task_id)

    @infrastructure_boundary
    async def delete_task(self, task_id: UUID, actor_id: UUID) -> None:
        """Delete a task. Owner only."""
        task = await self._load_task(task_id)
        state_machine.ensure_can_delete(task, actor_id)
        await self._tasks.delete(task_id)
        logger.info("task_deleted", task_id=str(task_id), user_id=str(actor_id))

    # Assignment and review

    @infrastructure_boundary
    async def assign(
        self, task_id: UUID, team_id: UUID, target_user_id: UUID, actor_id: UUID
    ) -> Task:
        """Hand an existing task to a team member and notify them."""
        task = await self._load_task(task_id)
        team = await self._load_team(team_id)
        return await self._apply(state_machine.assign(task, team, target_user_id, actor_id))

    @infrastructure_boundary
    async def assign_new(
        self,
        fields: dict[str, Any],
        team_id: UUID,
        target_user_id: UUID,
        actor_id: UUID,
    ) -> Task:
        """Create a task directly on a team member's plate.

        Authorization is checked before anything is stored.
        """
        team = await self._load_team(team_id)
        draft = state_machine.create(fields, actor_id).entity
        transition = state_machine.assign(draft, team, target_user_id, actor_id)
        task = await self._tasks.create(transition.entity)
        await self._dispatcher.dispatch_all(transition.events)
        logger.info(
            "task_assigned",
            task_id=str(task.id),
            team_id=str(team_id),
            assignee_id=str(target_user_id),
        )
        return task

    @infrastructure_boundary
    async def submit(
        self, task_id: UUID, actor_id: UUID, link: str = "", note: str = ""
    ) -> Task:
        """Assignee submits work for review."""
        task = await self._load_task(task_id)
        return await self._apply(state_machine.submit(task, actor_id, link, note))

    @infrastructure_boundary
    async def review(
        self, task_id: UUID, actor_id: UUID, action: Any, note: str = ""
    ) -> Task:
        """Manager approves or rejects a submission."""
        task = await self._load_task(task_id)
        team = await self._team_of(task)
        updated = await self._apply(state_machine.review(task, team, actor_id, action, note))
        logger.info(
            "task_reviewed",
            task_id=str(task_id),
            review_status=updated.review_status.value if updated.review_status else None,
        )
        return updated

    # Listings

    @infrastructure_boundary
    async def list_tasks(self, actor_id: UUID, search: str | None = None) -> list[Task]:
        """Tasks owned by the actor, optionally filtered by a search term."""
        tasks = await self._tasks.find_all_by_user_id(actor_id)
        if search:
            needle = search.strip().lower()
            tasks = [
                t for t in tasks if needle in t.title.lower() or needle in t.description.lower()
            ]
        return tasks

    @infrastructure_boundary
    async def list_assigned(self, actor_id: UUID) -> list[Task]:
        """Tasks managers assigned to the actor."""
        return await self._tasks.find_assigned_to(actor_id)

    @infrastructure_boundary
    async def list_overdue(self, actor_id: UUID, now: datetime | None = None) -> list[Task]:
        """Open tasks past their deadline."""
        now = now or datetime.now(UTC)
        tasks = await self._tasks.find_all_by_user_id(actor_id)
        return [t for t in tasks if schedule.is_overdue(t, now)]

    @infrastructure_boundary
    async def list_urgent(self, actor_id: UUID, now: datetime | None = None) -> list[Task]:
        """Open tasks inside their urgency window.

        When nothing is urgent, the nearest few deadlines are returned
        instead so the caller always has something to work on.
        """
        now = now or datetime.now(UTC)
        tasks = await self._tasks.find_all_by_user_id(actor_id)
        urgent = [t for t in tasks if schedule.is_urgent(t, now)]
        return urgent or schedule.nearest(tasks)

    @infrastructure_boundary
    async def list_team_tasks(self, team_id: UUID, actor_id: UUID) -> list[Task]:
        """All tasks of a team. Manager only."""
        team = await self._load_team(team_id)
        policy.require(
            policy.can_manage_team(actor_id, team),
            "Only the team manager can view all team tasks",
        )
        return await self._tasks.find_all_by_team_id(team_id)

    @infrastructure_boundary
    async def list_my_team_tasks(self, team_id: UUID, actor_id: UUID) -> list[Task]:
        """The actor's own tasks within a team."""
        return await self.list_member_tasks(team_id, actor_id, actor_id, require_member=False)

    @infrastructure_boundary
    async def list_member_tasks(
        self,
        team_id: UUID,
        target_user_id: UUID,
        actor_id: UUID,
        require_member: bool = True,
    ) -> list[Task]:
        """A member's tasks within a team, visible to the manager and members.

        Raises:
            ForbiddenError: If the actor is neither manager nor member.
            NotFoundError: If the target is not a member.
        """
        team = await self._load_team(team_id)
        policy.require(
            policy.can_view_team(actor_id, team), "You are not a member of this team"
        )
        if require_member and not policy.is_team_member(target_user_id, team):
            raise NotFoundError("Target user is not a member of this team")
        tasks = await self._tasks.find_all_by_team_id(team_id)
        return [t for t in tasks if t.user_id == target_user_id]

    # Dashboards

    @infrastructure_boundary
    async def user_dashboard(
        self, actor_id: UUID, now: datetime | None = None
    ) -> dict[str, int]:
        """Task counts for the actor's own tasks."""
        now = now or datetime.now(UTC)
        tasks = await self._tasks.find_all_by_user_id(actor_id)
        return {
            **_status_counts(tasks, now),
            "due_today_tasks": sum(schedule.is_due_today(t, now) for t in tasks),
        }

    @infrastructure_boundary
    async def team_dashboard(
        self, team_id: UUID, actor_id: UUID, now: datetime | None = None
    ) -> dict[str, int]:
        """Task counts across a team. Manager only."""
        now = now or datetime.now(UTC)
        team = await self._load_team(team_id)
        policy.require(policy.can_manage_team(actor_id, team), "Access denied")
        tasks = await self._tasks.find_all_by_team_id(team_id)
        return _status_counts(tasks, now)

    # Helpers

    async def _apply(self, transition: Transition[Task]) -> Task:
        stored = await self._tasks.update(transition.entity)
        await self._dispatcher.dispatch_all(transition.events)
        return stored

    async def _load_task(self, task_id: UUID) -> Task:
        task = await self._tasks.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def _load_team(self, team_id: UUID) -> Team:
        team = await self._teams.find_by_id(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def _team_of(self, task: Task) -> Team | None:
        if task.team_id is None:
            return None
        return await self._teams.find_by_id(task.team_id)


def _status_counts(tasks: list[Task], now: datetime) -> dict[str, int]:
    return {
        "total_tasks": len(tasks),
        "completed_tasks": sum(t.status is TaskStatus.COMPLETED for t in tasks),
        "in_progress_tasks": sum(t.status is TaskStatus.IN_PROGRESS for t in tasks),
        "pending_tasks": sum(t.status is TaskStatus.PENDING for t in tasks),
        "overdue_tasks": sum(schedule.is_overdue(t, now) for t in tasks),
    }
