"""Task state machine.

Status moves ``pending -> in-progress -> completed`` and may go back and
forth between pending and in-progress. Completed is terminal for status;
priority and time tracking stay open for later correction.

Assigned team tasks additionally run a review sub-workflow::

    assigned -> submitted -> approved   (status completed)
                          -> rejected   (status in-progress, resubmittable)

Every function here is pure: it takes frozen entities and returns a
Transition with the new entity and the events to notify about.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any
from uuid import UUID

from taskflow.core import policy
from taskflow.core.domain_types import (
    NotificationKind,
    ReviewAction,
    ReviewStatus,
    Task,
    TaskPriority,
    TaskStatus,
    Team,
    TimeLogEntry,
    Transition,
    TransitionEvent,
)
from taskflow.core.exceptions import NotFoundError, ValidationError

ALLOWED_STATUS_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
    TaskStatus.IN_PROGRESS: frozenset(
        {TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}
    ),
    TaskStatus.COMPLETED: frozenset({TaskStatus.COMPLETED}),
}

SUBMITTABLE = frozenset({ReviewStatus.ASSIGNED, ReviewStatus.REJECTED})

# Fields a caller may set when creating or editing a task
EDITABLE_FIELDS = frozenset({"title", "description", "deadline", "urgent_before_minutes"})


def parse_status(value: Any) -> TaskStatus:
    """Coerce input to a TaskStatus.

    Raises:
        ValidationError: If the value is missing or unknown.
    """
    if not value:
        raise ValidationError("Status is required")
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status value: {value}") from None


def parse_priority(value: Any) -> TaskPriority:
    """Coerce input to a TaskPriority.

    Raises:
        ValidationError: If the value is missing or unknown.
    """
    if not value:
        raise ValidationError("Priority is required")
    try:
        return TaskPriority(value)
    except ValueError:
        raise ValidationError(f"Invalid priority value: {value}") from None


def _validated_fields(fields: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
    if "title" in values:
        title = (values["title"] or "").strip() if isinstance(values["title"], str) else ""
        if not title:
            raise ValidationError("Title is required")
        values["title"] = title
    if values.get("description") is None:
        values.pop("description", None)
    return values


def create(fields: dict[str, Any], owner_id: UUID) -> Transition[Task]:
    """Build a new personal task.

    Priority defaults to medium, status to pending, time spent to zero.
    An explicit priority in ``fields`` is honoured after validation.

    Raises:
        ValidationError: If the title is missing or a value is malformed.
    """
    values = _validated_fields(fields)
    if "title" not in values:
        raise ValidationError("Title is required")
    if fields.get("priority"):
        values["priority"] = parse_priority(fields["priority"])

    try:
        task = Task(user_id=owner_id, **values)
    except ValueError as e:
        raise ValidationError(f"Invalid task data: {e}") from None
    return Transition(entity=task)


def edit(task: Task, fields: dict[str, Any], actor_id: UUID, team: Team | None) -> Transition[Task]:
    """Change descriptive fields (title, description, deadline, urgency).

    Raises:
        ForbiddenError: Unless owner, assignee or team manager.
        ValidationError: If the title would become empty.
    """
    policy.require(
        policy.can_modify_task(actor_id, task, team), "Not allowed to modify this task"
    )
    values = _validated_fields(fields)
    try:
        updated = Task.model_validate({**task.model_dump(), **values})
    except ValueError as e:
        raise ValidationError(f"Invalid task data: {e}") from None
    return Transition(entity=updated)


def update_status(
    task: Task, new_status: Any, actor_id: UUID, team: Team | None = None
) -> Transition[Task]:
    """Move a task to another status.

    Raises:
        ForbiddenError: Unless owner, assignee or team manager.
        ValidationError: On an unknown status or when leaving completed.
    """
    policy.require(
        policy.can_modify_task(actor_id, task, team), "Not allowed to change this task's status"
    )
    status = parse_status(new_status)
    if status not in ALLOWED_STATUS_TRANSITIONS[task.status]:
        raise ValidationError(f"Cannot move a {task.status.value} task to {status.value}")
    return Transition(entity=task.model_copy(update={"status": status}))


def update_priority(
    task: Task, new_priority: Any, actor_id: UUID, team: Team | None = None
) -> Transition[Task]:
    """Change priority. Allowed in every status.

    Raises:
        ForbiddenError: Unless owner, assignee or team manager.
        ValidationError: On an unknown priority.
    """
    policy.require(
        policy.can_modify_task(actor_id, task, team), "Not allowed to change this task's priority"
    )
    priority = parse_priority(new_priority)
    return Transition(entity=task.model_copy(update={"priority": priority}))


def validate_minutes(minutes: Any) -> float:
    """Return minutes as a float if it is a positive finite number.

    Raises:
        ValidationError: Otherwise.
    """
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise ValidationError("Minutes must be a number")
    if not math.isfinite(minutes):
        raise ValidationError("Minutes must be a finite number")
    if minutes <= 0:
        raise ValidationError("Minutes must be positive")
    return float(minutes)


def track_time(
    task: Task,
    minutes: Any,
    actor_id: UUID,
    team: Team | None = None,
    note: str = "",
    now: datetime | None = None,
) -> tuple[Transition[Task], TimeLogEntry]:
    """Add time to a task.

    Returns the updated task and the time-log entry to append. The
    accumulator only grows through this path.

    Raises:
        ForbiddenError: Unless owner, assignee or team manager.
        ValidationError: Unless minutes is a positive number.
    """
    policy.require(
        policy.can_modify_task(actor_id, task, team), "Not allowed to log time on this task"
    )
    amount = validate_minutes(minutes)

    entry_fields: dict[str, Any] = {"task_id": task.id, "user_id": actor_id, "minutes": amount}
    if note:
        entry_fields["note"] = note
    if now is not None:
        entry_fields["logged_at"] = now
    entry = TimeLogEntry(**entry_fields)

    updated = task.model_copy(update={"time_spent": task.time_spent + amount})
    return Transition(entity=updated), entry


def ensure_can_delete(task: Task, actor_id: UUID) -> None:
    """Raises ForbiddenError unless the actor owns the task."""
    policy.require(policy.can_delete_task(actor_id, task), "Only the owner can delete this task")


def assign(task: Task, team: Team, target_user_id: UUID, actor_id: UUID) -> Transition[Task]:
    """Hand a task to a team member.

    The member becomes owner and assignee, and the review sub-workflow
    restarts at ``assigned``.

    Raises:
        ForbiddenError: Unless the actor manages the team and the task is
            either the actor's own personal task or already that team's.
        NotFoundError: If the target is not a member of the team.
    """
    policy.require(policy.can_assign(actor_id, team), "Only the team manager can assign tasks")
    policy.require(
        policy.can_assign_task(actor_id, task, team), "Not allowed to assign this task"
    )
    if not policy.is_team_member(target_user_id, team):
        raise NotFoundError("Target user is not a member of this team")

    updated = task.model_copy(
        update={
            "user_id": target_user_id,
            "assignee_id": target_user_id,
            "team_id": team.id,
            "assigned_by": actor_id,
            "review_status": ReviewStatus.ASSIGNED,
            "submission_link": "",
            "submission_note": "",
            "manager_feedback": "",
        }
    )
    event = TransitionEvent(
        kind=NotificationKind.TASK_ASSIGNED,
        recipient_id=target_user_id,
        sender_id=actor_id,
        message=f"You have been assigned a new task: {task.title}",
        refs={"task_id": str(task.id), "team_id": str(team.id)},
    )
    return Transition(entity=updated, events=(event,))


def submit(task: Task, actor_id: UUID, link: str = "", note: str = "") -> Transition[Task]:
    """Assignee hands work in for review.

    Raises:
        ForbiddenError: Unless the actor is the assignee.
        ValidationError: If the task is not awaiting a submission.
    """
    policy.require(policy.can_submit(actor_id, task), "Only the assigned user can submit this task")
    if task.status is TaskStatus.COMPLETED:
        raise ValidationError("Task is already completed")
    if task.review_status not in SUBMITTABLE:
        raise ValidationError("Task is not awaiting submission")

    updated = task.model_copy(
        update={
            "review_status": ReviewStatus.SUBMITTED,
            "submission_link": link,
            "submission_note": note,
        }
    )
    events: tuple[TransitionEvent, ...] = ()
    if task.assigned_by is not None:
        events = (
            TransitionEvent(
                kind=NotificationKind.TASK_SUBMITTED,
                recipient_id=task.assigned_by,
                sender_id=actor_id,
                message=f"Task submitted for review: {task.title}",
                refs={"task_id": str(task.id), "team_id": str(task.team_id)},
            ),
        )
    return Transition(entity=updated, events=events)


def review(
    task: Task,
    team: Team | None,
    actor_id: UUID,
    action: Any,
    note: str = "",
) -> Transition[Task]:
    """Manager approves or rejects a submission.

    Approval completes the task; rejection sends it back to in-progress
    so the assignee can resubmit.

    Raises:
        ForbiddenError: Unless the actor manages the task's team.
        ValidationError: On an unknown action or if nothing was submitted.
    """
    policy.require(
        policy.can_review(actor_id, task, team),
        "Only the team manager can review this task",
    )
    try:
        decision = ReviewAction(action)
    except ValueError:
        raise ValidationError("Invalid review action. Use 'approve' or 'reject'") from None
    if task.review_status is not ReviewStatus.SUBMITTED:
        raise ValidationError("Task must be submitted before review")

    if decision is ReviewAction.APPROVE:
        update = {"review_status": ReviewStatus.APPROVED, "status": TaskStatus.COMPLETED}
        kind, verb = NotificationKind.TASK_APPROVED, "approved"
    else:
        update = {"review_status": ReviewStatus.REJECTED, "status": TaskStatus.IN_PROGRESS}
        kind, verb = NotificationKind.TASK_REJECTED, "rejected"

    updated = task.model_copy(update={**update, "manager_feedback": note})
    recipient = task.assignee_id or task.user_id
    event = TransitionEvent(
        kind=kind,
        recipient_id=recipient,
        sender_id=actor_id,
        message=f"Your submission was {verb}: {task.title}",
        refs={"task_id": str(task.id), "team_id": str(task.team_id)},
    )
    return Transition(entity=updated, events=(event,))
