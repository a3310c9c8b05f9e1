"""Deadline helpers: overdue, urgent and due-today checks."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from taskflow.core.domain_types import ReviewStatus, Task, TaskPriority, TaskStatus

# Minutes before the deadline at which a task becomes urgent, by priority
DEFAULT_URGENCY_MINUTES: dict[TaskPriority, int] = {
    TaskPriority.HIGH: 60,
    TaskPriority.MEDIUM: 30,
}
PRIORITY_RANK = {TaskPriority.HIGH: 1, TaskPriority.MEDIUM: 2, TaskPriority.LOW: 3}
NEAREST_FALLBACK_LIMIT = 3


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def is_closed(task: Task) -> bool:
    """Completed, or waiting on the manager's review."""
    return task.status is TaskStatus.COMPLETED or task.review_status is ReviewStatus.SUBMITTED


def minutes_left(task: Task, now: datetime) -> float | None:
    """Minutes until the deadline, negative once passed. None without deadline."""
    if task.deadline is None:
        return None
    return (_aware(task.deadline) - _aware(now)).total_seconds() / 60


def is_overdue(task: Task, now: datetime) -> bool:
    """Deadline passed and the task is still open."""
    left = minutes_left(task, now)
    return left is not None and left < 0 and not is_closed(task)


def is_due_today(task: Task, now: datetime) -> bool:
    """Open task whose deadline falls on today's date (UTC)."""
    if task.deadline is None or is_closed(task):
        return False
    return _aware(task.deadline).date() == _aware(now).date()


def is_urgent(task: Task, now: datetime) -> bool:
    """Open task within its urgency window.

    A task's own ``urgent_before_minutes`` wins; otherwise high priority
    tasks are urgent an hour out and medium ones half an hour out.
    """
    if is_closed(task):
        return False
    left = minutes_left(task, now)
    if left is None:
        return False
    if task.urgent_before_minutes is not None:
        return left <= task.urgent_before_minutes
    threshold = DEFAULT_URGENCY_MINUTES.get(task.priority)
    return threshold is not None and left <= threshold


def nearest(tasks: Iterable[Task], limit: int = NEAREST_FALLBACK_LIMIT) -> list[Task]:
    """Open tasks with a deadline, soonest first, ties broken by priority."""
    candidates = [t for t in tasks if t.deadline is not None and not is_closed(t)]
    candidates.sort(key=lambda t: (_aware(t.deadline), PRIORITY_RANK[t.priority]))  # type: ignore[arg-type]
    return candidates[:limit]
