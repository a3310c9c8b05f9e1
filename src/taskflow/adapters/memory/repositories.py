"""In-memory repositories.

These adapters are useful for:
- Unit and integration testing without a database
- Running the API locally with no infrastructure

Entities are frozen, so handing stored instances back to callers never
exposes shared mutable state. None of the methods await between reading
and writing, which makes every single call atomic on one event loop;
that is what gives LeaveRequest updates their compare-and-set semantics.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from taskflow.core.domain_types import (
    Comment,
    LeaveRequest,
    LeaveStatus,
    Notification,
    Task,
    Team,
    TimeLogEntry,
    User,
)
from taskflow.core.exceptions import ConflictError


class InMemoryUserRepository:
    """User storage with unique username and email."""

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._users: dict[UUID, User] = {}

    async def create(self, user: User) -> User:
        """Persist a new user, enforcing unique username and email."""
        for existing in self._users.values():
            if existing.username == user.username:
                raise ConflictError("Username already exists")
            if existing.email.lower() == user.email.lower():
                raise ConflictError("Email already exists")
        self._users[user.id] = user
        return user

    async def find_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        return self._users.get(user_id)

    async def find_by_username(self, username: str) -> User | None:
        """Get user by username."""
        return next((u for u in self._users.values() if u.username == username), None)

    async def find_by_email(self, email: str) -> User | None:
        """Get user by email address, case-insensitively."""
        email = email.lower()
        return next((u for u in self._users.values() if u.email.lower() == email), None)

    async def update(self, user_id: UUID, changes: dict[str, Any]) -> User | None:
        """Apply field changes, never touching id or created_at.

        Raises:
            ConflictError: If the new email belongs to another user.
        """
        user = self._users.get(user_id)
        if user is None:
            return None
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        updated = User.model_validate({**user.model_dump(), **changes})
        for existing in self._users.values():
            if existing.id != user_id and existing.email.lower() == updated.email.lower():
                raise ConflictError("Email already exists")
        self._users[user_id] = updated
        return updated

    async def save_refresh_token(self, user_id: UUID, token: str) -> None:
        """Replace the user's refresh token."""
        user = self._users.get(user_id)
        if user is not None:
            self._users[user_id] = user.model_copy(update={"refresh_token": token})

    async def find_by_refresh_token(self, token: str) -> User | None:
        """Get the user currently holding this refresh token."""
        if not token:
            return None
        return next((u for u in self._users.values() if u.refresh_token == token), None)

    async def revoke_refresh_token(self, user_id: UUID) -> None:
        """Clear the user's refresh token."""
        user = self._users.get(user_id)
        if user is not None and user.refresh_token is not None:
            self._users[user_id] = user.model_copy(update={"refresh_token": None})


class InMemoryTaskRepository:
    """Task storage."""

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._tasks: dict[UUID, Task] = {}

    async def create(self, task: Task) -> Task:
        """Persist a new task."""
        self._tasks[task.id] = task
        return task

    async def find_by_id(self, task_id: UUID) -> Task | None:
        """Get task by ID."""
        return self._tasks.get(task_id)

    async def find_all_by_user_id(self, user_id: UUID) -> list[Task]:
        """Tasks owned by a user, newest first."""
        return _newest_first(t for t in self._tasks.values() if t.user_id == user_id)

    async def find_all_by_team_id(self, team_id: UUID) -> list[Task]:
        """Tasks linked to a team, newest first."""
        return _newest_first(t for t in self._tasks.values() if t.team_id == team_id)

    async def find_assigned_to(self, user_id: UUID) -> list[Task]:
        """Tasks assigned to a user by a manager, newest first."""
        return _newest_first(
            t
            for t in self._tasks.values()
            if t.assignee_id == user_id and t.assigned_by is not None
        )

    async def update(self, task: Task) -> Task:
        """Replace the stored task."""
        self._tasks[task.id] = task
        return task

    async def delete(self, task_id: UUID) -> bool:
        """Delete a task."""
        return self._tasks.pop(task_id, None) is not None


class InMemoryTimeLogRepository:
    """Append-only time log."""

    def __init__(self) -> None:
        """Initialize an empty log."""
        self._entries: list[TimeLogEntry] = []

    async def append(self, entry: TimeLogEntry) -> TimeLogEntry:
        """Append an entry."""
        self._entries.append(entry)
        return entry

    async def find_by_task_id(self, task_id: UUID) -> list[TimeLogEntry]:
        """Entries for a task, newest first."""
        return [e for e in reversed(self._entries) if e.task_id == task_id]


class InMemoryTeamRepository:
    """Team storage with unique membership."""

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._teams: dict[UUID, Team] = {}

    async def create(self, team: Team) -> Team:
        """Persist a new team."""
        self._teams[team.id] = team
        return team

    async def find_by_id(self, team_id: UUID) -> Team | None:
        """Get team by ID."""
        return self._teams.get(team_id)

    async def list_by_manager(self, manager_id: UUID) -> list[Team]:
        """Teams managed by a user."""
        return [t for t in self._teams.values() if t.manager_id == manager_id]

    async def list_by_member(self, user_id: UUID) -> list[Team]:
        """Teams a user belongs to."""
        return [t for t in self._teams.values() if user_id in t.member_ids]

    async def add_member(self, team_id: UUID, user_id: UUID) -> Team | None:
        """Add a member; adding an existing member is a no-op."""
        team = self._teams.get(team_id)
        if team is None:
            return None
        if user_id not in team.member_ids:
            team = team.model_copy(update={"member_ids": (*team.member_ids, user_id)})
            self._teams[team_id] = team
        return team

    async def remove_member(self, team_id: UUID, user_id: UUID) -> Team | None:
        """Remove a member; removing a non-member is a no-op."""
        team = self._teams.get(team_id)
        if team is None:
            return None
        if user_id in team.member_ids:
            team = team.model_copy(
                update={"member_ids": tuple(m for m in team.member_ids if m != user_id)}
            )
            self._teams[team_id] = team
        return team

    async def update(self, team_id: UUID, changes: dict[str, Any]) -> Team | None:
        """Apply profile changes."""
        team = self._teams.get(team_id)
        if team is None:
            return None
        changes = {
            k: v for k, v in changes.items() if k not in ("id", "manager_id", "member_ids")
        }
        updated = Team.model_validate({**team.model_dump(), **changes})
        self._teams[team_id] = updated
        return updated


class InMemoryLeaveRequestRepository:
    """Leave request storage with conditional updates."""

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._requests: dict[UUID, LeaveRequest] = {}

    async def create(self, request: LeaveRequest) -> LeaveRequest:
        """Persist a new request."""
        self._requests[request.id] = request
        return request

    async def find_by_id(self, request_id: UUID) -> LeaveRequest | None:
        """Get a request by ID."""
        return self._requests.get(request_id)

    async def find_pending(self, team_id: UUID, user_id: UUID) -> LeaveRequest | None:
        """A member's open request for a team."""
        return next(
            (
                r
                for r in self._requests.values()
                if r.team_id == team_id
                and r.user_id == user_id
                and r.status is LeaveStatus.PENDING
            ),
            None,
        )

    async def list_by_team(
        self, team_id: UUID, status: LeaveStatus | None = None
    ) -> list[LeaveRequest]:
        """A team's requests, newest first."""
        return _newest_first(
            r
            for r in self._requests.values()
            if r.team_id == team_id and (status is None or r.status is status)
        )

    async def update(
        self,
        request: LeaveRequest,
        expected_status: LeaveStatus | None = None,
    ) -> LeaveRequest | None:
        """Store the request, optionally only if its status is unchanged."""
        current = self._requests.get(request.id)
        if current is None:
            return None
        if expected_status is not None and current.status is not expected_status:
            return None
        self._requests[request.id] = request
        return request


class InMemoryNotificationRepository:
    """Notification storage."""

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._notifications: dict[UUID, Notification] = {}

    async def create(self, notification: Notification) -> Notification:
        """Persist a notification."""
        self._notifications[notification.id] = notification
        return notification

    async def find_by_id(self, notification_id: UUID) -> Notification | None:
        """Get a notification by ID."""
        return self._notifications.get(notification_id)

    async def find_by_recipient(self, user_id: UUID) -> list[Notification]:
        """A user's notifications, newest first."""
        return _newest_first(n for n in self._notifications.values() if n.recipient_id == user_id)

    async def count_unread(self, user_id: UUID) -> int:
        """Count a user's unread notifications."""
        return sum(
            1
            for n in self._notifications.values()
            if n.recipient_id == user_id and not n.is_read
        )

    async def mark_as_read(self, notification_id: UUID) -> Notification | None:
        """Mark one notification read."""
        notification = self._notifications.get(notification_id)
        if notification is None:
            return None
        updated = notification.model_copy(update={"is_read": True})
        self._notifications[notification_id] = updated
        return updated

    async def mark_all_as_read(self, user_id: UUID) -> int:
        """Mark a user's notifications read."""
        changed = 0
        for notification_id, n in list(self._notifications.items()):
            if n.recipient_id == user_id and not n.is_read:
                self._notifications[notification_id] = n.model_copy(update={"is_read": True})
                changed += 1
        return changed


class InMemoryCommentRepository:
    """Comment storage."""

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._comments: dict[UUID, Comment] = {}

    async def create(self, comment: Comment) -> Comment:
        """Persist a comment."""
        self._comments[comment.id] = comment
        return comment

    async def find_by_id(self, comment_id: UUID) -> Comment | None:
        """Get a comment by ID."""
        return self._comments.get(comment_id)

    async def find_by_task_id(self, task_id: UUID) -> list[Comment]:
        """A task's comments, oldest first."""
        return [c for c in self._comments.values() if c.task_id == task_id]

    async def update(self, comment: Comment) -> Comment:
        """Replace the stored comment."""
        self._comments[comment.id] = comment
        return comment

    async def delete(self, comment_id: UUID) -> bool:
        """Delete a comment."""
        return self._comments.pop(comment_id, None) is not None


def _newest_first(items: Any) -> list[Any]:
    # Stable sort over insertion order keeps same-timestamp items newest first too
    ordered = list(items)
    ordered.reverse()
    ordered.sort(key=lambda item: _created(item), reverse=True)
    return ordered


def _created(item: Any) -> datetime:
    value: datetime = item.created_at
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
