"""Protocol definitions for all external dependencies.

The core only depends on these protocols, never on concrete
implementations. Repositories return fresh copies of frozen entities;
workflow code must not assume two calls share state.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from .auth.types import TokenPayload
    from .domain_types import (
        Comment,
        LeaveRequest,
        LeaveStatus,
        Notification,
        Task,
        Team,
        TimeLogEntry,
        TransitionEvent,
        User,
    )


@runtime_checkable
class UserRepository(Protocol):
    """Persistence for user accounts and their single refresh token."""

    async def create(self, user: User) -> User:
        """Persist a new user."""
        ...

    async def find_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        ...

    async def find_by_username(self, username: str) -> User | None:
        """Get user by username."""
        ...

    async def find_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        ...

    async def update(self, user_id: UUID, changes: dict[str, Any]) -> User | None:
        """Apply field changes. Returns None if the user does not exist.

        Raises:
            ConflictError: If the new email belongs to another user.
        """
        ...

    async def save_refresh_token(self, user_id: UUID, token: str) -> None:
        """Store the user's refresh token, replacing any previous one."""
        ...

    async def find_by_refresh_token(self, token: str) -> User | None:
        """Get the user currently holding this exact refresh token."""
        ...

    async def revoke_refresh_token(self, user_id: UUID) -> None:
        """Clear the user's refresh token. No-op if none is stored."""
        ...


@runtime_checkable
class TaskRepository(Protocol):
    """Persistence for tasks."""

    async def create(self, task: Task) -> Task:
        """Persist a new task."""
        ...

    async def find_by_id(self, task_id: UUID) -> Task | None:
        """Get task by ID."""
        ...

    async def find_all_by_user_id(self, user_id: UUID) -> list[Task]:
        """Get all tasks owned by a user."""
        ...

    async def find_all_by_team_id(self, team_id: UUID) -> list[Task]:
        """Get all tasks linked to a team."""
        ...

    async def find_assigned_to(self, user_id: UUID) -> list[Task]:
        """Get tasks a manager assigned to this user."""
        ...

    async def update(self, task: Task) -> Task:
        """Replace the stored task with this version."""
        ...

    async def delete(self, task_id: UUID) -> bool:
        """Delete a task. Returns False if it did not exist."""
        ...


@runtime_checkable
class TimeLogRepository(Protocol):
    """Append-only store of time entries.

    There is intentionally no update or delete.
    """

    async def append(self, entry: TimeLogEntry) -> TimeLogEntry:
        """Append a time entry."""
        ...

    async def find_by_task_id(self, task_id: UUID) -> list[TimeLogEntry]:
        """Get entries for a task, newest first."""
        ...


@runtime_checkable
class TeamRepository(Protocol):
    """Persistence for teams and membership."""

    async def create(self, team: Team) -> Team:
        """Persist a new team."""
        ...

    async def find_by_id(self, team_id: UUID) -> Team | None:
        """Get team by ID."""
        ...

    async def list_by_manager(self, manager_id: UUID) -> list[Team]:
        """Teams managed by a user."""
        ...

    async def list_by_member(self, user_id: UUID) -> list[Team]:
        """Teams a user is a member of."""
        ...

    async def add_member(self, team_id: UUID, user_id: UUID) -> Team | None:
        """Add a member. Returns None if the team does not exist."""
        ...

    async def remove_member(self, team_id: UUID, user_id: UUID) -> Team | None:
        """Remove a member. Returns None if the team does not exist."""
        ...

    async def update(self, team_id: UUID, changes: dict[str, Any]) -> Team | None:
        """Apply profile changes. Returns None if the team does not exist."""
        ...


@runtime_checkable
class LeaveRequestRepository(Protocol):
    """Persistence for leave requests."""

    async def create(self, request: LeaveRequest) -> LeaveRequest:
        """Persist a new leave request."""
        ...

    async def find_by_id(self, request_id: UUID) -> LeaveRequest | None:
        """Get leave request by ID."""
        ...

    async def find_pending(self, team_id: UUID, user_id: UUID) -> LeaveRequest | None:
        """Get a member's open request for a team, if any."""
        ...

    async def list_by_team(
        self, team_id: UUID, status: LeaveStatus | None = None
    ) -> list[LeaveRequest]:
        """List a team's requests, newest first. None means all statuses."""
        ...

    async def update(
        self,
        request: LeaveRequest,
        expected_status: LeaveStatus | None = None,
    ) -> LeaveRequest | None:
        """Store a new version of the request.

        When expected_status is given the write is conditional: it only
        happens if the stored status still equals it, otherwise None is
        returned and nothing changes.
        """
        ...


@runtime_checkable
class NotificationRepository(Protocol):
    """Persistence for notifications."""

    async def create(self, notification: Notification) -> Notification:
        """Persist a notification."""
        ...

    async def find_by_id(self, notification_id: UUID) -> Notification | None:
        """Get notification by ID."""
        ...

    async def find_by_recipient(self, user_id: UUID) -> list[Notification]:
        """Get a user's notifications, newest first."""
        ...

    async def count_unread(self, user_id: UUID) -> int:
        """Count a user's unread notifications."""
        ...

    async def mark_as_read(self, notification_id: UUID) -> Notification | None:
        """Mark one notification read."""
        ...

    async def mark_all_as_read(self, user_id: UUID) -> int:
        """Mark all of a user's notifications read. Returns how many changed."""
        ...


@runtime_checkable
class CommentRepository(Protocol):
    """Persistence for task comments."""

    async def create(self, comment: Comment) -> Comment:
        """Persist a comment."""
        ...

    async def find_by_id(self, comment_id: UUID) -> Comment | None:
        """Get comment by ID."""
        ...

    async def find_by_task_id(self, task_id: UUID) -> list[Comment]:
        """Get a task's comments, oldest first."""
        ...

    async def update(self, comment: Comment) -> Comment:
        """Replace the stored comment with this version."""
        ...

    async def delete(self, comment_id: UUID) -> bool:
        """Delete a comment."""
        ...


@runtime_checkable
class CredentialService(Protocol):
    """Password hashing and token signing.

    Access and refresh tokens are signed with distinct secrets and
    carry distinct expiries.
    """

    def hash(self, plaintext: str) -> str:
        """Hash a password."""
        ...

    def compare(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash."""
        ...

    def sign_access_token(self, user: User) -> str:
        """Issue a short-lived access token."""
        ...

    def sign_refresh_token(self, user: User) -> str:
        """Issue a long-lived refresh token."""
        ...

    def verify_access_token(self, token: str) -> TokenPayload:
        """Decode an access token. Raises TokenError when invalid."""
        ...

    def verify_refresh_token(self, token: str) -> TokenPayload:
        """Decode a refresh token. Raises TokenError when invalid."""
        ...


@runtime_checkable
class EventDispatcher(Protocol):
    """Turns transition events into notifications.

    Must never raise: notification delivery is best-effort and not part
    of the triggering operation's contract.
    """

    async def dispatch(self, event: TransitionEvent) -> Notification | None:
        """Deliver one event."""
        ...

    async def dispatch_all(self, events: Iterable[TransitionEvent]) -> list[Notification]:
        """Deliver events in order, returning the notifications created."""
        ...
