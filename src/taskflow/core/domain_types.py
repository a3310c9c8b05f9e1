"""Domain types - Immutable Pydantic models defining core domain objects.

All entities are frozen. Workflow transitions never mutate an entity;
they build a new one with ``model_copy(update=...)`` and hand it back
together with the events the transition produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class TaskStatus(str, Enum):
    """Task lifecycle states."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReviewStatus(str, Enum):
    """States of the assigned-task submission/review sub-workflow."""

    ASSIGNED = "assigned"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, Enum):
    """Decisions a manager can take on a submitted task."""

    APPROVE = "approve"
    REJECT = "reject"


class LeaveStatus(str, Enum):
    """Leave request states. Everything but PENDING is terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationKind(str, Enum):
    """What happened, from the recipient's point of view."""

    TASK_ASSIGNED = "task_assigned"
    TASK_SUBMITTED = "task_submitted"
    TASK_APPROVED = "task_approved"
    TASK_REJECTED = "task_rejected"
    LEAVE_REQUESTED = "leave_requested"
    LEAVE_APPROVED = "leave_approved"
    LEAVE_REJECTED = "leave_rejected"
    COMMENT_ADDED = "comment_added"


class NewUser(BaseModel):
    """Registration input, validated before anything is hashed or stored.

    Attributes:
        name: Display name.
        username: Unique login name.
        email: Unique email address.
        password: Plain text password, at least MIN_PASSWORD_LENGTH chars
            and at most MAX_PASSWORD_BYTES once UTF-8 encoded (bcrypt's limit).
    """

    MIN_PASSWORD_LENGTH: ClassVar[int] = 6
    MAX_PASSWORD_BYTES: ClassVar[int] = 72

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = ""
    username: str = ""
    email: EmailStr | None = None
    password: str = ""

    def is_valid(self) -> bool:
        """Check required fields and password length bounds."""
        return bool(
            self.name
            and self.username
            and self.email
            and self.password
            and len(self.password) >= self.MIN_PASSWORD_LENGTH
            and len(self.password.encode("utf-8")) <= self.MAX_PASSWORD_BYTES
        )


class User(BaseModel):
    """Persisted user account."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    username: str
    email: EmailStr
    password_hash: str
    created_at: datetime = Field(default_factory=utc_now)
    refresh_token: str | None = None
    bio: str = ""
    experience: str = ""
    profile_picture: str | None = None

    def to_public(self) -> dict[str, Any]:
        """Serializable view without credentials."""
        return self.model_dump(mode="json", exclude={"password_hash", "refresh_token"})


class Task(BaseModel):
    """A unit of work owned by one user, optionally tied to a team."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    deadline: datetime | None = None
    time_spent: float = Field(default=0, ge=0)
    user_id: UUID
    assignee_id: UUID | None = None
    team_id: UUID | None = None
    assigned_by: UUID | None = None
    review_status: ReviewStatus | None = None
    submission_link: str = ""
    submission_note: str = ""
    manager_feedback: str = ""
    urgent_before_minutes: int | None = None
    created_at: datetime = Field(default_factory=utc_now)


class TimeLogEntry(BaseModel):
    """One append-only record of time spent on a task."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    task_id: UUID
    user_id: UUID
    minutes: float
    note: str = ""
    logged_at: datetime = Field(default_factory=utc_now)


class Team(BaseModel):
    """A manager and a unique set of members.

    The manager does not have to be a member.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    manager_id: UUID
    member_ids: tuple[UUID, ...] = ()
    bio: str = ""
    profile_picture: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


class LeaveRequest(BaseModel):
    """A member's request to leave a team."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    team_id: UUID
    user_id: UUID
    status: LeaveStatus = LeaveStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    resolved_at: datetime | None = None
    resolved_by: UUID | None = None


class Comment(BaseModel):
    """A comment left on a task."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    task_id: UUID
    user_id: UUID
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TransitionEvent(BaseModel):
    """Something a completed transition wants a recipient to know about.

    Attributes:
        kind: What happened.
        recipient_id: Who should be notified.
        sender_id: Who caused it, if anyone.
        message: Short human-readable summary.
        refs: Reference ids (task_id, team_id, request_id, ...).
    """

    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    recipient_id: UUID
    sender_id: UUID | None = None
    message: str
    refs: dict[str, str] = {}


class Notification(BaseModel):
    """A persisted notification, created only by the dispatcher."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    recipient_id: UUID
    sender_id: UUID | None = None
    kind: NotificationKind
    message: str
    refs: dict[str, str] = {}
    is_read: bool = False
    created_at: datetime = Field(default_factory=utc_now)


EntityT = TypeVar("EntityT", bound=BaseModel)


@dataclass(frozen=True)
class Transition(Generic[EntityT]):
    """Result of a pure transition: the new entity plus emitted events."""

    entity: EntityT
    events: tuple[TransitionEvent, ...] = ()
