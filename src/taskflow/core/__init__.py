"""Core domain - workflow and session logic behind repository protocols."""

from .domain_types import (
    Comment,
    LeaveRequest,
    LeaveStatus,
    NewUser,
    Notification,
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
    User,
)
from .exceptions import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    TaskflowError,
    ValidationError,
    WorkflowError,
)

__all__ = [
    # Domain types
    "Comment",
    "LeaveRequest",
    "LeaveStatus",
    "NewUser",
    "Notification",
    "NotificationKind",
    "ReviewAction",
    "ReviewStatus",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Team",
    "TimeLogEntry",
    "Transition",
    "TransitionEvent",
    "User",
    # Exceptions
    "AuthError",
    "ConflictError",
    "ForbiddenError",
    "InfrastructureError",
    "NotFoundError",
    "TaskflowError",
    "ValidationError",
    "WorkflowError",
]
