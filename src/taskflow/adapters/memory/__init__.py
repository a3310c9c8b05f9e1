"""In-memory repository adapters."""

from dataclasses import dataclass, field

from .repositories import (
    InMemoryCommentRepository,
    InMemoryLeaveRequestRepository,
    InMemoryNotificationRepository,
    InMemoryTaskRepository,
    InMemoryTeamRepository,
    InMemoryTimeLogRepository,
    InMemoryUserRepository,
)


@dataclass
class InMemoryStore:
    """One instance of every repository, sharing a process lifetime."""

    users: InMemoryUserRepository = field(default_factory=InMemoryUserRepository)
    tasks: InMemoryTaskRepository = field(default_factory=InMemoryTaskRepository)
    time_logs: InMemoryTimeLogRepository = field(default_factory=InMemoryTimeLogRepository)
    teams: InMemoryTeamRepository = field(default_factory=InMemoryTeamRepository)
    leave_requests: InMemoryLeaveRequestRepository = field(
        default_factory=InMemoryLeaveRequestRepository
    )
    notifications: InMemoryNotificationRepository = field(
        default_factory=InMemoryNotificationRepository
    )
    comments: InMemoryCommentRepository = field(default_factory=InMemoryCommentRepository)


__all__ = [
    "InMemoryCommentRepository",
    "InMemoryLeaveRequestRepository",
    "InMemoryNotificationRepository",
    "InMemoryStore",
    "InMemoryTaskRepository",
    "InMemoryTeamRepository",
    "InMemoryTimeLogRepository",
    "InMemoryUserRepository",
]
