"""Application services."""

from taskflow.services.notification import NotificationDispatcher, NotificationService

__all__ = [
    "NotificationDispatcher",
    "NotificationService",
]
