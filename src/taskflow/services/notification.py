"""Notification dispatch and inbox services."""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

import structlog

from taskflow.core.domain_types import Notification, TransitionEvent
from taskflow.core.exceptions import ForbiddenError, NotFoundError, infrastructure_boundary
from taskflow.core.interfaces import NotificationRepository

logger = structlog.get_logger()


class NotificationDispatcher:
    """Turns transition events into stored notifications.

    Delivery is best-effort: a repository failure is logged and
    swallowed so it never fails the workflow that triggered it.
    """

    def __init__(self, repo: NotificationRepository) -> None:
        """Initialize the dispatcher.

        Args:
            repo: Notification repository.
        """
        self._repo = repo

    async def dispatch(self, event: TransitionEvent) -> Notification | None:
        """Persist a notification for one event.

        Returns the stored notification, or None if storing it failed.
        """
        notification = Notification(
            recipient_id=event.recipient_id,
            sender_id=event.sender_id,
            kind=event.kind,
            message=event.message,
            refs=event.refs,
        )
        try:
            stored = await self._repo.create(notification)
        except Exception as e:
            logger.error(
                "notification_failed",
                kind=event.kind.value,
                recipient_id=str(event.recipient_id),
                error=str(e),
            )
            return None

        logger.info(
            "notification_sent",
            kind=event.kind.value,
            recipient_id=str(event.recipient_id),
            notification_id=str(stored.id),
        )
        return stored

    async def dispatch_all(self, events: Iterable[TransitionEvent]) -> list[Notification]:
        """Dispatch events in order, skipping any that failed."""
        results = []
        for event in events:
            stored = await self.dispatch(event)
            if stored is not None:
                results.append(stored)
        return results


class NotificationService:
    """A user's notification inbox."""

    def __init__(self, repo: NotificationRepository) -> None:
        """Initialize the notification service.

        Args:
            repo: Notification repository.
        """
        self._repo = repo

    @infrastructure_boundary
    async def list_for(self, user_id: UUID) -> dict[str, Any]:
        """Notifications for a user with the unread count."""
        notifications = await self._repo.find_by_recipient(user_id)
        unread_count = await self._repo.count_unread(user_id)
        return {"notifications": notifications, "unread_count": unread_count}

    @infrastructure_boundary
    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        """Mark one of the user's notifications read.

        Raises:
            NotFoundError: If the notification does not exist.
            ForbiddenError: If it belongs to someone else.
        """
        notification = await self._repo.find_by_id(notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if notification.recipient_id != user_id:
            raise ForbiddenError("Not allowed to modify this notification")

        updated = await self._repo.mark_as_read(notification_id)
        if updated is None:
            raise NotFoundError("Notification not found")
        return updated

    @infrastructure_boundary
    async def mark_all_as_read(self, user_id: UUID) -> int:
        """Mark all of a user's notifications read. Returns how many changed."""
        changed = await self._repo.mark_all_as_read(user_id)
        logger.info("notifications_marked_read", user_id=str(user_id), count=changed)
        return changed
