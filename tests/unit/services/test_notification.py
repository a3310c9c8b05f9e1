"""Unit tests for NotificationDispatcher and NotificationService."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock

import pytest

from taskflow.adapters.memory import InMemoryStore
from taskflow.core.domain_types import Notification, NotificationKind, TransitionEvent
from taskflow.core.exceptions import ForbiddenError, NotFoundError
from taskflow.services.notification import NotificationDispatcher, NotificationService


def _event(recipient_id: uuid.UUID) -> TransitionEvent:
    return TransitionEvent(
        kind=NotificationKind.TASK_ASSIGNED,
        recipient_id=recipient_id,
        message="You have been assigned a new task: Ship it",
        refs={"task_id": str(uuid.uuid4())},
    )


class TestNotificationDispatcher:
    """Tests for NotificationDispatcher."""

    @pytest.fixture
    def mock_repo(self) -> AsyncMock:
        """Return a mock notification repository."""
        mock = AsyncMock()
        mock.create.side_effect = lambda notification: notification
        return mock

    async def test_dispatch_persists(self, mock_repo: AsyncMock) -> None:
        """An event becomes a stored notification."""
        recipient = uuid.uuid4()
        dispatcher = NotificationDispatcher(mock_repo)

        stored = await dispatcher.dispatch(_event(recipient))

        assert isinstance(stored, Notification)
        assert stored.recipient_id == recipient
        assert stored.kind is NotificationKind.TASK_ASSIGNED
        assert stored.is_read is False
        mock_repo.create.assert_awaited_once()

    async def test_dispatch_swallows_failures(self, mock_repo: AsyncMock) -> None:
        """Repository errors are logged, not raised."""
        mock_repo.create.side_effect = ConnectionError("database unavailable")
        dispatcher = NotificationDispatcher(mock_repo)

        assert await dispatcher.dispatch(_event(uuid.uuid4())) is None

    async def test_dispatch_all_skips_failures(self, mock_repo: AsyncMock) -> None:
        """One failure does not stop the rest."""
        calls = 0

        def flaky(notification: Notification) -> Notification:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("transient")
            return notification

        mock_repo.create.side_effect = flaky
        dispatcher = NotificationDispatcher(mock_repo)

        stored = await dispatcher.dispatch_all([_event(uuid.uuid4()), _event(uuid.uuid4())])

        assert len(stored) == 1
        assert mock_repo.create.await_count == 2


class TestNotificationService:
    """Tests for NotificationService."""

    @pytest.fixture
    async def inbox(self, store: InMemoryStore) -> uuid.UUID:
        """A recipient with two unread notifications."""
        recipient = uuid.uuid4()
        dispatcher = NotificationDispatcher(store.notifications)
        await dispatcher.dispatch_all([_event(recipient), _event(recipient)])
        return recipient

    async def test_list_with_unread_count(
        self, notification_service: NotificationService, inbox: uuid.UUID
    ) -> None:
        """Listing includes the unread count."""
        result = await notification_service.list_for(inbox)

        assert len(result["notifications"]) == 2
        assert result["unread_count"] == 2

    async def test_mark_as_read(
        self, notification_service: NotificationService, inbox: uuid.UUID
    ) -> None:
        """Marking one read lowers the count."""
        listing = await notification_service.list_for(inbox)
        first = listing["notifications"][0]

        updated = await notification_service.mark_as_read(first.id, inbox)

        assert updated.is_read is True
        assert (await notification_service.list_for(inbox))["unread_count"] == 1

    async def test_mark_someone_elses(
        self, notification_service: NotificationService, inbox: uuid.UUID
    ) -> None:
        """Other users' notifications are off limits."""
        listing = await notification_service.list_for(inbox)

        with pytest.raises(ForbiddenError):
            await notification_service.mark_as_read(
                listing["notifications"][0].id, uuid.uuid4()
            )
        with pytest.raises(NotFoundError):
            await notification_service.mark_as_read(uuid.uuid4(), inbox)

    async def test_mark_all_as_read(
        self, notification_service: NotificationService, inbox: uuid.UUID
    ) -> None:
        """Mark-all reports how many changed."""
        assert await notification_service.mark_all_as_read(inbox) == 2
        assert await notification_service.mark_all_as_read(inbox) == 0
