"""Notification inbox routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from taskflow.core.domain_types import Notification
from taskflow.entrypoints.api.deps import get_notification_service
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep
from taskflow.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


class NotificationListResponse(BaseModel):
    """A user's notifications with the unread count."""

    notifications: list[Notification]
    unread_count: int


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    actor: ActorDep, service: NotificationServiceDep
) -> NotificationListResponse:
    """Get the current user's notifications, newest first."""
    result = await service.list_for(actor.user_id)
    return NotificationListResponse(**result)


@router.put("/read-all")
async def mark_all_as_read(actor: ActorDep, service: NotificationServiceDep) -> dict[str, int]:
    """Mark every notification read."""
    changed = await service.mark_all_as_read(actor.user_id)
    return {"updated": changed}


@router.put("/{notification_id}/read", response_model=Notification)
async def mark_as_read(
    notification_id: UUID, actor: ActorDep, service: NotificationServiceDep
) -> Notification:
    """Mark one notification read."""
    return await service.mark_as_read(notification_id, actor.user_id)
