"""Task comment routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from taskflow.core.comments import CommentService
from taskflow.core.domain_types import Comment
from taskflow.entrypoints.api.deps import get_comment_service
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep

router = APIRouter(tags=["comments"])

CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


class CommentRequest(BaseModel):
    """Comment body."""

    content: str = ""


@router.get("/tasks/{task_id}/comments", response_model=list[Comment])
async def list_comments(
    task_id: UUID, actor: ActorDep, service: CommentServiceDep
) -> list[Comment]:
    """Comments on a task, oldest first."""
    return await service.list_comments(task_id, actor.user_id)


@router.post("/tasks/{task_id}/comments", response_model=Comment, status_code=201)
async def add_comment(
    task_id: UUID, body: CommentRequest, actor: ActorDep, service: CommentServiceDep
) -> Comment:
    """Comment on a task."""
    return await service.add_comment(task_id, body.content, actor.user_id)


@router.put("/comments/{comment_id}", response_model=Comment)
async def update_comment(
    comment_id: UUID, body: CommentRequest, actor: ActorDep, service: CommentServiceDep
) -> Comment:
    """Edit one of your comments."""
    return await service.update_comment(comment_id, body.content, actor.user_id)


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: UUID, actor: ActorDep, service: CommentServiceDep
) -> dict[str, str]:
    """Delete one of your comments."""
    await service.delete_comment(comment_id, actor.user_id)
    return {"message": "Comment deleted successfully"}
