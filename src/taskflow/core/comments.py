"""Task comments."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

import structlog

from taskflow.core import policy
from taskflow.core.domain_types import Comment, NotificationKind, Task, TransitionEvent
from taskflow.core.exceptions import NotFoundError, ValidationError, infrastructure_boundary
from taskflow.core.interfaces import (
    CommentRepository,
    EventDispatcher,
    TaskRepository,
    TeamRepository,
)

logger = structlog.get_logger()


class CommentService:
    """Read and write comments under the task's access rules.

    Personal tasks are visible to their owner only; team tasks to the
    team's manager and members. Editing and deleting belong to the
    comment's author alone.
    """

    def __init__(
        self,
        comments: CommentRepository,
        tasks: TaskRepository,
        teams: TeamRepository,
        dispatcher: EventDispatcher,
    ) -> None:
        """Initialize the comment service."""
        self._comments = comments
        self._tasks = tasks
        self._teams = teams
        self._dispatcher = dispatcher

    @infrastructure_boundary
    async def add_comment(self, task_id: UUID, content: str, actor_id: UUID) -> Comment:
        """Comment on a task. Notifies the task owner when someone else comments."""
        content = _clean(content)
        task = await self._load_accessible_task(task_id, actor_id, "comment on")

        comment = await self._comments.create(
            Comment(task_id=task_id, user_id=actor_id, content=content)
        )
        if task.user_id != actor_id:
            await self._dispatcher.dispatch(
                TransitionEvent(
                    kind=NotificationKind.COMMENT_ADDED,
                    recipient_id=task.user_id,
                    sender_id=actor_id,
                    message=f"New comment on {task.title}",
                    refs={"task_id": str(task_id), "comment_id": str(comment.id)},
                )
            )
        return comment

    @infrastructure_boundary
    async def list_comments(self, task_id: UUID, actor_id: UUID) -> list[Comment]:
        """Comments on a task, oldest first."""
        await self._load_accessible_task(task_id, actor_id, "view comments on")
        return await self._comments.find_by_task_id(task_id)

    @infrastructure_boundary
    async def update_comment(self, comment_id: UUID, content: str, actor_id: UUID) -> Comment:
        """Edit a comment. Author only."""
        content = _clean(content)
        comment = await self._load_comment(comment_id)
        policy.require(
            policy.can_modify_comment(actor_id, comment),
            "Only the comment owner can update this comment",
        )
        return await self._comments.update(
            comment.model_copy(update={"content": content, "updated_at": datetime.now(UTC)})
        )

    @infrastructure_boundary
    async def delete_comment(self, comment_id: UUID, actor_id: UUID) -> None:
        """Delete a comment. Author only."""
        comment = await self._load_comment(comment_id)
        policy.require(
            policy.can_modify_comment(actor_id, comment),
            "Only the comment owner can delete this comment",
        )
        await self._comments.delete(comment_id)
        logger.info("comment_deleted", comment_id=str(comment_id))

    async def _load_accessible_task(self, task_id: UUID, actor_id: UUID, verb: str) -> Task:
        task = await self._tasks.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        team = await self._teams.find_by_id(task.team_id) if task.team_id else None
        policy.require(
            policy.can_access_comments(actor_id, task, team),
            f"Access denied: not allowed to {verb} this task",
        )
        return task

    async def _load_comment(self, comment_id: UUID) -> Comment:
        comment = await self._comments.find_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment


def _clean(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content is required")
    return content
