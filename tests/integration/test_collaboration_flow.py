"""End-to-end flows through the services over shared in-memory repositories."""

from __future__ import annotations

from uuid import UUID

import pytest

from taskflow.adapters.memory import InMemoryStore
from taskflow.core.auth import SessionManager
from taskflow.core.comments import CommentService
from taskflow.core.domain_types import LeaveStatus, NotificationKind, TaskStatus
from taskflow.core.exceptions import ConflictError
from taskflow.core.leave import LeaveRequestWorkflow
from taskflow.core.tasks import TaskService
from taskflow.core.teams import TeamService
from taskflow.services.notification import NotificationService

PASSWORD = "secret1"  # pragma: allowlist secret


async def _signup(sessions: SessionManager, username: str) -> UUID:
    user = await sessions.register(
        {
            "name": username.capitalize(),
            "username": username,
            "email": f"{username}@example.com",
            "password": PASSWORD,
        }
    )
    return UUID(user["id"])


@pytest.mark.asyncio
async def test_personal_task_flow(
    session_manager: SessionManager, task_service: TaskService
) -> None:
    """Alice registers, logs in, and works a task to completion."""
    await _signup(session_manager, "alice")
    session = await session_manager.login("alice", PASSWORD)
    assert session["access_token"] and session["refresh_token"]
    alice = session_manager.authenticate(session["access_token"])

    task = await task_service.create_task({"title": "Write report"}, alice.user_id)
    assert (task.status, task.priority.value, task.time_spent) == (
        TaskStatus.PENDING,
        "medium",
        0,
    )

    task = await task_service.track_time(task.id, 30, alice.user_id)
    assert task.time_spent == 30

    task = await task_service.update_status(task.id, "completed", alice.user_id)
    assert task.status is TaskStatus.COMPLETED


@pytest.mark.asyncio
async def test_team_leave_flow(
    session_manager: SessionManager,
    team_service: TeamService,
    leave_workflow: LeaveRequestWorkflow,
    notification_service: NotificationService,
) -> None:
    """Carol asks to leave Bob's team; Bob approves exactly once."""
    bob = await _signup(session_manager, "bob")
    carol = await _signup(session_manager, "carol")
    team = await team_service.create_team("Platform", bob)
    await team_service.add_member(team.id, "carol", bob)

    request = await leave_workflow.create(team.id, carol)
    approved = await leave_workflow.approve(request.id, bob)

    assert approved.status is LeaveStatus.APPROVED
    inbox = await notification_service.list_for(carol)
    assert [n.kind for n in inbox["notifications"]] == [NotificationKind.LEAVE_APPROVED]
    assert carol not in (await team_service.get_team(team.id)).member_ids

    with pytest.raises(ConflictError):
        await leave_workflow.approve(request.id, bob)


@pytest.mark.asyncio
async def test_assigned_work_flow(
    store: InMemoryStore,
    session_manager: SessionManager,
    team_service: TeamService,
    task_service: TaskService,
    comment_service: CommentService,
    notification_service: NotificationService,
) -> None:
    """Assignment, discussion, rejection, resubmission and approval."""
    bob = await _signup(session_manager, "bob")
    carol = await _signup(session_manager, "carol")
    team = await team_service.create_team("Platform", bob)
    await team_service.add_member(team.id, carol, bob)

    task = await task_service.assign_new({"title": "Migrate DB"}, team.id, carol, bob)
    await comment_service.add_comment(task.id, "Starting now", carol)
    await comment_service.add_comment(task.id, "Thanks", bob)
    await task_service.track_time(task.id, 45, carol)
    await task_service.submit(task.id, carol, link="https://example.com/pr/7")
    await task_service.review(task.id, bob, "reject", note="Missing rollback")
    await task_service.submit(task.id, carol, link="https://example.com/pr/8")
    done = await task_service.review(task.id, bob, "approve")

    assert done.status is TaskStatus.COMPLETED
    assert done.time_spent == 45
    assert len(await comment_service.list_comments(task.id, bob)) == 2
    carol_kinds = [n.kind for n in (await notification_service.list_for(carol))["notifications"]]
    assert carol_kinds.count(NotificationKind.TASK_REJECTED) == 1
    assert carol_kinds.count(NotificationKind.TASK_APPROVED) == 1
    assert NotificationKind.COMMENT_ADDED in carol_kinds
    assert (await task_service.team_dashboard(team.id, bob))["completed_tasks"] == 1
    assert len(await store.time_logs.find_by_task_id(task.id)) == 1
