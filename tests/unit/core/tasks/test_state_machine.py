"""Tests for the task state machine."""

from __future__ import annotations

import math
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from taskflow.core.domain_types import (
    NotificationKind,
    ReviewStatus,
    Task,
    TaskPriority,
    TaskStatus,
    Team,
)
from taskflow.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from taskflow.core.tasks import state_machine


@pytest.fixture
def owner():
    """Task owner id."""
    return uuid4()


@pytest.fixture
def task(owner) -> Task:
    """A fresh personal task."""
    return state_machine.create({"title": "Write report"}, owner).entity


class TestCreate:
    """Tests for create."""

    def test_defaults(self, task: Task, owner) -> None:
        """New tasks start pending, medium priority, no time spent."""
        assert task.status is TaskStatus.PENDING
        assert task.priority is TaskPriority.MEDIUM
        assert task.time_spent == 0
        assert task.user_id == owner

    def test_explicit_priority(self, owner) -> None:
        """A supplied priority is honoured."""
        created = state_machine.create({"title": "x", "priority": "high"}, owner).entity

        assert created.priority is TaskPriority.HIGH

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_title_required(self, owner, title) -> None:
        """Blank titles are refused."""
        with pytest.raises(ValidationError, match="Title is required"):
            state_machine.create({"title": title}, owner)

    def test_ignores_unknown_fields(self, owner) -> None:
        """Callers cannot set status or time spent on creation."""
        created = state_machine.create(
            {"title": "x", "status": "completed", "time_spent": 99}, owner
        ).entity

        assert created.status is TaskStatus.PENDING
        assert created.time_spent == 0

    def test_time_spent_cannot_be_negative(self, owner) -> None:
        """The model itself refuses a negative accumulator."""
        with pytest.raises(PydanticValidationError):
            Task(title="x", user_id=owner, time_spent=-1)


class TestUpdateStatus:
    """Tests for update_status."""

    def test_pending_to_in_progress(self, task: Task, owner) -> None:
        """Forward move."""
        result = state_machine.update_status(task, "in-progress", owner)

        assert result.entity.status is TaskStatus.IN_PROGRESS
        assert task.status is TaskStatus.PENDING

    def test_back_to_pending(self, task: Task, owner) -> None:
        """In-progress can go back to pending."""
        started = state_machine.update_status(task, "in-progress", owner).entity

        result = state_machine.update_status(started, "pending", owner)

        assert result.entity.status is TaskStatus.PENDING

    def test_completed_is_terminal(self, task: Task, owner) -> None:
        """A completed task cannot be reopened."""
        done = state_machine.update_status(task, "completed", owner).entity

        with pytest.raises(ValidationError):
            state_machine.update_status(done, "pending", owner)

    @pytest.mark.parametrize("value", [None, "", "done", "IN_PROGRESS"])
    def test_invalid_values(self, task: Task, owner, value) -> None:
        """Unknown or missing values are refused."""
        with pytest.raises(ValidationError):
            state_machine.update_status(task, value, owner)

    def test_stranger_forbidden(self, task: Task) -> None:
        """Only owner, assignee or manager."""
        with pytest.raises(ForbiddenError):
            state_machine.update_status(task, "completed", uuid4())


class TestUpdatePriority:
    """Tests for update_priority."""

    def test_allowed_after_completion(self, task: Task, owner) -> None:
        """Priority stays editable on completed tasks."""
        done = state_machine.update_status(task, "completed", owner).entity

        result = state_machine.update_priority(done, "low", owner)

        assert result.entity.priority is TaskPriority.LOW

    def test_invalid(self, task: Task, owner) -> None:
        """Unknown priority is refused."""
        with pytest.raises(ValidationError):
            state_machine.update_priority(task, "urgent", owner)


class TestTrackTime:
    """Tests for track_time."""

    def test_accumulates(self, task: Task, owner) -> None:
        """Minutes add up and an entry is produced."""
        first, entry = state_machine.track_time(task, 30, owner)
        second, _ = state_machine.track_time(first.entity, 15.5, owner)

        assert second.entity.time_spent == 45.5
        assert entry.minutes == 30
        assert entry.task_id == task.id
        assert entry.user_id == owner

    @pytest.mark.parametrize("minutes", [0, -5, math.nan, math.inf, "30", None, True])
    def test_rejects_non_positive_or_non_numeric(self, task: Task, owner, minutes) -> None:
        """Only positive finite numbers are accepted."""
        with pytest.raises(ValidationError):
            state_machine.track_time(task, minutes, owner)


class TestAssignment:
    """Tests for assign, submit and review."""

    @pytest.fixture
    def manager(self):
        """Manager id."""
        return uuid4()

    @pytest.fixture
    def member(self):
        """Member id."""
        return uuid4()

    @pytest.fixture
    def team(self, manager, member) -> Team:
        """Team with one member."""
        return Team(name="Core", manager_id=manager, member_ids=(member,))

    @pytest.fixture
    def task(self, manager) -> Task:
        """A personal task the manager owns."""
        return state_machine.create({"title": "Write report"}, manager).entity

    def test_assign_transfers_ownership(
        self, task: Task, team: Team, manager, member
    ) -> None:
        """The member becomes owner and assignee and is notified."""
        result = state_machine.assign(task, team, member, manager)

        assigned = result.entity
        assert assigned.user_id == member
        assert assigned.assignee_id == member
        assert assigned.team_id == team.id
        assert assigned.assigned_by == manager
        assert assigned.review_status is ReviewStatus.ASSIGNED
        assert [e.kind for e in result.events] == [NotificationKind.TASK_ASSIGNED]
        assert result.events[0].recipient_id == member

    def test_assign_requires_manager(self, task: Task, team: Team, member) -> None:
        """Members cannot assign."""
        with pytest.raises(ForbiddenError):
            state_machine.assign(task, team, member, member)

    def test_assign_refuses_someone_elses_personal_task(
        self, team: Team, manager, member
    ) -> None:
        """Managing a team gives no claim on other users' personal tasks."""
        foreign = state_machine.create({"title": "Private"}, uuid4()).entity

        with pytest.raises(ForbiddenError, match="Not allowed to assign"):
            state_machine.assign(foreign, team, member, manager)

    def test_assign_refuses_other_teams_task(
        self, task: Task, team: Team, manager, member
    ) -> None:
        """A task linked to another team stays with that team."""
        elsewhere = task.model_copy(update={"team_id": uuid4()})

        with pytest.raises(ForbiddenError):
            state_machine.assign(elsewhere, team, member, manager)

    def test_reassign_within_team(self, task: Task, team: Team, manager, member) -> None:
        """The manager can hand a team task to another member."""
        second = uuid4()
        bigger = team.model_copy(update={"member_ids": (member, second)})
        assigned = state_machine.assign(task, bigger, member, manager).entity

        moved = state_machine.assign(assigned, bigger, second, manager).entity

        assert moved.user_id == second

    def test_assign_requires_member_target(self, task: Task, team: Team, manager) -> None:
        """Targets outside the team are not found."""
        with pytest.raises(NotFoundError):
            state_machine.assign(task, team, uuid4(), manager)

    def test_submit_then_approve(self, task: Task, team: Team, manager, member) -> None:
        """Approval completes the task and notifies the assignee."""
        assigned = state_machine.assign(task, team, member, manager).entity

        submitted = state_machine.submit(assigned, member, "https://example.com/pr/1", "done")
        approved = state_machine.review(submitted.entity, team, manager, "approve", "nice")

        assert submitted.entity.review_status is ReviewStatus.SUBMITTED
        assert submitted.events[0].kind is NotificationKind.TASK_SUBMITTED
        assert submitted.events[0].recipient_id == manager
        assert approved.entity.review_status is ReviewStatus.APPROVED
        assert approved.entity.status is TaskStatus.COMPLETED
        assert approved.entity.manager_feedback == "nice"
        assert approved.events[0].recipient_id == member

    def test_reject_allows_resubmission(self, task: Task, team: Team, manager, member) -> None:
        """Rejected work goes back to in-progress and can be submitted again."""
        assigned = state_machine.assign(task, team, member, manager).entity
        submitted = state_machine.submit(assigned, member).entity

        rejected = state_machine.review(submitted, team, manager, "reject", "try again").entity
        resubmitted = state_machine.submit(rejected, member).entity

        assert rejected.status is TaskStatus.IN_PROGRESS
        assert resubmitted.review_status is ReviewStatus.SUBMITTED

    def test_cannot_submit_twice(self, task: Task, team: Team, manager, member) -> None:
        """A pending submission blocks another."""
        assigned = state_machine.assign(task, team, member, manager).entity
        submitted = state_machine.submit(assigned, member).entity

        with pytest.raises(ValidationError):
            state_machine.submit(submitted, member)

    def test_review_requires_submission(self, task: Task, team: Team, manager, member) -> None:
        """Nothing to review before a submission."""
        assigned = state_machine.assign(task, team, member, manager).entity

        with pytest.raises(ValidationError):
            state_machine.review(assigned, team, manager, "approve")

    def test_review_unknown_action(self, task: Task, team: Team, manager, member) -> None:
        """Only approve and reject."""
        assigned = state_machine.assign(task, team, member, manager).entity
        submitted = state_machine.submit(assigned, member).entity

        with pytest.raises(ValidationError):
            state_machine.review(submitted, team, manager, "maybe")
