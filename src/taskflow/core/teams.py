"""Teams: creation, membership and profile."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog

from taskflow.core import policy
from taskflow.core.domain_types import Team, User
from taskflow.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
    infrastructure_boundary,
)
from taskflow.core.interfaces import TeamRepository, UserRepository

logger = structlog.get_logger()

PROFILE_FIELDS = frozenset({"name", "bio", "profile_picture"})


def ensure_not_member(team: Team, user_id: UUID) -> None:
    """Guard before adding user_id to the team.

    Raises:
        ConflictError: If the user is already a member.
    """
    if user_id in team.member_ids:
        raise ConflictError("User already in team")


def ensure_member(team: Team, user_id: UUID) -> None:
    """Guard before removing user_id from the team.

    Raises:
        NotFoundError: If the user is not a member.
    """
    if user_id not in team.member_ids:
        raise NotFoundError("User not in team")


class TeamService:
    """Team operations for an authenticated actor."""

    def __init__(self, teams: TeamRepository, users: UserRepository) -> None:
        """Initialize the team service.

        Args:
            teams: Team repository.
            users: User repository, to resolve members by id or username.
        """
        self._teams = teams
        self._users = users

    @infrastructure_boundary
    async def create_team(self, name: str, manager_id: UUID) -> Team:
        """Create a team managed by the actor. The manager is not added as a member."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Team name is required")
        team = await self._teams.create(Team(name=name, manager_id=manager_id))
        logger.info("team_created", team_id=str(team.id), manager_id=str(manager_id))
        return team

    @infrastructure_boundary
    async def get_team(self, team_id: UUID) -> Team:
        """Fetch a team.

        Raises:
            NotFoundError: If it does not exist.
        """
        team = await self._teams.find_by_id(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    @infrastructure_boundary
    async def list_by_manager(self, manager_id: UUID) -> list[Team]:
        """Teams the user manages."""
        return await self._teams.list_by_manager(manager_id)

    @infrastructure_boundary
    async def list_by_member(self, user_id: UUID) -> list[Team]:
        """Teams the user belongs to."""
        return await self._teams.list_by_member(user_id)

    @infrastructure_boundary
    async def add_member(
        self, team_id: UUID, identifier: UUID | str, actor_id: UUID
    ) -> tuple[Team, User]:
        """Add a user (by id or username) to the team. Manager only.

        Returns:
            The updated team and the added user.

        Raises:
            ForbiddenError: Unless the actor manages the team.
            NotFoundError: If the team or user does not exist.
            ConflictError: If the user is already a member.
        """
        team = await self.get_team(team_id)
        policy.require(policy.can_manage_team(actor_id, team), "Only the manager can add members")
        user = await self._resolve_user(identifier)
        ensure_not_member(team, user.id)

        updated = await self._teams.add_member(team_id, user.id)
        if updated is None:
            raise NotFoundError("Team not found")
        logger.info("team_member_added", team_id=str(team_id), user_id=str(user.id))
        return updated, user

    @infrastructure_boundary
    async def remove_member(
        self, team_id: UUID, identifier: UUID | str, actor_id: UUID
    ) -> tuple[Team, User]:
        """Remove a user (by id or username) from the team. Manager only.

        Raises:
            ForbiddenError: Unless the actor manages the team.
            NotFoundError: If the team or user does not exist, or the user
                is not a member.
        """
        team = await self.get_team(team_id)
        policy.require(
            policy.can_manage_team(actor_id, team), "Only the manager can remove members"
        )
        user = await self._resolve_user(identifier)
        ensure_member(team, user.id)

        updated = await self._teams.remove_member(team_id, user.id)
        if updated is None:
            raise NotFoundError("Team not found")
        logger.info("team_member_removed", team_id=str(team_id), user_id=str(user.id))
        return updated, user

    @infrastructure_boundary
    async def update_profile(
        self, team_id: UUID, actor_id: UUID, data: dict[str, Any]
    ) -> Team:
        """Update name, bio or picture. Manager only."""
        team = await self.get_team(team_id)
        policy.require(
            policy.can_manage_team(actor_id, team), "Only team manager can update team profile"
        )
        changes = {k: v for k, v in data.items() if k in PROFILE_FIELDS and v is not None}
        if "name" in changes:
            changes["name"] = str(changes["name"]).strip()
            if not changes["name"]:
                raise ValidationError("Team name is required")

        updated = await self._teams.update(team_id, changes)
        if updated is None:
            raise NotFoundError("Team not found")
        return updated

    async def _resolve_user(self, identifier: UUID | str) -> User:
        if not identifier:
            raise ValidationError("Missing user identifier")
        user: User | None = None
        if isinstance(identifier, UUID):
            user = await self._users.find_by_id(identifier)
        else:
            try:
                user = await self._users.find_by_id(UUID(identifier))
            except ValueError:
                user = None
            if user is None:
                user = await self._users.find_by_username(identifier)
        if user is None:
            raise NotFoundError("User not found")
        return user
