"""User profile routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from taskflow.core.auth import SessionManager
from taskflow.entrypoints.api.deps import get_session_manager
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep

router = APIRouter(prefix="/users", tags=["users"])

SessionDep = Annotated[SessionManager, Depends(get_session_manager)]


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields; omitted fields are left alone."""

    name: str | None = None
    email: str | None = None
    bio: str | None = None
    experience: str | None = None
    profile_picture: str | None = None


@router.get("/profile")
async def get_own_profile(actor: ActorDep, sessions: SessionDep) -> dict[str, Any]:
    """Get the current user's profile."""
    return await sessions.get_profile(actor.user_id)


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest, actor: ActorDep, sessions: SessionDep
) -> dict[str, Any]:
    """Update the current user's profile."""
    return await sessions.update_profile(actor.user_id, body.model_dump(exclude_none=True))


@router.get("/{identifier}")
async def get_profile(identifier: str, actor: ActorDep, sessions: SessionDep) -> dict[str, Any]:
    """Look up a user by id or username."""
    return await sessions.get_profile(identifier)
