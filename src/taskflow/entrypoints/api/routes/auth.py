"""Auth API routes for registration, login, token refresh and logout."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from taskflow.core.auth import SessionManager
from taskflow.entrypoints.api.deps import get_session_manager
from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep

router = APIRouter(prefix="/auth", tags=["auth"])

SessionDep = Annotated[SessionManager, Depends(get_session_manager)]


# Request/Response models
class RegisterRequest(BaseModel):
    """Registration request body.

    Fields are loose here; the session manager reports what is missing.
    """

    name: str = ""
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    """Login request body."""

    username: str
    password: str


class RefreshRequest(BaseModel):
    """Token refresh request body."""

    refresh_token: str


class TokenResponse(BaseModel):
    """Token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: dict[str, Any] | None = None


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, sessions: SessionDep) -> dict[str, Any]:
    """Create an account. The caller logs in separately."""
    user = await sessions.register(body.model_dump())
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, sessions: SessionDep) -> TokenResponse:
    """Authenticate user and return tokens."""
    result = await sessions.login(body.username, body.password)
    return TokenResponse(**result)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, sessions: SessionDep) -> TokenResponse:
    """Exchange a refresh token for a new pair. The old token stops working."""
    result = await sessions.refresh(body.refresh_token)
    return TokenResponse(**result)


@router.post("/logout")
async def logout(actor: ActorDep, sessions: SessionDep) -> dict[str, str]:
    """Revoke the current refresh token."""
    await sessions.logout(actor.user_id)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def me(actor: ActorDep, sessions: SessionDep) -> dict[str, Any]:
    """Get the current user's profile."""
    return await sessions.get_profile(actor.user_id)
