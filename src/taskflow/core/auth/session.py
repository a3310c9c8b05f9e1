"""Session manager for registration, login, token rotation and profiles."""

import asyncio
from typing import Any
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from taskflow.core.auth.jwt import TokenError
from taskflow.core.auth.types import Actor
from taskflow.core.domain_types import NewUser, User
from taskflow.core.exceptions import (
    AuthError,
    ConflictError,
    NotFoundError,
    ValidationError,
    infrastructure_boundary,
)
from taskflow.core.interfaces import CredentialService, UserRepository

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"

# Profile fields a user may change about themselves
PROFILE_FIELDS = frozenset({"name", "email", "bio", "experience", "profile_picture"})


class SessionManager:
    """Orchestrates register/login/refresh/logout.

    One refresh token is stored per user, so logging in again or
    refreshing invalidates whatever refresh token was issued before.
    """

    def __init__(self, users: UserRepository, credentials: CredentialService) -> None:
        """Initialize with collaborators.

        Args:
            users: User repository.
            credentials: Password hashing and token signing.
        """
        self._users = users
        self._credentials = credentials

    @infrastructure_boundary
    async def register(self, user_data: dict[str, Any]) -> dict[str, Any]:
        """Create an account. Does not log the user in.

        Args:
            user_data: name, username, email and password.

        Returns:
            Public view of the created user.

        Raises:
            ValidationError: If a field is missing or the password is too short
                or too long.
            ConflictError: If the username or email is taken.
        """
        try:
            new_user = NewUser(**user_data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid registration data: {e.error_count()} error(s)") from None

        if not new_user.is_valid() or new_user.email is None:
            raise ValidationError(
                "Name, username, email and a password of at least "
                f"{NewUser.MIN_PASSWORD_LENGTH} characters and at most "
                f"{NewUser.MAX_PASSWORD_BYTES} bytes are required"
            )

        # Probe both so the error names every conflicting field
        by_username, by_email = await asyncio.gather(
            self._users.find_by_username(new_user.username),
            self._users.find_by_email(new_user.email),
        )
        taken = [
            field
            for field, existing in (("username", by_username), ("email", by_email))
            if existing is not None
        ]
        if taken:
            raise ConflictError(f"{' and '.join(taken).capitalize()} already exists")

        user = await self._users.create(
            User(
                name=new_user.name,
                username=new_user.username,
                email=new_user.email,
                password_hash=self._credentials.hash(new_user.password),
            )
        )

        logger.info("user_registered", user_id=str(user.id), username=user.username)
        return user.to_public()

    @infrastructure_boundary
    async def login(self, username: str, password: str) -> dict[str, Any]:
        """Authenticate and open a session.

        Args:
            username: Login name.
            password: Plain text password.

        Returns:
            Dict with user, access_token, refresh_token and token_type.

        Raises:
            AuthError: For an unknown user or a wrong password alike.
        """
        user = await self._users.find_by_username(username)
        if user is None or not self._credentials.compare(password, user.password_hash):
            logger.info("login_failed", username=username)
            raise AuthError(INVALID_CREDENTIALS)

        tokens = await self._issue_tokens(user)

        logger.info("login_succeeded", user_id=str(user.id))
        return {"user": user.to_public(), **tokens}

    @infrastructure_boundary
    async def refresh(self, refresh_token: str) -> dict[str, str]:
        """Rotate a refresh token.

        The presented token must verify and must still be the one stored
        for its user. A new pair is issued and the stored token replaced,
        so the presented one can never be used again.

        Raises:
            AuthError: If the token is invalid, expired or superseded.
        """
        if not refresh_token:
            raise AuthError(INVALID_REFRESH_TOKEN)

        try:
            payload = self._credentials.verify_refresh_token(refresh_token)
        except TokenError as e:
            logger.info("refresh_rejected", reason=str(e))
            raise AuthError(INVALID_REFRESH_TOKEN) from None

        holder = await self._users.find_by_refresh_token(refresh_token)
        if holder is None or str(holder.id) != payload.sub:
            logger.warning("refresh_token_reuse", subject=payload.sub)
            raise AuthError(INVALID_REFRESH_TOKEN)

        return await self._issue_tokens(holder)

    @infrastructure_boundary
    async def logout(self, user_id: UUID) -> None:
        """Revoke the user's refresh token. Safe to call repeatedly."""
        await self._users.revoke_refresh_token(user_id)
        logger.info("logged_out", user_id=str(user_id))

    def authenticate(self, access_token: str) -> Actor:
        """Resolve an access token to the acting identity.

        Raises:
            AuthError: If the token is invalid or expired.
        """
        try:
            payload = self._credentials.verify_access_token(access_token)
            user_id = UUID(payload.sub)
        except (TokenError, ValueError):
            raise AuthError("Invalid or expired access token") from None
        return Actor(user_id=user_id, username=payload.username)

    @infrastructure_boundary
    async def get_profile(self, identifier: UUID | str) -> dict[str, Any]:
        """Look a user up by id, falling back to username.

        Raises:
            NotFoundError: If neither matches.
        """
        user = await self._find_user(identifier)
        if user is None:
            raise NotFoundError("User not found")
        return user.to_public()

    @infrastructure_boundary
    async def update_profile(self, user_id: UUID, data: dict[str, Any]) -> dict[str, Any]:
        """Update editable profile fields.

        Anything outside PROFILE_FIELDS (id, created_at, credentials) is
        ignored.

        Raises:
            ValidationError: If name or email would become empty.
            ConflictError: If another account already uses the email.
            NotFoundError: If the user does not exist.
        """
        changes = {k: v for k, v in data.items() if k in PROFILE_FIELDS and v is not None}
        for required in ("name", "email"):
            if required in changes and not str(changes[required]).strip():
                raise ValidationError(f"{required.capitalize()} cannot be empty")

        if "email" in changes:
            try:
                checked = NewUser(email=changes["email"])
            except PydanticValidationError:
                raise ValidationError("Invalid email address") from None
            changes["email"] = checked.email

            holder = await self._users.find_by_email(str(checked.email))
            if holder is not None and holder.id != user_id:
                raise ConflictError("Email already exists")

        user = await self._users.update(user_id, changes)
        if user is None:
            raise NotFoundError("User not found")

        logger.info("profile_updated", user_id=str(user_id), fields=sorted(changes))
        return user.to_public()

    async def _issue_tokens(self, user: User) -> dict[str, str]:
        access_token = self._credentials.sign_access_token(user)
        refresh_token = self._credentials.sign_refresh_token(user)
        await self._users.save_refresh_token(user.id, refresh_token)
        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
        }

    async def _find_user(self, identifier: UUID | str) -> User | None:
        if isinstance(identifier, UUID):
            return await self._users.find_by_id(identifier)
        try:
            user = await self._users.find_by_id(UUID(identifier))
        except ValueError:
            user = None
        if user is None:
            user = await self._users.find_by_username(identifier)
        return user
