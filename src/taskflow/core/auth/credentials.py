"""Default CredentialService backed by bcrypt and PyJWT."""

from taskflow.core.auth.jwt import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from taskflow.core.auth.password import hash_password, verify_password
from taskflow.core.auth.types import TokenPayload, TokenType
from taskflow.core.domain_types import User


class JwtCredentialService:
    """Hashes passwords and signs tokens.

    Secrets default to the module-level configuration in
    ``taskflow.core.auth.jwt``; pass them explicitly to isolate tests or
    run several apps in one process.
    """

    def __init__(
        self,
        access_secret: str | None = None,
        refresh_secret: str | None = None,
        access_expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_expires_days: int = REFRESH_TOKEN_EXPIRE_DAYS,
        bcrypt_rounds: int | None = None,
    ) -> None:
        """Initialize the credential service.

        Args:
            access_secret: Secret for access tokens.
            refresh_secret: Secret for refresh tokens. Must differ from access_secret.
            access_expires_minutes: Access token lifetime.
            refresh_expires_days: Refresh token lifetime.
            bcrypt_rounds: bcrypt work factor.
        """
        if access_secret is not None and access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use distinct secrets")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_expires_minutes = access_expires_minutes
        self._refresh_expires_days = refresh_expires_days
        self._bcrypt_rounds = bcrypt_rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password."""
        return hash_password(plaintext, rounds=self._bcrypt_rounds)

    def compare(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash."""
        return verify_password(plaintext, hashed)

    def sign_access_token(self, user: User) -> str:
        """Issue a short-lived access token."""
        return create_access_token(
            user_id=str(user.id),
            username=user.username,
            secret=self._access_secret,
            expires_minutes=self._access_expires_minutes,
        )

    def sign_refresh_token(self, user: User) -> str:
        """Issue a long-lived refresh token."""
        return create_refresh_token(
            user_id=str(user.id),
            username=user.username,
            secret=self._refresh_secret,
            expires_days=self._refresh_expires_days,
        )

    def verify_access_token(self, token: str) -> TokenPayload:
        """Decode an access token."""
        return decode_token(token, TokenType.ACCESS, secret=self._access_secret)

    def verify_refresh_token(self, token: str) -> TokenPayload:
        """Decode a refresh token."""
        return decode_token(token, TokenType.REFRESH, secret=self._refresh_secret)
