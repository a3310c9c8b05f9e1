"""JWT token creation and validation."""

import os
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from taskflow.core.auth.types import TokenPayload, TokenType


class TokenError(Exception):
    """Raised when token validation fails."""

    pass


# Configuration
ACCESS_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-in-production")
REFRESH_SECRET_KEY = os.environ.get(
    "JWT_REFRESH_SECRET_KEY", "dev-refresh-secret-change-in-production"
)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 7


def _encode(
    user_id: str,
    username: str,
    token_type: TokenType,
    lifetime: timedelta,
    secret: str,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + lifetime

    payload = {
        "sub": user_id,
        "username": username,
        "type": token_type.value,
        "jti": uuid4().hex,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp()),
    }

    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def create_access_token(
    user_id: str,
    username: str,
    secret: str | None = None,
    expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
) -> str:
    """Create a short-lived access token.

    Args:
        user_id: User identifier
        username: User's login name
        secret: Signing secret; defaults to ACCESS_SECRET_KEY
        expires_minutes: Token lifetime

    Returns:
        Encoded JWT string
    """
    return _encode(
        user_id,
        username,
        TokenType.ACCESS,
        timedelta(minutes=expires_minutes),
        secret or ACCESS_SECRET_KEY,
    )


def create_refresh_token(
    user_id: str,
    username: str,
    secret: str | None = None,
    expires_days: int = REFRESH_TOKEN_EXPIRE_DAYS,
) -> str:
    """Create a long-lived refresh token.

    Args:
        user_id: User identifier
        username: User's login name
        secret: Signing secret; defaults to REFRESH_SECRET_KEY
        expires_days: Token lifetime

    Returns:
        Encoded JWT string
    """
    return _encode(
        user_id,
        username,
        TokenType.REFRESH,
        timedelta(days=expires_days),
        secret or REFRESH_SECRET_KEY,
    )


def decode_token(
    token: str,
    token_type: TokenType = TokenType.ACCESS,
    secret: str | None = None,
) -> TokenPayload:
    """Decode and validate a JWT token.

    Args:
        token: Encoded JWT string
        token_type: The kind of token expected
        secret: Verification secret; defaults to the one for token_type

    Returns:
        Decoded token payload

    Raises:
        TokenError: If token is invalid, expired or of the wrong type
    """
    if secret is None:
        secret = ACCESS_SECRET_KEY if token_type is TokenType.ACCESS else REFRESH_SECRET_KEY

    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired") from None
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}") from None

    if payload.get("type") != token_type.value:
        raise TokenError(f"Expected {token_type.value} token")

    try:
        return TokenPayload(**payload)
    except (TypeError, ValueError) as e:
        raise TokenError(f"Malformed token claims: {e}") from None
