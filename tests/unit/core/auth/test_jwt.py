"""Tests for JWT token creation and validation."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt as pyjwt
import pytest

from taskflow.core.auth.jwt import (
    ALGORITHM,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from taskflow.core.auth.types import TokenPayload, TokenType

ACCESS = "access-secret"  # pragma: allowlist secret
REFRESH = "refresh-secret"  # pragma: allowlist secret


class TestCreateAccessToken:
    """Test access token creation."""

    def test_creates_valid_jwt(self) -> None:
        """Should create a valid JWT string."""
        token = create_access_token(user_id=str(uuid4()), username="alice", secret=ACCESS)

        assert isinstance(token, str)
        # JWT has 3 parts separated by dots
        assert len(token.split(".")) == 3

    def test_token_contains_claims(self) -> None:
        """Token should carry the subject, username and type."""
        user_id = str(uuid4())

        token = create_access_token(user_id=user_id, username="alice", secret=ACCESS)

        payload = decode_token(token, TokenType.ACCESS, secret=ACCESS)
        assert isinstance(payload, TokenPayload)
        assert payload.sub == user_id
        assert payload.username == "alice"
        assert payload.type is TokenType.ACCESS

    def test_expires_in_fifteen_minutes(self) -> None:
        """Access tokens are short-lived."""
        token = create_access_token(user_id="u", username="alice", secret=ACCESS)

        payload = decode_token(token, secret=ACCESS)
        assert payload.exp - payload.iat == 15 * 60

    def test_tokens_are_unique(self) -> None:
        """Two tokens issued in the same second still differ."""
        first = create_access_token(user_id="u", username="alice", secret=ACCESS)
        second = create_access_token(user_id="u", username="alice", secret=ACCESS)

        assert first != second


class TestCreateRefreshToken:
    """Test refresh token creation."""

    def test_expires_in_seven_days(self) -> None:
        """Refresh tokens last a week."""
        token = create_refresh_token(user_id="u", username="alice", secret=REFRESH)

        payload = decode_token(token, TokenType.REFRESH, secret=REFRESH)
        assert payload.type is TokenType.REFRESH
        assert payload.exp - payload.iat == 7 * 24 * 60 * 60


class TestDecodeToken:
    """Test token decoding."""

    def test_expired_token_raises(self) -> None:
        """Should raise TokenError for expired token."""
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = pyjwt.encode(
            {
                "sub": "u",
                "username": "alice",
                "type": "access",
                "jti": "x",
                "exp": int(past.timestamp()),
                "iat": int((past - timedelta(minutes=15)).timestamp()),
            },
            ACCESS,
            algorithm=ALGORITHM,
        )

        with pytest.raises(TokenError, match="expired"):
            decode_token(token, secret=ACCESS)

    def test_invalid_token_raises(self) -> None:
        """Should raise TokenError for garbage input."""
        with pytest.raises(TokenError, match="Invalid"):
            decode_token("not-a-jwt", secret=ACCESS)

    def test_wrong_secret_raises(self) -> None:
        """A token signed with another secret does not verify."""
        token = create_access_token(user_id="u", username="alice", secret=ACCESS)

        with pytest.raises(TokenError):
            decode_token(token, secret="someone-elses-secret")  # pragma: allowlist secret

    def test_refresh_token_rejected_as_access(self) -> None:
        """A refresh token cannot be used where an access token is expected."""
        token = create_refresh_token(user_id="u", username="alice", secret=ACCESS)

        with pytest.raises(TokenError, match="Expected access token"):
            decode_token(token, TokenType.ACCESS, secret=ACCESS)
