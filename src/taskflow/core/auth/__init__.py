"""Auth domain types and utilities."""

from taskflow.core.auth.credentials import JwtCredentialService
from taskflow.core.auth.jwt import (
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from taskflow.core.auth.password import hash_password, verify_password
from taskflow.core.auth.session import SessionManager
from taskflow.core.auth.types import Actor, TokenPayload, TokenType

__all__ = [
    "Actor",
    "TokenPayload",
    "TokenType",
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "TokenError",
    "JwtCredentialService",
    "SessionManager",
]
