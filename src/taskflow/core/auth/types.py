"""Auth domain types."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class TokenType(str, Enum):
    """Kinds of JWT issued by the session manager."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenPayload(BaseModel):
    """JWT token payload claims."""

    sub: str  # user_id
    username: str
    type: TokenType
    jti: str  # unique per token, so a rotated token never equals its predecessor
    exp: int  # expiration timestamp
    iat: int  # issued at timestamp


@dataclass(frozen=True)
class Actor:
    """Authenticated identity attached to every workflow call."""

    user_id: UUID
    username: str
