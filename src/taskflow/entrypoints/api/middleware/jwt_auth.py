"""JWT authentication dependency."""

from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskflow.core.auth.session import SessionManager
from taskflow.core.auth.types import Actor
from taskflow.core.exceptions import AuthError
from taskflow.entrypoints.api.deps import get_session_manager

logger = structlog.get_logger()

# Use Bearer token authentication
bearer_scheme = HTTPBearer(auto_error=False)


async def verify_jwt(
    request: Request,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
) -> Actor:
    """Verify the access token and return the acting user.

    Args:
        request: The current request.
        sessions: Session manager that verifies the token.
        credentials: Bearer token credentials.

    Returns:
        Actor resolved from the token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired.
    """
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        actor = sessions.authenticate(credentials.credentials)
    except AuthError as e:
        logger.warning("jwt_validation_failed", path=request.url.path)
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    request.state.actor = actor
    return actor


# Type alias for use in route signatures
ActorDep = Annotated[Actor, Depends(verify_jwt)]
