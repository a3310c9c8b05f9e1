"""API middleware and auth dependencies."""

from taskflow.entrypoints.api.middleware.jwt_auth import ActorDep, verify_jwt

__all__ = ["ActorDep", "verify_jwt"]
