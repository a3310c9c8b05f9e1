"""Mapping of core exceptions to HTTP responses."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from taskflow.core.exceptions import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
    WorkflowError,
)

logger = structlog.get_logger()

STATUS_CODES: dict[type[WorkflowError], int] = {
    ValidationError: 400,
    AuthError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
}


def status_for(exc: WorkflowError) -> int:
    """HTTP status for a workflow failure, most specific class first."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 400


async def workflow_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Turn a typed workflow failure into a structured 4xx response."""
    # Registered for WorkflowError only
    status_code = status_for(cast(WorkflowError, exc))
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)


async def infrastructure_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Repository or transport fault: not the caller's fault, not retried."""
    logger.error("infrastructure_failure", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an app."""
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)
