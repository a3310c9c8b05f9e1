"""Domain-specific exceptions.

All exceptions in the taskflow system inherit from TaskflowError.
Workflow failures that callers are expected to surface to users share
the WorkflowError base; infrastructure faults do not. Service methods
are wrapped with ``infrastructure_boundary`` so that anything else
escaping from below them arrives as InfrastructureError.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")


class TaskflowError(Exception):
    """Base exception for all taskflow errors."""

    pass


class WorkflowError(TaskflowError):
    """A typed, user-facing failure of a workflow operation.

    Every subclass is recovered at the workflow boundary and reported
    to the caller as a structured failure.
    """

    pass


class ValidationError(WorkflowError):
    """Malformed or missing input.

    Raised for user-correctable problems: a missing title, an unknown
    status value, a non-positive time entry, a short password.
    """

    pass


class ConflictError(WorkflowError):
    """The operation clashes with existing state.

    Raised for duplicate registrations, duplicate team membership and
    leave requests that have already been resolved.
    """

    pass


class ForbiddenError(WorkflowError):
    """The actor is authenticated but not allowed to do this."""

    pass


class AuthError(WorkflowError):
    """Bad credentials or an invalid/expired token.

    Messages are deliberately uninformative so that they cannot be used
    to enumerate accounts.
    """

    pass


class NotFoundError(WorkflowError):
    """A referenced entity does not exist."""

    pass


class InfrastructureError(TaskflowError):
    """A repository or transport fault.

    Not retried by the core. Deliberately outside the WorkflowError
    hierarchy so callers can tell user errors from outages.
    """

    pass


def infrastructure_boundary(
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Report faults from below a service method as InfrastructureError.

    TaskflowError subclasses pass through untouched. Anything else raised
    while the method runs (a dropped connection, a failing repository) is
    re-raised as InfrastructureError chained to the original.

    Args:
        func: Async service method to wrap.

    Returns:
        Wrapped method with the same signature.
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except TaskflowError:
            raise
        except Exception as e:
            raise InfrastructureError(f"{func.__qualname__} failed: {e}") from e

    return wrapper
