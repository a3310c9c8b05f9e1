"""Dependency injection and application lifespan management."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from fastapi import Request

from taskflow.adapters.memory import InMemoryStore
from taskflow.core.auth import JwtCredentialService, SessionManager
from taskflow.core.comments import CommentService
from taskflow.core.leave import LeaveRequestWorkflow
from taskflow.core.tasks import TaskService
from taskflow.core.teams import TeamService
from taskflow.services.notification import NotificationDispatcher, NotificationService

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = structlog.get_logger()


class Settings:
    """Application settings loaded from environment."""

    def __init__(self) -> None:
        """Load settings from environment variables."""
        self.jwt_secret_key = os.getenv("JWT_SECRET_KEY", "dev-secret-change-in-production")
        self.jwt_refresh_secret_key = os.getenv(
            "JWT_REFRESH_SECRET_KEY", "dev-refresh-secret-change-in-production"
        )
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
        self.refresh_token_expire_days = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))
        self.bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", "12"))
        self.cors_origins = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin
        ]


settings = Settings()


@dataclass
class Services:
    """Every core service, wired to one set of repositories."""

    sessions: SessionManager
    tasks: TaskService
    teams: TeamService
    leave: LeaveRequestWorkflow
    comments: CommentService
    notifications: NotificationService


def build_services(store: InMemoryStore, config: Settings | None = None) -> Services:
    """Wire services to repositories.

    Args:
        store: Repositories to use.
        config: Settings; defaults to the module-level settings.
    """
    config = config or settings
    credentials = JwtCredentialService(
        access_secret=config.jwt_secret_key,
        refresh_secret=config.jwt_refresh_secret_key,
        access_expires_minutes=config.access_token_expire_minutes,
        refresh_expires_days=config.refresh_token_expire_days,
        bcrypt_rounds=config.bcrypt_rounds,
    )
    dispatcher = NotificationDispatcher(store.notifications)

    return Services(
        sessions=SessionManager(store.users, credentials),
        tasks=TaskService(store.tasks, store.teams, store.time_logs, dispatcher),
        teams=TeamService(store.teams, store.users),
        leave=LeaveRequestWorkflow(store.leave_requests, store.teams, dispatcher),
        comments=CommentService(store.comments, store.tasks, store.teams, dispatcher),
        notifications=NotificationService(store.notifications),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - setup and teardown.

    Builds the repositories and services unless a test already put
    services on app.state.
    """
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(InMemoryStore())
        logger.info("services_ready", backend="memory")

    yield

    logger.info("shutdown")


def get_services(request: Request) -> Services:
    """Get the service container from app state."""
    services: Services = request.app.state.services
    return services


def get_session_manager(request: Request) -> SessionManager:
    """Get the session manager."""
    return get_services(request).sessions


def get_task_service(request: Request) -> TaskService:
    """Get the task service."""
    return get_services(request).tasks


def get_team_service(request: Request) -> TeamService:
    """Get the team service."""
    return get_services(request).teams


def get_leave_workflow(request: Request) -> LeaveRequestWorkflow:
    """Get the leave request workflow."""
    return get_services(request).leave


def get_comment_service(request: Request) -> CommentService:
    """Get the comment service."""
    return get_services(request).comments


def get_notification_service(request: Request) -> NotificationService:
    """Get the notification inbox service."""
    return get_services(request).notifications
