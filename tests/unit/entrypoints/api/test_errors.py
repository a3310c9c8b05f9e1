"""Tests for exception-to-HTTP mapping."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskflow.core.exceptions import (
    AuthError,
    ConflictError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    TaskflowError,
    ValidationError,
)
from taskflow.entrypoints.api.errors import register_exception_handlers


@pytest.fixture
def failing_client() -> TestClient:
    """An app whose single route raises whatever the test asks for."""
    app = FastAPI()
    register_exception_handlers(app)
    errors: dict[str, TaskflowError] = {
        "validation": ValidationError("Title is required"),
        "conflict": ConflictError("Request already processed"),
        "forbidden": ForbiddenError("Access denied"),
        "auth": AuthError("Invalid credentials"),
        "missing": NotFoundError("Task not found"),
        "infra": InfrastructureError("connection refused"),
    }

    @app.get("/fail/{kind}")
    async def fail(kind: str) -> None:
        raise errors[kind]

    return TestClient(app, raise_server_exceptions=False)


class TestErrorMapping:
    """Each workflow error maps to one status code."""

    @pytest.mark.parametrize(
        ("kind", "status", "detail"),
        [
            ("validation", 400, "Title is required"),
            ("conflict", 409, "Request already processed"),
            ("forbidden", 403, "Access denied"),
            ("auth", 401, "Invalid credentials"),
            ("missing", 404, "Task not found"),
        ],
    )
    def test_workflow_errors(
        self, failing_client: TestClient, kind: str, status: int, detail: str
    ) -> None:
        """Status and message come from the exception."""
        response = failing_client.get(f"/fail/{kind}")

        assert response.status_code == status
        assert response.json() == {"detail": detail}

    def test_auth_error_asks_for_bearer(self, failing_client: TestClient) -> None:
        """401 responses carry a WWW-Authenticate header."""
        response = failing_client.get("/fail/auth")

        assert response.headers["www-authenticate"] == "Bearer"

    def test_infrastructure_error_is_opaque(self, failing_client: TestClient) -> None:
        """Outages become 503 without leaking internals."""
        response = failing_client.get("/fail/infra")

        assert response.status_code == 503
        assert "connection refused" not in response.text
