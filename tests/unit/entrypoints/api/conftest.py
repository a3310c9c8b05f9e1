"""Fixtures for API tests: a full app over in-memory repositories."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskflow.adapters.memory import InMemoryStore
from taskflow.entrypoints.api.app import create_app
from taskflow.entrypoints.api.deps import Settings, build_services
from tests.fixtures.services import ACCESS_SECRET, REFRESH_SECRET

PASSWORD = "secret1"  # pragma: allowlist secret


@pytest.fixture
def api_store() -> InMemoryStore:
    """Repositories behind the test app."""
    return InMemoryStore()


@pytest.fixture
def app(api_store: InMemoryStore) -> FastAPI:
    """App wired to in-memory repositories with test secrets."""
    config = Settings()
    config.jwt_secret_key = ACCESS_SECRET
    config.jwt_refresh_secret_key = REFRESH_SECRET
    config.bcrypt_rounds = 4
    return create_app(build_services(api_store, config))


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Create test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(client: TestClient) -> Callable[[str], dict]:
    """Register and log in a user; the result carries ready-made auth headers."""

    def _login(username: str) -> dict:
        client.post(
            "/api/v1/auth/register",
            json={
                "name": username.capitalize(),
                "username": username,
                "email": f"{username}@example.com",
                "password": PASSWORD,
            },
        )
        response = client.post(
            "/api/v1/auth/login", json={"username": username, "password": PASSWORD}
        )
        data = response.json()
        data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
        return data

    return _login
