"""Tests for auth and user routes."""

from __future__ import annotations

from collections.abc import Callable

from fastapi.testclient import TestClient

PASSWORD = "secret1"  # pragma: allowlist secret


def _register(client: TestClient, username: str = "alice", **overrides: str):
    body = {
        "name": "Alice",
        "username": username,
        "email": f"{username}@example.com",
        "password": PASSWORD,
        **overrides,
    }
    return client.post("/api/v1/auth/register", json=body)


class TestRegisterEndpoint:
    """Test POST /auth/register."""

    def test_register_success(self, client: TestClient) -> None:
        """Should return 201 and the public user."""
        response = _register(client)

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["username"] == "alice"
        assert "password_hash" not in user

    def test_register_duplicate(self, client: TestClient) -> None:
        """Should return 409 for a taken username."""
        _register(client)

        response = _register(client, email="new@example.com")

        assert response.status_code == 409
        assert response.json()["detail"] == "Username already exists"

    def test_register_short_password(self, client: TestClient) -> None:
        """Should return 400 for a short password."""
        response = _register(client, password="abc")

        assert response.status_code == 400


class TestLoginEndpoint:
    """Test POST /auth/login."""

    def test_login_success(self, client: TestClient) -> None:
        """Should return tokens on successful login."""
        _register(client)

        response = client.post(
            "/api/v1/auth/login", json={"username": "alice", "password": PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]

    def test_login_invalid_credentials(self, client: TestClient) -> None:
        """Should return 401 for invalid credentials."""
        _register(client)

        response = client.post(
            "/api/v1/auth/login",
            json={"username": "alice", "password": "wrong-password"},  # pragma: allowlist secret
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"


class TestRefreshAndLogout:
    """Test POST /auth/refresh and /auth/logout."""

    def test_rotation(self, client: TestClient, login_as: Callable[[str], dict]) -> None:
        """A refresh token works once."""
        session = login_as("alice")

        first = client.post(
            "/api/v1/auth/refresh", json={"refresh_token": session["refresh_token"]}
        )
        replay = client.post(
            "/api/v1/auth/refresh", json={"refresh_token": session["refresh_token"]}
        )

        assert first.status_code == 200
        assert first.json()["refresh_token"] != session["refresh_token"]
        assert replay.status_code == 401

    def test_logout_revokes(self, client: TestClient, login_as: Callable[[str], dict]) -> None:
        """After logout the refresh token is dead."""
        session = login_as("alice")

        response = client.post("/api/v1/auth/logout", headers=session["headers"])
        refresh = client.post(
            "/api/v1/auth/refresh", json={"refresh_token": session["refresh_token"]}
        )

        assert response.status_code == 200
        assert refresh.status_code == 401


class TestAuthentication:
    """Bearer token handling."""

    def test_missing_token(self, client: TestClient) -> None:
        """Protected routes need a token."""
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token(self, client: TestClient) -> None:
        """Garbage tokens are rejected."""
        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    def test_refresh_token_is_not_a_bearer(
        self, client: TestClient, login_as: Callable[[str], dict]
    ) -> None:
        """Refresh tokens cannot authenticate requests."""
        session = login_as("alice")

        response = client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {session['refresh_token']}"},
        )

        assert response.status_code == 401

    def test_me(self, client: TestClient, login_as: Callable[[str], dict]) -> None:
        """The current user is resolved from the token."""
        session = login_as("alice")

        response = client.get("/api/v1/auth/me", headers=session["headers"])

        assert response.status_code == 200
        assert response.json()["username"] == "alice"


class TestProfileEndpoints:
    """Test /users routes."""

    def test_update_and_lookup(self, client: TestClient, login_as: Callable[[str], dict]) -> None:
        """Profile edits show up in username lookups."""
        session = login_as("alice")
        viewer = login_as("bob")

        update = client.put(
            "/api/v1/users/profile",
            json={"bio": "Explorer", "experience": "5 years"},
            headers=session["headers"],
        )
        lookup = client.get("/api/v1/users/alice", headers=viewer["headers"])

        assert update.status_code == 200
        assert lookup.json()["bio"] == "Explorer"
        assert lookup.json()["experience"] == "5 years"

    def test_unknown_user(self, client: TestClient, login_as: Callable[[str], dict]) -> None:
        """Unknown users are 404."""
        session = login_as("alice")

        response = client.get("/api/v1/users/nobody", headers=session["headers"])

        assert response.status_code == 404
