"""
Tests for the /api/auth endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from api.app import app
from api.dependencies import ServiceContainer, set_container


PASSWORD = "Password123"


@pytest.fixture
def container(test_settings):
    container = ServiceContainer(test_settings)
    set_container(container)
    return container


@pytest.fixture
def client(container):
    return TestClient(app)


def register(client, email="ada@example.com", password=PASSWORD):
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "firstName": "Ada", "lastName": "Lovelace"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email="ada@example.com", password=PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestRegister:
    def test_register(self, client):
        body = register(client)
        assert set(body) == {"accessToken", "refreshToken", "user"}
        assert body["user"]["email"] == "ada@example.com"
        assert body["user"]["fullName"] == "Ada Lovelace"
        assert "passwordHash" not in body["user"]

    def test_duplicate_email(self, client):
        register(client)
        response = client.post(
            "/api/auth/register",
            json={"email": "ADA@example.com", "password": PASSWORD, "firstName": "A", "lastName": "B"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "EMAIL_EXISTS"

    def test_weak_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "ada@example.com", "password": "weak", "firstName": "A", "lastName": "B"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["field"] == "password"


class TestLogin:
    def test_login(self, client):
        register(client)
        response = login(client)
        assert response.status_code == 200
        assert response.json()["accessToken"]

    def test_wrong_password(self, client):
        register(client)
        response = login(client, password="Wrong12345")
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIALS"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_six_logins_keep_last_five_refresh_tokens(self, client, container):
        """The oldest session is evicted by the sixth login."""
        register(client)
        user_id = container.users.get_by_email("ada@example.com").id
        tokens = [login(client).json()["refreshToken"] for _ in range(6)]

        stored = [e.token for e in container.users.get_by_id(user_id).refresh_tokens]
        assert stored == tokens[1:]

        evicted = client.post("/api/auth/refresh-token", json={"refreshToken": tokens[0]})
        assert evicted.status_code == 401
        assert evicted.json()["error"] == "REVOKED"


class TestRefreshToken:
    def test_rotates(self, client):
        tokens = register(client)
        response = client.post("/api/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"accessToken", "refreshToken"}
        assert body["refreshToken"] != tokens["refreshToken"]

        reused = client.post("/api/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
        assert reused.status_code == 401
        assert reused.json()["error"] == "REVOKED"

    def test_access_token_is_wrong_type(self, client):
        tokens = register(client)
        response = client.post("/api/auth/refresh-token", json={"refreshToken": tokens["accessToken"]})
        assert response.status_code == 401
        assert response.json()["error"] == "WRONG_TYPE"

    def test_malformed(self, client):
        response = client.post("/api/auth/refresh-token", json={"refreshToken": "garbage"})
        assert response.status_code == 401
        assert response.json()["error"] == "MALFORMED"

    def test_missing_body_field(self, client):
        response = client.post("/api/auth/refresh-token", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestProtectedRoutes:
    def test_missing_auth_header(self, client):
        """Request without auth header should return 401."""
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "MISSING_TOKEN"

    def test_invalid_token(self, client):
        response = client.get("/api/auth/me", headers=bearer("invalid-token"))
        assert response.status_code == 401
        assert response.json()["error"] == "MALFORMED"

    def test_unknown_user_body_is_opaque(self, client, container):
        token = container.signer.issue_access_token("ghost-user")
        response = client.get("/api/auth/me", headers=bearer(token))

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "USER_NOT_FOUND"
        assert body["details"] == {}
        assert "ghost-user" not in response.text

    def test_refresh_token_is_not_an_access_token(self, client):
        tokens = register(client)
        response = client.get("/api/auth/me", headers=bearer(tokens["refreshToken"]))
        assert response.status_code == 401

    def test_me(self, client):
        tokens = register(client)
        response = client.get("/api/auth/me", headers=bearer(tokens["accessToken"]))

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "ada@example.com"
        assert body["usage"]["dailyRemaining"] == 10
        assert body["usage"]["limits"] == {"daily": 10, "monthly": 100}

    def test_update_profile(self, client):
        tokens = register(client)
        response = client.patch(
            "/api/auth/profile",
            headers=bearer(tokens["accessToken"]),
            json={"firstName": "Grace", "preferences": {"aiPersonality": "concise"}},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["firstName"] == "Grace"
        assert body["preferences"]["aiPersonality"] == "concise"

    def test_logout_revokes_refresh_token(self, client):
        tokens = register(client)
        response = client.post(
            "/api/auth/logout",
            headers=bearer(tokens["accessToken"]),
            json={"refreshToken": tokens["refreshToken"]},
        )
        assert response.status_code == 200

        reused = client.post("/api/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
        assert reused.status_code == 401

    def test_change_password(self, client):
        tokens = register(client)
        response = client.patch(
            "/api/auth/change-password",
            headers=bearer(tokens["accessToken"]),
            json={"currentPassword": PASSWORD, "newPassword": "NewPassword456"},
        )
        assert response.status_code == 200

        old_refresh = client.post(
            "/api/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]}
        )
        assert old_refresh.status_code == 401
        assert login(client, password="NewPassword456").status_code == 200
        assert login(client).status_code == 401

    def test_change_password_wrong_current(self, client):
        tokens = register(client)
        response = client.patch(
            "/api/auth/change-password",
            headers=bearer(tokens["accessToken"]),
            json={"currentPassword": "Wrong12345", "newPassword": "NewPassword456"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_PASSWORD"

    def test_device_tokens(self, client, container):
        tokens = register(client)
        headers = bearer(tokens["accessToken"])

        added = client.post(
            "/api/auth/device-token", headers=headers, json={"token": "push-1", "platform": "ios"}
        )
        assert added.status_code == 200
        user = container.users.get_by_email("ada@example.com")
        assert [d.token for d in user.device_tokens] == ["push-1"]

        removed = client.request(
            "DELETE", "/api/auth/device-token", headers=headers, json={"token": "push-1"}
        )
        assert removed.status_code == 200
        assert container.users.get_by_email("ada@example.com").device_tokens == []

    def test_delete_account(self, client):
        tokens = register(client)
        response = client.request(
            "DELETE",
            "/api/auth/account",
            headers=bearer(tokens["accessToken"]),
            json={"password": PASSWORD},
        )
        assert response.status_code == 200

        after = client.get("/api/auth/me", headers=bearer(tokens["accessToken"]))
        assert after.status_code == 401
        assert after.json()["error"] == "ACCOUNT_DEACTIVATED"
        assert login(client).status_code == 401
