"""
Tests for auth module models.
"""

import pytest
from pydantic import ValidationError

from modules.auth.models import (
    AuthResponse,
    ChangePasswordRequest,
    JWTPayload,
    LoginRequest,
    PreferencesUpdate,
    RegisterRequest,
    TokenPair,
    UserResponse,
    check_password_strength,
)
from shared.models import NotificationPreferences, Theme, User, UserPreferences


class TestPasswordStrength:
    @pytest.mark.parametrize("password", ["Password1", "Abcdefg9", "LongerPassw0rd!"])
    def test_accepts_strong(self, password):
        assert check_password_strength(password) == password

    @pytest.mark.parametrize(
        "password",
        ["Pass1", "password1", "PASSWORD1", "Password"],
    )
    def test_rejects_weak(self, password):
        with pytest.raises(ValueError):
            check_password_strength(password)


class TestRegisterRequest:
    def test_accepts_camel_case(self):
        request = RegisterRequest(
            email="ada@example.com",
            password="Password123",
            firstName="Ada",
            lastName="Lovelace",
        )
        assert request.first_name == "Ada"

    def test_rejects_invalid_email(self):
        with pytest.raises(ValidationError):
            RegisterRequest(
                email="not-an-email",
                password="Password123",
                first_name="Ada",
                last_name="Lovelace",
            )

    def test_rejects_weak_password(self):
        with pytest.raises(ValidationError):
            RegisterRequest(
                email="ada@example.com",
                password="weak",
                first_name="Ada",
                last_name="Lovelace",
            )

    def test_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            RegisterRequest(
                email="ada@example.com",
                password="Password123",
                first_name="   ",
                last_name="Lovelace",
            )


class TestRequests:
    def test_login_requires_password(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="ada@example.com", password="")

    def test_change_password_checks_new_password(self):
        with pytest.raises(ValidationError):
            ChangePasswordRequest(current_password="Password123", new_password="short")


class TestJWTPayload:
    def test_requires_type(self):
        with pytest.raises(ValidationError):
            JWTPayload(sub="user-1", iat=1, exp=2, jti="x")

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            JWTPayload(sub="user-1", iat=1, exp=2, jti="x", type="id")


class TestResponses:
    def test_token_pair_serializes_camel_case(self):
        data = TokenPair(access_token="a", refresh_token="r").model_dump(by_alias=True)
        assert data == {"accessToken": "a", "refreshToken": "r"}

    def test_user_response_hides_secrets(self):
        """The public user view never carries the password hash or token lists."""
        user = User(
            id="user-1",
            email="ada@example.com",
            password_hash="secret-hash",
            first_name="Ada",
            last_name="Lovelace",
        )
        data = UserResponse.from_user(user).model_dump(by_alias=True)
        assert data["fullName"] == "Ada Lovelace"
        assert "passwordHash" not in data
        assert "password_hash" not in data
        assert "refreshTokens" not in data

    def test_auth_response_shape(self):
        user = User(
            id="user-1",
            email="ada@example.com",
            password_hash="h",
            first_name="Ada",
            last_name="Lovelace",
        )
        response = AuthResponse(
            access_token="a", refresh_token="r", user=UserResponse.from_user(user)
        )
        assert set(response.model_dump(by_alias=True)) == {"accessToken", "refreshToken", "user"}


class TestPreferencesUpdate:
    def test_merges_only_set_fields(self):
        current = UserPreferences(notifications=NotificationPreferences(push=True, email=False))
        merged = PreferencesUpdate(theme="dark").merge_into(current)
        assert merged.theme == Theme.DARK
        assert merged.notifications.email is False
        assert merged.language == "en"

    def test_merges_nested_notifications(self):
        current = UserPreferences()
        merged = PreferencesUpdate(notifications={"email": False}).merge_into(current)
        assert merged.notifications.push is True
        assert merged.notifications.email is False
