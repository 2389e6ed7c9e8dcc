"""
Authentication module data models.

Token payloads and claims used inside the Session Manager, plus the
camelCase request/response bodies of the /auth endpoints.
"""

import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from shared.models import (
    CamelModel,
    NotificationPreferences,
    Personality,
    Platform,
    Role,
    Subscription,
    Theme,
    User,
    UserPreferences,
)
from modules.usage.models import UsageSnapshot


TokenType = Literal["access", "refresh"]

_PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$")


def check_password_strength(value: str) -> str:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if not _PASSWORD_RULE.match(value):
        raise ValueError(
            "Password must be at least 8 characters and contain an uppercase "
            "letter, a lowercase letter and a number"
        )
    return value


# -----------------------------------------------------------------------------
# Tokens
# -----------------------------------------------------------------------------


class JWTPayload(BaseModel):
    """
    Decoded JWT payload for both token kinds.

    `type` discriminates access from refresh tokens; `jti` keeps two
    tokens issued in the same second distinct.
    """

    sub: str = Field(..., description="Subject (user ID)")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")
    type: TokenType = Field(..., description="Token kind")
    jti: str = Field(..., description="Unique token ID")
    iat_ms: Optional[int] = Field(None, description="Issued at, epoch milliseconds")

    @property
    def issued_at_ms(self) -> int:
        return self.iat_ms if self.iat_ms is not None else self.iat * 1000


class AccessTokenClaims(BaseModel):
    user_id: str
    issued_at: int
    issued_at_ms: int

    model_config = {"frozen": True}


class RefreshTokenClaims(BaseModel):
    user_id: str
    issued_at: int

    model_config = {"frozen": True}


class IssuedToken(BaseModel):
    """A freshly signed token with its lifetime."""

    token: str
    issued_at: datetime
    expires_at: datetime

    model_config = {"frozen": True}


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class UserResponse(CamelModel):
    """Public view of a user; never carries the password hash or token lists."""

    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    avatar: Optional[str] = None
    role: Role
    is_email_verified: bool
    preferences: UserPreferences
    subscription: Subscription
    last_login_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            avatar=user.avatar,
            role=user.role,
            is_email_verified=user.is_email_verified,
            preferences=user.preferences,
            subscription=user.subscription,
            last_login_at=user.last_login_at,
            created_at=user.created_at,
        )


class AuthResponse(CamelModel):
    """Body of a successful login or registration."""

    access_token: str
    refresh_token: str
    user: UserResponse


class MeResponse(CamelModel):
    user: UserResponse
    usage: UsageSnapshot


class MessageResponse(CamelModel):
    message: str


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name cannot be blank")
        return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    """Without a refresh token, every session of the user is ended."""

    refresh_token: Optional[str] = None


class NotificationPreferencesUpdate(CamelModel):
    push: Optional[bool] = None
    email: Optional[bool] = None


class PreferencesUpdate(CamelModel):
    theme: Optional[Theme] = None
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    notifications: Optional[NotificationPreferencesUpdate] = None
    ai_personality: Optional[Personality] = None

    def merge_into(self, current: UserPreferences) -> UserPreferences:
        """Apply only the fields that were set onto `current`."""
        changes = self.model_dump(exclude_unset=True, exclude_none=True)
        notifications = changes.pop("notifications", None)
        merged = current.model_copy(update=changes)
        if notifications:
            merged.notifications = NotificationPreferences(
                **{**current.notifications.model_dump(), **notifications}
            )
        return merged


class UpdateProfileRequest(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    avatar: Optional[str] = None
    preferences: Optional[PreferencesUpdate] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return check_password_strength(value)


class DeviceTokenRequest(CamelModel):
    token: str = Field(..., min_length=1)
    platform: Platform


class RemoveDeviceTokenRequest(CamelModel):
    token: str = Field(..., min_length=1)


class DeleteAccountRequest(CamelModel):
    password: str = Field(..., min_length=1)
