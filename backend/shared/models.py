"""
Shared data models used across modules.

The User record is read and written by the auth, usage and chat modules,
so it lives here rather than inside any one of them. Module-specific
request/response models stay in their respective module directories.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """
    Base for models exposed over the API.

    Fields are declared in snake_case and serialized in camelCase; input
    accepts either form.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Role(str, Enum):
    """User roles."""

    USER = "user"
    PREMIUM = "premium"
    ADMIN = "admin"


class Platform(str, Enum):
    """Push notification platforms."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class Personality(str, Enum):
    """Assistant personalities."""

    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    CONCISE = "concise"
    DETAILED = "detailed"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class UsageCounters(BaseModel):
    """
    Per-user AI request counters.

    Counters are only meaningful after reconciliation against the current
    time (see modules.usage.windows.reconcile_windows).
    """

    daily_count: int = Field(default=0, ge=0)
    monthly_count: int = Field(default=0, ge=0)
    total_count: int = Field(default=0, ge=0)
    last_request_at: Optional[datetime] = None
    last_daily_reset_at: datetime = Field(default_factory=utc_now)
    last_monthly_reset_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class RefreshTokenEntry(BaseModel):
    """A live refresh token held in the owner's token list."""

    token: str
    issued_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime

    model_config = {"frozen": True}


class DeviceToken(BaseModel):
    """A push notification token registered by a client device."""

    token: str
    platform: Platform
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class NotificationPreferences(CamelModel):
    push: bool = True
    email: bool = True


class UserPreferences(CamelModel):
    """User-adjustable settings."""

    theme: Theme = Theme.SYSTEM
    language: str = "en"
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    ai_personality: Personality = Personality.FRIENDLY


class Subscription(CamelModel):
    """Billing state. An active subscription grants the premium tier."""

    plan: Literal["free", "premium"] = "free"
    is_active: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class User(BaseModel):
    """
    Persisted user record.

    `version` increments on every successful write and is used by the
    repositories for compare-and-swap updates.
    """

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    role: Role = Role.USER
    is_active: bool = True
    is_email_verified: bool = False

    preferences: UserPreferences = Field(default_factory=UserPreferences)
    usage: UsageCounters = Field(default_factory=UsageCounters)
    subscription: Subscription = Field(default_factory=Subscription)

    refresh_tokens: list[RefreshTokenEntry] = Field(default_factory=list)
    device_tokens: list[DeviceToken] = Field(default_factory=list)

    last_login_at: Optional[datetime] = None
    password_changed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    version: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_premium(self) -> bool:
        """Premium by role or by an active subscription."""
        return self.role in (Role.PREMIUM, Role.ADMIN) or self.subscription.is_active

    def has_refresh_token(self, token: str) -> bool:
        return any(entry.token == token for entry in self.refresh_tokens)
