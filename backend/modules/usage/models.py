"""
Usage module data models.

These models define the quota limits, snapshots and admission results
exposed to other modules through the interface.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from shared.models import CamelModel


class Tier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"


class LimitWindow(str, Enum):
    """Which quota boundary was hit."""

    DAILY = "daily"
    MONTHLY = "monthly"


class UsageLimits(CamelModel):
    """Request limits for one tier."""

    daily: int = Field(..., ge=0)
    monthly: int = Field(..., ge=0)

    model_config = {"frozen": True}


class UsageLimitTable(BaseModel):
    """Limits per tier."""

    free: UsageLimits = UsageLimits(daily=10, monthly=100)
    premium: UsageLimits = UsageLimits(daily=100, monthly=3000)

    model_config = {"frozen": True}

    def for_tier(self, tier: Tier) -> UsageLimits:
        return self.premium if tier == Tier.PREMIUM else self.free


class UsageSnapshot(CamelModel):
    """
    Derived quota view of one user at one instant. Never persisted.

    Remaining counts are clamped at zero.
    """

    can_make: bool
    daily_remaining: int
    monthly_remaining: int
    daily_used: int
    monthly_used: int
    total_used: int
    limits: UsageLimits
    tier: Tier


class Reservation(BaseModel):
    """An admitted request that has not yet succeeded or failed."""

    id: str
    user_id: str
    created_at: datetime

    model_config = {"frozen": True}


class Admission(BaseModel):
    """
    Outcome of a gate check.

    A denial is a normal result: `admitted` is False, `exceeded` names the
    boundary and `snapshot` carries the remaining quota.
    """

    admitted: bool
    snapshot: UsageSnapshot
    exceeded: Optional[LimitWindow] = None
    reservation: Optional[Reservation] = None


class WindowUsage(CamelModel):
    used: int
    limit: int
    remaining: int
    resets_at: datetime


class UsageStats(CamelModel):
    """Body of GET /ai/usage."""

    daily: WindowUsage
    monthly: WindowUsage
    total: int
    can_make_request: bool
    tier: Tier
    last_request_at: Optional[datetime] = None
