"""
Usage module.

Meters AI requests per user against daily and monthly quotas and decides
whether a request may proceed.

Public API:
- IUsageGate: Interface for admission and metering
- reconcile_windows: Lazy calendar reset of usage counters
- Models: UsageSnapshot, Admission, Reservation, UsageLimits, UsageLimitTable, Tier
- Exceptions: UsageLimitExceededError
"""

from .interfaces import IUsageGate
from .models import (
    Admission,
    LimitWindow,
    Reservation,
    Tier,
    UsageLimits,
    UsageLimitTable,
    UsageSnapshot,
    UsageStats,
)
from .windows import reconcile_windows, limits_for, tier_for, compute_snapshot
from .exceptions import UsageError, UsageLimitExceededError

__all__ = [
    # Interface
    "IUsageGate",
    # Windows
    "reconcile_windows",
    "limits_for",
    "tier_for",
    "compute_snapshot",
    # Models
    "Admission",
    "LimitWindow",
    "Reservation",
    "Tier",
    "UsageLimits",
    "UsageLimitTable",
    "UsageSnapshot",
    "UsageStats",
    # Exceptions
    "UsageError",
    "UsageLimitExceededError",
]
