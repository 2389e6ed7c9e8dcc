"""
Calendar quota windows.

All reset logic lives in reconcile_windows(): counters are reset lazily,
the first time they are read or written in a new calendar day or month,
rather than by a scheduled job.
"""

from datetime import datetime, time, timedelta, tzinfo
from typing import Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from shared.models import UsageCounters, User

from .models import Tier, UsageLimits, UsageLimitTable, UsageSnapshot


TimeZoneLike = Union[str, tzinfo]


def resolve_timezone(tz: TimeZoneLike) -> tzinfo:
    return ZoneInfo(tz) if isinstance(tz, str) else tz


def reconcile_windows(
    usage: UsageCounters,
    now: datetime,
    tz: TimeZoneLike = "UTC",
) -> UsageCounters:
    """
    Return counters valid at `now`.

    The daily count resets when the calendar date of `now` differs from the
    date of the last daily reset; the monthly count resets when the
    (year, month) differs. Dates are taken in `tz`. The input is not
    modified, and applying the function twice at the same instant gives
    the same result as applying it once.
    """
    zone = resolve_timezone(tz)
    local_now = now.astimezone(zone)
    updates: dict = {}

    if usage.last_daily_reset_at.astimezone(zone).date() != local_now.date():
        updates["daily_count"] = 0
        updates["last_daily_reset_at"] = now

    last_monthly = usage.last_monthly_reset_at.astimezone(zone)
    if (last_monthly.year, last_monthly.month) != (local_now.year, local_now.month):
        updates["monthly_count"] = 0
        updates["last_monthly_reset_at"] = now

    if not updates:
        return usage
    return usage.model_copy(update=updates)


def tier_for(user: User) -> Tier:
    return Tier.PREMIUM if user.is_premium else Tier.FREE


def limits_for(user: User, table: UsageLimitTable) -> UsageLimits:
    return table.for_tier(tier_for(user))


def compute_snapshot(
    usage: UsageCounters,
    limits: UsageLimits,
    tier: Tier,
    in_flight: int = 0,
) -> UsageSnapshot:
    """
    Build a snapshot from reconciled counters.

    `in_flight` admitted-but-unfinished requests count against the
    remaining quota.
    """
    daily_used = usage.daily_count + in_flight
    monthly_used = usage.monthly_count + in_flight
    return UsageSnapshot(
        can_make=daily_used < limits.daily and monthly_used < limits.monthly,
        daily_remaining=max(0, limits.daily - daily_used),
        monthly_remaining=max(0, limits.monthly - monthly_used),
        daily_used=usage.daily_count,
        monthly_used=usage.monthly_count,
        total_used=usage.total_count,
        limits=limits,
        tier=tier,
    )


def next_daily_reset(now: datetime, tz: TimeZoneLike = "UTC") -> datetime:
    """Start of the next calendar day in `tz`."""
    zone = resolve_timezone(tz)
    local_now = now.astimezone(zone)
    tomorrow = local_now.date() + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=zone)


def next_monthly_reset(now: datetime, tz: TimeZoneLike = "UTC") -> datetime:
    """Start of the next calendar month in `tz`."""
    zone = resolve_timezone(tz)
    local_now = now.astimezone(zone)
    month_start = datetime.combine(local_now.date().replace(day=1), time.min, tzinfo=zone)
    return month_start + relativedelta(months=1)
