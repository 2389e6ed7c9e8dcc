"""
Usage gate implementation.

Admission and increment both run under the per-user lock. An admitted
request holds a reservation until it succeeds or fails; reservations count
against the remaining quota, so two concurrent requests by a user at
limit-1 cannot both be admitted.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from shared.locks import KeyedLock
from shared.models import User, utc_now
from modules.users.interfaces import IUserRepository
from modules.users.repository import update_user
from modules.users.exceptions import UserNotFoundError

from .models import (
    Admission,
    LimitWindow,
    Reservation,
    UsageLimitTable,
    UsageSnapshot,
    UsageStats,
    WindowUsage,
)
from .windows import (
    TimeZoneLike,
    compute_snapshot,
    limits_for,
    next_daily_reset,
    next_monthly_reset,
    reconcile_windows,
    tier_for,
)


logger = logging.getLogger(__name__)


class UsageGate:
    """
    Daily/monthly AI request quotas.

    Args:
        users: User storage (counters live on the user record)
        limits: Limit table by tier
        tz: Time zone whose calendar defines day and month boundaries
        locks: Per-user locks shared with the Session Manager
    """

    def __init__(
        self,
        users: IUserRepository,
        limits: Optional[UsageLimitTable] = None,
        tz: TimeZoneLike = "UTC",
        locks: Optional[KeyedLock] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._users = users
        self._limits = limits or UsageLimitTable()
        self._tz = tz
        self._locks = locks or KeyedLock()
        self._clock = clock or utc_now
        self._pending: dict[str, set[str]] = {}

    @property
    def limit_table(self) -> UsageLimitTable:
        return self._limits

    def in_flight(self, user_id: str) -> int:
        return len(self._pending.get(user_id, ()))

    def snapshot(self, user: User, now: datetime, in_flight: int = 0) -> UsageSnapshot:
        usage = reconcile_windows(user.usage, now, self._tz)
        return compute_snapshot(usage, limits_for(user, self._limits), tier_for(user), in_flight)

    async def check(self, user: User, now: Optional[datetime] = None) -> UsageSnapshot:
        return self.snapshot(user, now or self._clock())

    async def admit(self, user: User, now: Optional[datetime] = None) -> Admission:
        now = now or self._clock()
        async with self._locks.hold(user.id):
            current = self._users.get_by_id(user.id)
            if current is None:
                raise UserNotFoundError(user.id)

            snapshot = self.snapshot(current, now, self.in_flight(user.id))
            if not snapshot.can_make:
                exceeded = (
                    LimitWindow.DAILY if snapshot.daily_remaining == 0 else LimitWindow.MONTHLY
                )
                logger.info(
                    "Usage limit reached for user %s (%s window)", user.id, exceeded.value
                )
                return Admission(admitted=False, snapshot=snapshot, exceeded=exceeded)

            reservation = Reservation(id=uuid.uuid4().hex, user_id=user.id, created_at=now)
            self._pending.setdefault(user.id, set()).add(reservation.id)
            return Admission(admitted=True, snapshot=snapshot, reservation=reservation)

    async def record_success(
        self,
        reservation: Reservation,
        now: Optional[datetime] = None,
    ) -> UsageSnapshot:
        now = now or self._clock()

        def increment(user: User) -> None:
            usage = reconcile_windows(user.usage, now, self._tz)
            user.usage = usage.model_copy(
                update={
                    "daily_count": usage.daily_count + 1,
                    "monthly_count": usage.monthly_count + 1,
                    "total_count": usage.total_count + 1,
                    "last_request_at": now,
                }
            )

        async with self._locks.hold(reservation.user_id):
            try:
                updated = update_user(self._users, reservation.user_id, increment)
            finally:
                self._discard(reservation)
            return self.snapshot(updated, now, self.in_flight(reservation.user_id))

    async def release(self, reservation: Reservation) -> None:
        async with self._locks.hold(reservation.user_id):
            self._discard(reservation)

    async def get_stats(self, user: User, now: Optional[datetime] = None) -> UsageStats:
        now = now or self._clock()
        usage = reconcile_windows(user.usage, now, self._tz)
        limits = limits_for(user, self._limits)
        snapshot = compute_snapshot(usage, limits, tier_for(user), self.in_flight(user.id))
        return UsageStats(
            daily=WindowUsage(
                used=usage.daily_count,
                limit=limits.daily,
                remaining=snapshot.daily_remaining,
                resets_at=next_daily_reset(now, self._tz),
            ),
            monthly=WindowUsage(
                used=usage.monthly_count,
                limit=limits.monthly,
                remaining=snapshot.monthly_remaining,
                resets_at=next_monthly_reset(now, self._tz),
            ),
            total=usage.total_count,
            can_make_request=snapshot.can_make,
            tier=snapshot.tier,
            last_request_at=usage.last_request_at,
        )

    def _discard(self, reservation: Reservation) -> None:
        pending = self._pending.get(reservation.user_id)
        if pending is None:
            return
        pending.discard(reservation.id)
        if not pending:
            del self._pending[reservation.user_id]
