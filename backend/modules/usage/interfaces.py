"""
Usage module interface.

The chat module depends on IUsageGate, not the concrete implementation.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from shared.models import User

from .models import Admission, Reservation, UsageSnapshot, UsageStats


@runtime_checkable
class IUsageGate(Protocol):
    """
    Interface for AI request quotas.

    A request is admitted with admit(), and then either completed with
    record_success() or abandoned with release(). Only record_success()
    consumes quota.
    """

    async def check(self, user: User, now: Optional[datetime] = None) -> UsageSnapshot:
        """Read-only quota snapshot at `now`."""
        ...

    async def admit(self, user: User, now: Optional[datetime] = None) -> Admission:
        """
        Decide whether the user may make one more AI request.

        Returns:
            Admission with a reservation when admitted, or the exhausted
            window and remaining quota when denied
        """
        ...

    async def record_success(
        self,
        reservation: Reservation,
        now: Optional[datetime] = None,
    ) -> UsageSnapshot:
        """Consume one request of quota for a completed AI call."""
        ...

    async def release(self, reservation: Reservation) -> None:
        """Abandon an admitted request without consuming quota."""
        ...

    async def get_stats(self, user: User, now: Optional[datetime] = None) -> UsageStats:
        """Usage statistics for display."""
        ...
