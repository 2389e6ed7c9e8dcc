"""
Usage module exceptions.
"""

from shared.exceptions import LumenError

from .models import Admission, LimitWindow


class UsageError(LumenError):
    """Base exception for usage-related errors."""

    pass


class UsageLimitExceededError(UsageError):
    """
    Raised at the API boundary when the gate denies a request.

    Carries the remaining quota so clients can tell the user when they
    can try again.
    """

    def __init__(self, admission: Admission):
        window = admission.exceeded or LimitWindow.DAILY
        snapshot = admission.snapshot
        super().__init__(
            f"{window.value.capitalize()} AI request limit reached. "
            f"Upgrade to premium for more requests.",
            code="USAGE_LIMIT_EXCEEDED",
            details={
                "window": window.value,
                "daily_remaining": snapshot.daily_remaining,
                "monthly_remaining": snapshot.monthly_remaining,
                "limits": {
                    "daily": snapshot.limits.daily,
                    "monthly": snapshot.limits.monthly,
                },
                "tier": snapshot.tier.value,
            },
        )
        self.admission = admission
        self.window = window
