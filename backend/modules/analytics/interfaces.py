"""
Analytics module interface.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import AnalyticsEvent, EventType


@runtime_checkable
class IAnalyticsService(Protocol):
    """
    Interface for product event tracking.

    track() must never raise: analytics is not allowed to fail a request.
    """

    async def track(
        self,
        user_id: Optional[str],
        event_type: EventType,
        properties: Optional[dict[str, Any]] = None,
    ) -> None:
        ...


@runtime_checkable
class IAnalyticsRepository(Protocol):
    """Storage for tracked events."""

    def insert(self, event: AnalyticsEvent) -> None:
        ...

    def list_for_user(self, user_id: str, limit: int = 100) -> list[AnalyticsEvent]:
        ...
