"""
Analytics event storage.
"""

from typing import Any

from shared.repository import BaseRepository

from .models import AnalyticsEvent


EVENTS_TABLE = "analytics_events"


class InMemoryAnalyticsRepository:
    """Keeps events in a list (development and tests)."""

    def __init__(self) -> None:
        self._events: list[AnalyticsEvent] = []

    def insert(self, event: AnalyticsEvent) -> None:
        self._events.append(event)

    def list_for_user(self, user_id: str, limit: int = 100) -> list[AnalyticsEvent]:
        events = [e for e in self._events if e.user_id == user_id]
        return list(reversed(events))[:limit]

    @property
    def events(self) -> list[AnalyticsEvent]:
        return list(self._events)


class SupabaseAnalyticsRepository(BaseRepository[AnalyticsEvent]):
    """Repository for the `analytics_events` table."""

    def insert(self, event: AnalyticsEvent) -> None:
        self._db.table(EVENTS_TABLE).insert(event.model_dump(mode="json")).execute()

    def list_for_user(self, user_id: str, limit: int = 100) -> list[AnalyticsEvent]:
        result = (
            self._db.table(EVENTS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [self._map_to_event(row) for row in result.data or []]

    @staticmethod
    def _map_to_event(data: dict[str, Any]) -> AnalyticsEvent:
        return AnalyticsEvent.model_validate(data)
