"""
Analytics module.

Best-effort product event tracking.

Public API:
- IAnalyticsService: Interface for tracking events
- AnalyticsService: Implementation (never raises from track())
- EventType, AnalyticsEvent: Models
"""

from .interfaces import IAnalyticsService, IAnalyticsRepository
from .models import AnalyticsEvent, EventType
from .service import AnalyticsService
from .repository import InMemoryAnalyticsRepository, SupabaseAnalyticsRepository

__all__ = [
    "IAnalyticsService",
    "IAnalyticsRepository",
    "AnalyticsEvent",
    "EventType",
    "AnalyticsService",
    "InMemoryAnalyticsRepository",
    "SupabaseAnalyticsRepository",
]
