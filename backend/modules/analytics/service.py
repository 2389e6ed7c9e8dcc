"""
Analytics service implementation.

Records product events. Tracking is best-effort: storage failures are
logged and swallowed so they never affect the request that triggered them.
"""

import logging
import uuid
from typing import Any, Optional

from .interfaces import IAnalyticsRepository, IAnalyticsService
from .models import AnalyticsEvent, EventType


logger = logging.getLogger(__name__)


class AnalyticsService(IAnalyticsService):
    """Stores events through an analytics repository."""

    def __init__(self, repository: IAnalyticsRepository, enabled: bool = True):
        self._repository = repository
        self._enabled = enabled

    async def track(
        self,
        user_id: Optional[str],
        event_type: EventType,
        properties: Optional[dict[str, Any]] = None,
    ) -> None:
        if not self._enabled:
            return
        try:
            event = AnalyticsEvent(
                id=str(uuid.uuid4()),
                user_id=user_id,
                event_type=event_type,
                properties=properties or {},
            )
            self._repository.insert(event)
        except Exception:
            logger.exception("Failed to track analytics event %s", event_type.value)
