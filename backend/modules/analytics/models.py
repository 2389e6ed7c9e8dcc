"""
Analytics module data models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from shared.models import utc_now


class EventType(str, Enum):
    """Tracked product events."""

    USER_REGISTERED = "user_registered"
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    PASSWORD_CHANGED = "password_changed"
    ACCOUNT_DELETED = "account_deleted"
    AI_MESSAGE_SENT = "ai_message_sent"
    AI_RESPONSE_RECEIVED = "ai_response_received"
    AI_ERROR = "ai_error"
    USAGE_LIMIT_REACHED = "usage_limit_reached"
    CONVERSATION_CREATED = "conversation_created"
    CONVERSATION_DELETED = "conversation_deleted"


class AnalyticsEvent(BaseModel):
    """A single tracked event."""

    id: str
    user_id: Optional[str] = None
    event_type: EventType
    properties: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
