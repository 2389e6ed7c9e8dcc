"""
Chat module data models.

Conversations, their messages and the request/response bodies of the
/ai endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import Field, field_validator

from shared.models import CamelModel, Personality, utc_now
from modules.usage.models import UsageLimits


DEFAULT_TITLE = "New Conversation"
TITLE_LENGTH = 50
PREVIEW_LENGTH = 100

MessageRole = Literal["user", "assistant", "system"]


def truncate(text: str, length: int) -> str:
    return text[:length] + ("..." if len(text) > length else "")


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class ConversationCategory(str, Enum):
    GENERAL = "general"
    CODING = "coding"
    WRITING = "writing"
    ANALYSIS = "analysis"
    CREATIVE = "creative"
    OTHER = "other"


class ChatMessage(CamelModel):
    """A stored conversation turn."""

    role: MessageRole
    content: str
    tokens: int = 0
    timestamp: datetime = Field(default_factory=utc_now)


class Conversation(CamelModel):
    """
    A user's conversation with the assistant.

    The title is derived from the first user message until it is renamed.
    """

    id: str
    user_id: str
    title: str = Field(default=DEFAULT_TITLE, max_length=200)
    messages: list[ChatMessage] = Field(default_factory=list)
    personality: Personality = Personality.FRIENDLY
    category: ConversationCategory = ConversationCategory.GENERAL
    model: Optional[str] = None
    total_tokens: int = 0
    status: ConversationStatus = ConversationStatus.ACTIVE
    is_starred: bool = False
    last_message_at: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def last_message_preview(self) -> str:
        if not self.messages:
            return ""
        return truncate(self.messages[-1].content, PREVIEW_LENGTH)

    def add_message(
        self,
        role: MessageRole,
        content: str,
        tokens: int = 0,
        now: Optional[datetime] = None,
    ) -> ChatMessage:
        now = now or utc_now()
        message = ChatMessage(role=role, content=content, tokens=tokens, timestamp=now)
        self.messages.append(message)
        self.total_tokens += tokens
        self.last_message_at = now
        self.updated_at = now
        if role == "user" and self.title == DEFAULT_TITLE:
            self.title = truncate(content, TITLE_LENGTH)
        return message

    def summary(self) -> "ConversationSummary":
        return ConversationSummary(
            id=self.id,
            title=self.title,
            message_count=self.message_count,
            last_message_preview=self.last_message_preview,
            last_message_at=self.last_message_at,
            personality=self.personality,
            category=self.category,
            status=self.status,
            is_starred=self.is_starred,
            created_at=self.created_at,
        )


class ConversationSummary(CamelModel):
    """Conversation listing entry, without messages."""

    id: str
    title: str
    message_count: int
    last_message_preview: str
    last_message_at: datetime
    personality: Personality
    category: ConversationCategory
    status: ConversationStatus
    is_starred: bool
    created_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class ConversationListResponse(CamelModel):
    conversations: list[ConversationSummary]
    pagination: Pagination


class ConversationFilters(CamelModel):
    """Query filters for listing conversations."""

    status: ConversationStatus = ConversationStatus.ACTIVE
    is_starred: Optional[bool] = None
    category: Optional[ConversationCategory] = None
    search: Optional[str] = None


# -----------------------------------------------------------------------------
# Chat request / response
# -----------------------------------------------------------------------------


class ChatRequest(CamelModel):
    """
    Body of POST /ai/chat.

    The message is validated by the response pipeline, not here, so that
    empty and oversize messages both surface as INVALID_INPUT.
    """

    message: str
    conversation_id: Optional[str] = None
    personality: Optional[Personality] = None

    @field_validator("personality", mode="before")
    @classmethod
    def unknown_personality_is_default(cls, value: object) -> object:
        if isinstance(value, str) and value not in {p.value for p in Personality}:
            return None
        return value


class TokenUsage(CamelModel):
    prompt: int
    completion: int
    total: int


class ConversationRef(CamelModel):
    id: str
    title: str
    message_count: int


class ChatUsage(CamelModel):
    tokens: TokenUsage
    daily_remaining: int
    monthly_remaining: int
    limits: UsageLimits


class ChatMetadata(CamelModel):
    model: str
    processing_time_ms: int
    is_mock: bool


class ChatResponse(CamelModel):
    message: ChatMessage
    conversation: ConversationRef
    usage: ChatUsage
    metadata: ChatMetadata


class UpdateConversationRequest(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    is_starred: Optional[bool] = None
    category: Optional[ConversationCategory] = None


class AIStatus(CamelModel):
    available: bool
    provider: str
    model: str
    configured: bool
