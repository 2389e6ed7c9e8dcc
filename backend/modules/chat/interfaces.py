"""
Chat module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import User

from .models import (
    AIStatus,
    ChatRequest,
    ChatResponse,
    Conversation,
    ConversationFilters,
    ConversationListResponse,
    ConversationStatus,
    ConversationSummary,
    UpdateConversationRequest,
)


@runtime_checkable
class IConversationRepository(Protocol):
    """Storage for conversations. Does not check ownership beyond user_id filters."""

    def get(self, conversation_id: str, user_id: str) -> Optional[Conversation]:
        """Get a user's conversation in any status."""
        ...

    def save(self, conversation: Conversation) -> Conversation:
        ...

    def list_for_user(
        self,
        user_id: str,
        filters: ConversationFilters,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Conversation], int]:
        """Return one page, most recent activity first, and the total match count."""
        ...

    def set_status_for_user(
        self,
        user_id: str,
        from_status: ConversationStatus,
        to_status: ConversationStatus,
    ) -> int:
        """Move every conversation of the user in `from_status`; returns how many moved."""
        ...


@runtime_checkable
class IChatService(Protocol):
    """
    Interface for chat operations.

    send_message() is the only operation that consumes AI quota.
    """

    async def send_message(self, user: User, request: ChatRequest) -> ChatResponse:
        """
        Send a message and get the assistant's reply.

        Raises:
            InvalidInputError: Empty or oversize message
            UsageLimitExceededError: Quota exhausted
            ConversationNotFoundError: Unknown conversation_id
            ProviderError: Retryable provider failure
            AIGenerationError: Fatal provider failure
        """
        ...

    async def list_conversations(
        self,
        user: User,
        filters: ConversationFilters,
        page: int = 1,
        limit: int = 20,
    ) -> ConversationListResponse:
        ...

    async def get_conversation(self, user: User, conversation_id: str) -> Conversation:
        ...

    async def update_conversation(
        self,
        user: User,
        conversation_id: str,
        request: UpdateConversationRequest,
    ) -> ConversationSummary:
        ...

    async def delete_conversation(self, user: User, conversation_id: str) -> None:
        ...

    async def archive_conversation(self, user: User, conversation_id: str) -> ConversationSummary:
        ...

    async def clear_conversations(self, user: User) -> int:
        ...

    def status(self) -> AIStatus:
        ...
