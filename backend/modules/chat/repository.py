"""
Conversation repositories.

Encapsulates storage for the `conversations` table. Messages are kept
inline as a jsonb array.
"""

from typing import Any, Optional

from shared.models import utc_now
from shared.repository import BaseRepository

from .models import Conversation, ConversationFilters, ConversationStatus


CONVERSATIONS_TABLE = "conversations"


def _matches(conversation: Conversation, filters: ConversationFilters) -> bool:
    if conversation.status != filters.status:
        return False
    if filters.is_starred is not None and conversation.is_starred != filters.is_starred:
        return False
    if filters.category is not None and conversation.category != filters.category:
        return False
    if filters.search:
        needle = filters.search.lower()
        in_title = needle in conversation.title.lower()
        in_messages = any(needle in m.content.lower() for m in conversation.messages)
        if not (in_title or in_messages):
            return False
    return True


class InMemoryConversationRepository:
    """Conversation storage backed by a dict (development and tests)."""

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}

    def get(self, conversation_id: str, user_id: str) -> Optional[Conversation]:
        conversation = self._conversations.get(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            return None
        return conversation.model_copy(deep=True)

    def save(self, conversation: Conversation) -> Conversation:
        stored = conversation.model_copy(update={"updated_at": utc_now()}, deep=True)
        self._conversations[stored.id] = stored
        return stored.model_copy(deep=True)

    def list_for_user(
        self,
        user_id: str,
        filters: ConversationFilters,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Conversation], int]:
        matching = [
            c
            for c in self._conversations.values()
            if c.user_id == user_id and _matches(c, filters)
        ]
        matching.sort(key=lambda c: c.last_message_at, reverse=True)
        start = (page - 1) * limit
        page_items = [c.model_copy(deep=True) for c in matching[start : start + limit]]
        return page_items, len(matching)

    def set_status_for_user(
        self,
        user_id: str,
        from_status: ConversationStatus,
        to_status: ConversationStatus,
    ) -> int:
        moved = 0
        for conversation in self._conversations.values():
            if conversation.user_id == user_id and conversation.status == from_status:
                conversation.status = to_status
                conversation.updated_at = utc_now()
                moved += 1
        return moved


class SupabaseConversationRepository(BaseRepository[Conversation]):
    """
    Repository for the `conversations` table.

    Note: search matches titles only; message bodies live in jsonb and are
    not searched server-side.
    """

    def get(self, conversation_id: str, user_id: str) -> Optional[Conversation]:
        result = (
            self._db.table(CONVERSATIONS_TABLE)
            .select("*")
            .eq("id", conversation_id)
            .eq("user_id", user_id)
            .execute()
        )
        row = self._first(result)
        return self._map_to_conversation(row) if row else None

    def save(self, conversation: Conversation) -> Conversation:
        data = self._to_row(conversation.model_copy(update={"updated_at": utc_now()}))
        result = self._db.table(CONVERSATIONS_TABLE).upsert(data).execute()
        return self._map_to_conversation(result.data[0])

    def list_for_user(
        self,
        user_id: str,
        filters: ConversationFilters,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Conversation], int]:
        query = (
            self._db.table(CONVERSATIONS_TABLE)
            .select("*", count="exact")
            .eq("user_id", user_id)
            .eq("status", filters.status.value)
        )
        if filters.is_starred is not None:
            query = query.eq("is_starred", filters.is_starred)
        if filters.category is not None:
            query = query.eq("category", filters.category.value)
        if filters.search:
            query = query.ilike("title", f"%{filters.search}%")

        start = (page - 1) * limit
        result = (
            query.order("last_message_at", desc=True)
            .range(start, start + limit - 1)
            .execute()
        )
        conversations = [self._map_to_conversation(row) for row in result.data or []]
        total = result.count if result.count is not None else len(conversations)
        return conversations, total

    def set_status_for_user(
        self,
        user_id: str,
        from_status: ConversationStatus,
        to_status: ConversationStatus,
    ) -> int:
        result = (
            self._db.table(CONVERSATIONS_TABLE)
            .update({"status": to_status.value, "updated_at": utc_now().isoformat()})
            .eq("user_id", user_id)
            .eq("status", from_status.value)
            .execute()
        )
        return len(result.data or [])

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_row(conversation: Conversation) -> dict[str, Any]:
        return conversation.model_dump(mode="json")

    @staticmethod
    def _map_to_conversation(data: dict[str, Any]) -> Conversation:
        return Conversation.model_validate(data)
