"""
Chat service implementation.

Runs a chat request end to end: validate the message, ask the usage gate
for admission, generate the reply, then meter the request and store the
conversation. Quota is consumed only when the provider succeeds; on
failure the user's message is still stored.
"""

import logging
import math
import uuid
from datetime import datetime
from typing import Any, Callable, Optional

from shared.models import User, utc_now
from modules.usage.interfaces import IUsageGate
from modules.usage.exceptions import UsageLimitExceededError
from modules.usage.models import UsageStats
from modules.analytics.interfaces import IAnalyticsService
from modules.analytics.models import EventType
from providers.exceptions import ProviderError

from .exceptions import AIGenerationError, ConversationNotFoundError
from .interfaces import IChatService, IConversationRepository
from .models import (
    AIStatus,
    ChatMetadata,
    ChatRequest,
    ChatResponse,
    ChatUsage,
    Conversation,
    ConversationFilters,
    ConversationListResponse,
    ConversationRef,
    ConversationStatus,
    ConversationSummary,
    Pagination,
    UpdateConversationRequest,
)
from .pipeline import ResponsePipeline


logger = logging.getLogger(__name__)


class ChatService(IChatService):
    """
    Chat orchestration over the usage gate and response pipeline.

    Args:
        conversations: Conversation storage
        usage: Usage gate
        pipeline: AI response pipeline
        analytics: Optional event tracker
    """

    def __init__(
        self,
        conversations: IConversationRepository,
        usage: IUsageGate,
        pipeline: ResponsePipeline,
        analytics: Optional[IAnalyticsService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._conversations = conversations
        self._usage = usage
        self._pipeline = pipeline
        self._analytics = analytics
        self._clock = clock or utc_now

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    async def send_message(self, user: User, request: ChatRequest) -> ChatResponse:
        message = self._pipeline.validate_message(request.message)
        now = self._clock()

        admission = await self._usage.admit(user, now)
        if not admission.admitted:
            await self._track(
                user.id,
                EventType.USAGE_LIMIT_REACHED,
                {"window": admission.exceeded.value if admission.exceeded else None},
            )
            raise UsageLimitExceededError(admission)
        reservation = admission.reservation

        recorded = False
        try:
            conversation = await self._open_conversation(user, request, now)
            history = list(conversation.messages)
            conversation.add_message("user", message, now=now)
            await self._track(
                user.id,
                EventType.AI_MESSAGE_SENT,
                {"conversation_id": conversation.id, "message_length": len(message)},
            )

            try:
                reply = await self._pipeline.generate_response(
                    message,
                    history,
                    request.personality or conversation.personality,
                )
            except ProviderError as e:
                self._keep_user_message(conversation)
                await self._track(
                    user.id,
                    EventType.AI_ERROR,
                    {"conversation_id": conversation.id, "code": e.code, "retryable": e.retryable},
                )
                if e.retryable:
                    logger.warning("AI provider failed for user %s (%s), retryable", user.id, e.code)
                    raise
                logger.error("AI generation failed for user %s: %s", user.id, e.code)
                raise AIGenerationError(e, conversation.id) from e
            except BaseException:
                self._keep_user_message(conversation)
                raise

            snapshot = await self._usage.record_success(reservation, self._clock())
            recorded = True
        finally:
            # Quota is only consumed by record_success; anything else frees the slot
            if not recorded:
                await self._usage.release(reservation)

        assistant = conversation.add_message(
            "assistant", reply.text, reply.token_usage.total, now=self._clock()
        )
        conversation.model = reply.model
        saved = self._conversations.save(conversation)

        await self._track(
            user.id,
            EventType.AI_RESPONSE_RECEIVED,
            {
                "conversation_id": saved.id,
                "tokens": reply.token_usage.total,
                "processing_time_ms": reply.processing_time_ms,
            },
        )
        logger.debug("AI response generated for user %s", user.id)

        return ChatResponse(
            message=assistant,
            conversation=ConversationRef(
                id=saved.id,
                title=saved.title,
                message_count=saved.message_count,
            ),
            usage=ChatUsage(
                tokens=reply.token_usage,
                daily_remaining=snapshot.daily_remaining,
                monthly_remaining=snapshot.monthly_remaining,
                limits=snapshot.limits,
            ),
            metadata=ChatMetadata(
                model=reply.model,
                processing_time_ms=reply.processing_time_ms,
                is_mock=reply.is_mock,
            ),
        )

    def status(self) -> AIStatus:
        return self._pipeline.status()

    async def usage_stats(self, user: User) -> UsageStats:
        return await self._usage.get_stats(user, self._clock())

    # -------------------------------------------------------------------------
    # Conversations
    # -------------------------------------------------------------------------

    async def list_conversations(
        self,
        user: User,
        filters: ConversationFilters,
        page: int = 1,
        limit: int = 20,
    ) -> ConversationListResponse:
        conversations, total = self._conversations.list_for_user(user.id, filters, page, limit)
        return ConversationListResponse(
            conversations=[c.summary() for c in conversations],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if limit else 0,
            ),
        )

    async def get_conversation(self, user: User, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id, user.id)
        if conversation is None or conversation.status == ConversationStatus.DELETED:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def update_conversation(
        self,
        user: User,
        conversation_id: str,
        request: UpdateConversationRequest,
    ) -> ConversationSummary:
        conversation = await self.get_conversation(user, conversation_id)
        if request.title is not None:
            conversation.title = request.title.strip()
        if request.is_starred is not None:
            conversation.is_starred = request.is_starred
        if request.category is not None:
            conversation.category = request.category
        return self._conversations.save(conversation).summary()

    async def delete_conversation(self, user: User, conversation_id: str) -> None:
        conversation = await self.get_conversation(user, conversation_id)
        conversation.status = ConversationStatus.DELETED
        self._conversations.save(conversation)
        await self._track(
            user.id, EventType.CONVERSATION_DELETED, {"conversation_id": conversation_id}
        )

    async def archive_conversation(self, user: User, conversation_id: str) -> ConversationSummary:
        conversation = await self.get_conversation(user, conversation_id)
        conversation.status = ConversationStatus.ARCHIVED
        return self._conversations.save(conversation).summary()

    async def clear_conversations(self, user: User) -> int:
        return self._conversations.set_status_for_user(
            user.id, ConversationStatus.ACTIVE, ConversationStatus.DELETED
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _open_conversation(
        self,
        user: User,
        request: ChatRequest,
        now: datetime,
    ) -> Conversation:
        if request.conversation_id:
            conversation = self._conversations.get(request.conversation_id, user.id)
            if conversation is None or conversation.status != ConversationStatus.ACTIVE:
                raise ConversationNotFoundError(request.conversation_id)
            return conversation

        conversation = Conversation(
            id=str(uuid.uuid4()),
            user_id=user.id,
            personality=request.personality or user.preferences.ai_personality,
            last_message_at=now,
            created_at=now,
            updated_at=now,
        )
        await self._track(
            user.id, EventType.CONVERSATION_CREATED, {"conversation_id": conversation.id}
        )
        return conversation

    def _keep_user_message(self, conversation: Conversation) -> None:
        """Store the conversation after a failed generation; the original error wins."""
        try:
            self._conversations.save(conversation)
        except Exception:
            logger.exception("Failed to store message for conversation %s", conversation.id)

    async def _track(
        self,
        user_id: str,
        event: EventType,
        properties: Optional[dict[str, Any]] = None,
    ) -> None:
        if self._analytics is not None:
            await self._analytics.track(user_id, event, properties)
