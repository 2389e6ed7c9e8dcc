"""Tests for the chat service."""

import asyncio

import pytest

from shared.models import Personality, UserPreferences
from providers.base import ChatProvider, CompletionRequest, ProviderResult
from providers.exceptions import (
    ProviderAuthError,
    ProviderRateLimitedError,
    ProviderUnavailableError,
)
from providers.mock import MockProvider
from modules.analytics.models import EventType
from modules.chat.exceptions import (
    AIGenerationError,
    ConversationNotFoundError,
    InvalidInputError,
)
from modules.chat.interfaces import IChatService
from modules.chat.models import (
    ChatRequest,
    ConversationFilters,
    ConversationStatus,
    UpdateConversationRequest,
)
from modules.chat.pipeline import ResponsePipeline
from modules.chat.repository import InMemoryConversationRepository
from modules.chat.service import ChatService
from modules.usage.exceptions import UsageLimitExceededError


class ScriptedProvider(ChatProvider):
    """Provider double that either answers or raises, and counts calls."""

    name = "scripted"

    def __init__(self, error: BaseException | None = None, text: str = "Here you go."):
        self.error = error
        self.text = text
        self.requests: list[CompletionRequest] = []

    @property
    def model(self) -> str:
        return "scripted-model"

    async def complete(self, request: CompletionRequest) -> ProviderResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return ProviderResult(
            text=self.text,
            prompt_tokens=10,
            completion_tokens=5,
            total_tokens=15,
            model=self.model,
        )



class FailingConversationRepository(InMemoryConversationRepository):
    """Conversation storage whose `get` or `save` always raises."""

    def __init__(self, fail_on: str):
        super().__init__()
        self.fail_on = fail_on

    def get(self, conversation_id, user_id):
        if self.fail_on == "get":
            raise RuntimeError("storage unavailable")
        return super().get(conversation_id, user_id)

    def save(self, conversation):
        if self.fail_on == "save":
            raise RuntimeError("storage unavailable")
        return super().save(conversation)

@pytest.fixture
def conversations():
    return InMemoryConversationRepository()


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def service(conversations, usage_gate, provider, analytics, clock):
    return ChatService(
        conversations=conversations,
        usage=usage_gate,
        pipeline=ResponsePipeline(provider),
        analytics=analytics,
        clock=clock,
    )


def _all_conversations(conversations, user_id, status=ConversationStatus.ACTIVE):
    items, _ = conversations.list_for_user(user_id, ConversationFilters(status=status))
    return items


class TestSendMessage:
    def test_implements_interface(self, service):
        assert isinstance(service, IChatService)

    @pytest.mark.asyncio
    async def test_new_conversation(self, service, conversations, users, make_user):
        user = make_user()

        response = await service.send_message(user, ChatRequest(message="  Explain recursion  "))

        assert response.message.role == "assistant"
        assert response.message.content == "Here you go."
        assert response.conversation.title == "Explain recursion"
        assert response.conversation.message_count == 2
        assert response.usage.tokens.total == 15
        assert response.usage.daily_remaining == 9
        assert response.usage.monthly_remaining == 99
        assert response.metadata.model == "scripted-model"
        assert response.metadata.is_mock is False

        stored = conversations.get(response.conversation.id, user.id)
        assert [(m.role, m.content) for m in stored.messages] == [
            ("user", "Explain recursion"),
            ("assistant", "Here you go."),
        ]
        assert stored.total_tokens == 15
        assert users.get_by_id(user.id).usage.daily_count == 1

    @pytest.mark.asyncio
    async def test_continues_conversation_with_history(self, service, provider, make_user):
        user = make_user()
        first = await service.send_message(user, ChatRequest(message="First"))

        await service.send_message(
            user, ChatRequest(message="Second", conversation_id=first.conversation.id)
        )

        prompt = provider.requests[-1].messages
        assert [(m.role, m.content) for m in prompt[1:]] == [
            ("user", "First"),
            ("assistant", "Here you go."),
            ("user", "Second"),
        ]

    @pytest.mark.asyncio
    async def test_personality_from_preferences(self, service, provider, make_user):
        user = make_user(preferences=UserPreferences(ai_personality=Personality.CONCISE))
        await service.send_message(user, ChatRequest(message="Hi"))
        assert provider.requests[0].personality == Personality.CONCISE

    @pytest.mark.asyncio
    async def test_request_personality_wins(self, service, provider, make_user):
        user = make_user(preferences=UserPreferences(ai_personality=Personality.CONCISE))
        await service.send_message(
            user, ChatRequest(message="Hi", personality=Personality.PROFESSIONAL)
        )
        assert provider.requests[0].personality == Personality.PROFESSIONAL

    @pytest.mark.asyncio
    async def test_tracks_events(self, service, make_user, analytics_repository):
        user = make_user()
        await service.send_message(user, ChatRequest(message="Hi"))
        assert [e.event_type for e in analytics_repository.events] == [
            EventType.CONVERSATION_CREATED,
            EventType.AI_MESSAGE_SENT,
            EventType.AI_RESPONSE_RECEIVED,
        ]

    # ----- validation -----

    @pytest.mark.asyncio
    async def test_oversize_message(self, service, provider, users, usage_gate, conversations, make_user):
        """An oversize message is rejected before any quota or provider use."""
        user = make_user(daily_count=3)

        with pytest.raises(InvalidInputError) as exc_info:
            await service.send_message(user, ChatRequest(message="x" * 10_001))

        assert exc_info.value.code == "INVALID_INPUT"
        assert provider.requests == []
        assert users.get_by_id(user.id).usage.daily_count == 3
        assert usage_gate.in_flight(user.id) == 0
        assert _all_conversations(conversations, user.id) == []

    @pytest.mark.asyncio
    async def test_blank_message(self, service, provider, make_user):
        with pytest.raises(InvalidInputError):
            await service.send_message(make_user(), ChatRequest(message="   "))
        assert provider.requests == []

    # ----- quota -----

    @pytest.mark.asyncio
    async def test_last_request_then_limit(self, service, provider, users, make_user, analytics_repository):
        user = make_user(daily_count=9)

        response = await service.send_message(user, ChatRequest(message="One more"))
        assert response.usage.daily_remaining == 0

        with pytest.raises(UsageLimitExceededError) as exc_info:
            await service.send_message(user, ChatRequest(message="And another"))

        assert exc_info.value.details["window"] == "daily"
        assert exc_info.value.details["daily_remaining"] == 0
        assert len(provider.requests) == 1
        assert users.get_by_id(user.id).usage.daily_count == 10
        assert analytics_repository.events[-1].event_type == EventType.USAGE_LIMIT_REACHED

    # ----- provider failures -----

    @pytest.mark.asyncio
    async def test_rate_limited(self, conversations, usage_gate, users, make_user, clock):
        """A throttled provider leaves quota untouched and the user's message stored."""
        service = ChatService(
            conversations,
            usage_gate,
            ResponsePipeline(ScriptedProvider(error=ProviderRateLimitedError("scripted"))),
            clock=clock,
        )
        user = make_user(daily_count=5)

        with pytest.raises(ProviderRateLimitedError) as exc_info:
            await service.send_message(user, ChatRequest(message="Are you there?"))

        assert exc_info.value.retryable is True
        assert users.get_by_id(user.id).usage.daily_count == 5
        assert usage_gate.in_flight(user.id) == 0
        [stored] = _all_conversations(conversations, user.id)
        assert [(m.role, m.content) for m in stored.messages] == [("user", "Are you there?")]

    @pytest.mark.asyncio
    async def test_unavailable_is_retryable(self, conversations, usage_gate, users, make_user, clock):
        service = ChatService(
            conversations,
            usage_gate,
            ResponsePipeline(ScriptedProvider(error=ProviderUnavailableError("scripted"))),
            clock=clock,
        )
        user = make_user()

        with pytest.raises(ProviderUnavailableError):
            await service.send_message(user, ChatRequest(message="Hi"))
        assert users.get_by_id(user.id).usage.daily_count == 0

    @pytest.mark.asyncio
    async def test_auth_failure_is_fatal(
        self, conversations, usage_gate, users, make_user, clock, analytics, analytics_repository
    ):
        service = ChatService(
            conversations,
            usage_gate,
            ResponsePipeline(ScriptedProvider(error=ProviderAuthError("scripted"))),
            analytics=analytics,
            clock=clock,
        )
        user = make_user()

        with pytest.raises(AIGenerationError) as exc_info:
            await service.send_message(user, ChatRequest(message="Hi"))

        error = exc_info.value
        assert error.code == "AI_ERROR"
        assert error.details["reason"] == "AUTH_FAILURE"
        assert error.details["retryable"] is False
        assert users.get_by_id(user.id).usage.daily_count == 0
        [stored] = _all_conversations(conversations, user.id)
        assert error.details["conversation_id"] == stored.id
        assert stored.message_count == 1
        ai_errors = [e for e in analytics_repository.events if e.event_type == EventType.AI_ERROR]
        assert ai_errors[0].properties["code"] == "AUTH_FAILURE"

    @pytest.mark.asyncio
    async def test_failure_in_existing_conversation_appends_message(
        self, conversations, usage_gate, make_user, clock
    ):
        provider = ScriptedProvider()
        service = ChatService(conversations, usage_gate, ResponsePipeline(provider), clock=clock)
        user = make_user()
        first = await service.send_message(user, ChatRequest(message="First"))

        provider.error = ProviderRateLimitedError("scripted")
        with pytest.raises(ProviderRateLimitedError):
            await service.send_message(
                user, ChatRequest(message="Second", conversation_id=first.conversation.id)
            )

        stored = conversations.get(first.conversation.id, user.id)
        assert [m.content for m in stored.messages] == ["First", "Here you go.", "Second"]

    @pytest.mark.asyncio
    async def test_unknown_conversation_releases_quota(self, service, usage_gate, users, make_user):
        user = make_user()
        with pytest.raises(ConversationNotFoundError):
            await service.send_message(user, ChatRequest(message="Hi", conversation_id="missing"))
        assert usage_gate.in_flight(user.id) == 0
        assert users.get_by_id(user.id).usage.daily_count == 0

    @pytest.mark.asyncio
    async def test_cannot_post_to_archived_conversation(self, service, make_user):
        user = make_user()
        first = await service.send_message(user, ChatRequest(message="Hi"))
        await service.archive_conversation(user, first.conversation.id)

        with pytest.raises(ConversationNotFoundError):
            await service.send_message(
                user, ChatRequest(message="Again", conversation_id=first.conversation.id)
            )

    @pytest.mark.asyncio
    async def test_with_mock_provider(self, conversations, usage_gate, users, make_user, clock):
        service = ChatService(
            conversations, usage_gate, ResponsePipeline(MockProvider()), clock=clock
        )
        user = make_user()

        response = await service.send_message(user, ChatRequest(message="Hello"))

        assert response.metadata.is_mock is True
        assert response.metadata.model == "mock-model"
        assert users.get_by_id(user.id).usage.daily_count == 1

    # ----- reservation bookkeeping -----

    @pytest.mark.asyncio
    async def test_storage_failure_releases_reservation(self, usage_gate, users, make_user, clock):
        """Repeated storage errors never lock the user out."""
        service = ChatService(
            FailingConversationRepository(fail_on="get"),
            usage_gate,
            ResponsePipeline(ScriptedProvider()),
            clock=clock,
        )
        user = make_user()

        for _ in range(10):
            with pytest.raises(RuntimeError):
                await service.send_message(
                    user, ChatRequest(message="Hi", conversation_id="conv-1")
                )

        assert usage_gate.in_flight(user.id) == 0
        assert users.get_by_id(user.id).usage.daily_count == 0
        assert (await usage_gate.admit(user)).admitted is True

    @pytest.mark.asyncio
    async def test_save_failure_after_provider_error_releases_reservation(
        self, usage_gate, users, make_user, clock
    ):
        service = ChatService(
            FailingConversationRepository(fail_on="save"),
            usage_gate,
            ResponsePipeline(ScriptedProvider(error=ProviderRateLimitedError("scripted"))),
            clock=clock,
        )
        user = make_user()

        with pytest.raises(ProviderRateLimitedError):
            await service.send_message(user, ChatRequest(message="Hi"))

        assert usage_gate.in_flight(user.id) == 0
        assert users.get_by_id(user.id).usage.daily_count == 0

    @pytest.mark.asyncio
    async def test_cancelled_generation_keeps_message_and_quota(
        self, conversations, usage_gate, users, make_user, clock
    ):
        service = ChatService(
            conversations,
            usage_gate,
            ResponsePipeline(ScriptedProvider(error=asyncio.CancelledError())),
            clock=clock,
        )
        user = make_user()

        with pytest.raises(asyncio.CancelledError):
            await service.send_message(user, ChatRequest(message="Still there?"))

        assert usage_gate.in_flight(user.id) == 0
        assert users.get_by_id(user.id).usage.daily_count == 0
        [stored] = _all_conversations(conversations, user.id)
        assert [m.content for m in stored.messages] == ["Still there?"]


class TestConversations:
    @pytest.mark.asyncio
    async def test_list_and_paginate(self, service, make_user):
        user = make_user()
        for i in range(3):
            await service.send_message(user, ChatRequest(message=f"Topic {i}"))

        page = await service.list_conversations(user, ConversationFilters(), page=1, limit=2)

        assert page.pagination.total == 3
        assert page.pagination.pages == 2
        assert len(page.conversations) == 2

    @pytest.mark.asyncio
    async def test_other_users_conversation_is_not_found(self, service, make_user):
        owner = make_user()
        other = make_user()
        response = await service.send_message(owner, ChatRequest(message="Private"))

        with pytest.raises(ConversationNotFoundError):
            await service.get_conversation(other, response.conversation.id)

    @pytest.mark.asyncio
    async def test_update(self, service, make_user):
        user = make_user()
        response = await service.send_message(user, ChatRequest(message="Hi"))

        summary = await service.update_conversation(
            user,
            response.conversation.id,
            UpdateConversationRequest(title=" Renamed ", is_starred=True),
        )

        assert summary.title == "Renamed"
        assert summary.is_starred is True

    @pytest.mark.asyncio
    async def test_delete_is_soft(self, service, conversations, make_user):
        user = make_user()
        response = await service.send_message(user, ChatRequest(message="Hi"))

        await service.delete_conversation(user, response.conversation.id)

        with pytest.raises(ConversationNotFoundError):
            await service.get_conversation(user, response.conversation.id)
        deleted = _all_conversations(conversations, user.id, ConversationStatus.DELETED)
        assert [c.id for c in deleted] == [response.conversation.id]

    @pytest.mark.asyncio
    async def test_clear(self, service, conversations, make_user):
        user = make_user()
        for i in range(2):
            await service.send_message(user, ChatRequest(message=f"Topic {i}"))

        assert await service.clear_conversations(user) == 2
        assert _all_conversations(conversations, user.id) == []

    @pytest.mark.asyncio
    async def test_usage_stats(self, service, make_user):
        user = make_user(daily_count=2)
        stats = await service.usage_stats(user)
        assert stats.daily.used == 2
        assert stats.daily.remaining == 8

    def test_status(self, service):
        status = service.status()
        assert status.provider == "scripted"
        assert status.configured is True
