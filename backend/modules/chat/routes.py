"""
AI chat API endpoints.

Provides the chat endpoint, AI status and usage, and conversation
management.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_chat_service
from api.middleware.auth import get_current_user
from api.middleware.ratelimit import limit_ai_requests
from shared.models import User
from modules.auth.models import MessageResponse
from modules.usage.models import UsageStats

from .models import (
    AIStatus,
    ChatRequest,
    ChatResponse,
    Conversation,
    ConversationCategory,
    ConversationFilters,
    ConversationListResponse,
    ConversationStatus,
    ConversationSummary,
    UpdateConversationRequest,
)
from .service import ChatService

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def send_message(
    request: ChatRequest,
    user: User = Depends(limit_ai_requests),
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Send a message to the assistant.

    Errors:
    - 400 INVALID_INPUT: empty message or longer than 10,000 characters
    - 404 CONVERSATION_NOT_FOUND: unknown conversationId
    - 429 USAGE_LIMIT_EXCEEDED: daily or monthly quota exhausted
    - 429 AI_RATE_LIMIT_EXCEEDED: too many requests in the last minute
    - 503 RATE_LIMITED / PROVIDER_UNAVAILABLE: try again later
    - 500 AI_ERROR: the provider failed permanently
    """
    return await service.send_message(user, request)


@router.get("/status", response_model=AIStatus)
async def get_status(
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> AIStatus:
    return service.status()


@router.get("/usage", response_model=UsageStats)
async def get_usage(
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> UsageStats:
    """Daily and monthly usage with limits and reset times."""
    return await service.usage_stats(user)


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
    status: ConversationStatus = Query(default=ConversationStatus.ACTIVE),
    is_starred: Optional[bool] = Query(default=None, alias="isStarred"),
    category: Optional[ConversationCategory] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=200),
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> ConversationListResponse:
    """
    List the current user's conversations.

    Most recent activity first.
    """
    filters = ConversationFilters(
        status=status,
        is_starred=is_starred,
        category=category,
        search=search,
    )
    return await service.list_conversations(user, filters, page, limit)


@router.delete("/conversations", response_model=MessageResponse)
async def clear_conversations(
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> MessageResponse:
    """Delete every active conversation."""
    await service.clear_conversations(user)
    return MessageResponse(message="All conversations cleared successfully")


@router.get("/conversations/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation_id: str,
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> Conversation:
    return await service.get_conversation(user, conversation_id)


@router.patch("/conversations/{conversation_id}", response_model=ConversationSummary)
async def update_conversation(
    conversation_id: str,
    request: UpdateConversationRequest,
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> ConversationSummary:
    """Rename, star or recategorize a conversation."""
    return await service.update_conversation(user, conversation_id, request)


@router.delete("/conversations/{conversation_id}", response_model=MessageResponse)
async def delete_conversation(
    conversation_id: str,
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> MessageResponse:
    await service.delete_conversation(user, conversation_id)
    return MessageResponse(message="Conversation deleted successfully")


@router.post("/conversations/{conversation_id}/archive", response_model=ConversationSummary)
async def archive_conversation(
    conversation_id: str,
    user: User = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
) -> ConversationSummary:
    return await service.archive_conversation(user, conversation_id)
