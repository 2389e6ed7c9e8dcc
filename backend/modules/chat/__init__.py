"""
Chat module.

The AI response pipeline and the conversations it feeds.

Public API:
- IChatService: Interface for chat and conversation operations
- ResponsePipeline: Validation, prompt composition and provider dispatch
- Models: Conversation, ChatMessage, ChatRequest, ChatResponse
- Exceptions: InvalidInputError, ConversationNotFoundError, AIGenerationError
"""

from .interfaces import IChatService, IConversationRepository
from .models import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Conversation,
    ConversationStatus,
    ConversationSummary,
)
from .pipeline import AIResponse, ResponsePipeline
from .prompts import PERSONALITY_PROMPTS, build_prompt_messages, build_system_prompt
from .exceptions import InvalidInputError, ConversationNotFoundError, AIGenerationError

__all__ = [
    # Interfaces
    "IChatService",
    "IConversationRepository",
    # Models
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Conversation",
    "ConversationStatus",
    "ConversationSummary",
    # Pipeline
    "AIResponse",
    "ResponsePipeline",
    "PERSONALITY_PROMPTS",
    "build_prompt_messages",
    "build_system_prompt",
    # Exceptions
    "InvalidInputError",
    "ConversationNotFoundError",
    "AIGenerationError",
]
