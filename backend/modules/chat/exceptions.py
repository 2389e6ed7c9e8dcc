"""
Chat module exceptions.
"""

from typing import Optional

from shared.exceptions import LumenError, NotFoundError, ValidationError
from providers.exceptions import ProviderError


class InvalidInputError(ValidationError):
    """Raised when a chat message is empty or too long."""

    def __init__(self, message: str, max_length: Optional[int] = None):
        details = {"max_length": max_length} if max_length is not None else None
        super().__init__(message, code="INVALID_INPUT", details=details)


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation does not exist or is not the user's."""

    def __init__(self, conversation_id: str):
        super().__init__(
            "Conversation not found",
            code="CONVERSATION_NOT_FOUND",
            details={"conversation_id": conversation_id},
        )


class AIGenerationError(LumenError):
    """
    Raised when the assistant could not answer because of a fatal
    provider failure. The user's message has been stored.
    """

    def __init__(self, cause: ProviderError, conversation_id: Optional[str] = None):
        details = {
            "reason": cause.code,
            "provider": cause.provider,
            "retryable": False,
        }
        if conversation_id:
            details["conversation_id"] = conversation_id
        super().__init__("Failed to generate AI response", code="AI_ERROR", details=details)
        self.cause = cause
