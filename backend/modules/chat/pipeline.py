"""
AI response pipeline.

Validates the user's message, composes the prompt and dispatches it to
the configured provider. The pipeline persists nothing; storing the
conversation and metering usage are the chat service's job.
"""

import time
from typing import Optional, Sequence

from pydantic import BaseModel

from shared.models import Personality
from providers.base import ChatProvider, CompletionRequest

from .exceptions import InvalidInputError
from .models import AIStatus, ChatMessage, TokenUsage
from .prompts import build_prompt_messages


class AIResponse(BaseModel):
    """Normalized assistant reply."""

    text: str
    token_usage: TokenUsage
    model: str
    processing_time_ms: int
    is_mock: bool


class ResponsePipeline:
    """
    Turns a user message into an assistant reply.

    Args:
        provider: Real or mock chat provider, chosen at construction
        max_message_length: Longest accepted message after trimming
        history_window: Number of recent history entries sent to the provider
    """

    def __init__(
        self,
        provider: ChatProvider,
        max_message_length: int = 10_000,
        history_window: int = 10,
    ):
        self._provider = provider
        self._max_message_length = max_message_length
        self._history_window = history_window

    @property
    def provider(self) -> ChatProvider:
        return self._provider

    def validate_message(self, message: Optional[str]) -> str:
        """
        Return the trimmed message.

        Raises:
            InvalidInputError: Missing, blank, or longer than the maximum
        """
        if not isinstance(message, str):
            raise InvalidInputError("Message is required and must be a string")
        trimmed = message.strip()
        if not trimmed:
            raise InvalidInputError("Message cannot be empty")
        if len(trimmed) > self._max_message_length:
            raise InvalidInputError(
                f"Message exceeds maximum length of {self._max_message_length:,} characters",
                max_length=self._max_message_length,
            )
        return trimmed

    async def generate_response(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        personality: Optional[Personality] = None,
        max_tokens: Optional[int] = None,
    ) -> AIResponse:
        """
        Generate the assistant's reply.

        Raises:
            InvalidInputError: The message fails validation (no provider call)
            ProviderError: The provider failed; `retryable` tells whether to retry
        """
        text = self.validate_message(message)
        personality = personality or Personality.FRIENDLY
        request = CompletionRequest(
            messages=build_prompt_messages(text, history, personality, self._history_window),
            personality=personality,
            max_tokens=max_tokens,
        )

        started = time.perf_counter()
        result = await self._provider.complete(request)
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        return AIResponse(
            text=result.text,
            token_usage=TokenUsage(
                prompt=result.prompt_tokens,
                completion=result.completion_tokens,
                total=result.total_tokens,
            ),
            model=result.model,
            processing_time_ms=elapsed_ms,
            is_mock=result.is_mock,
        )

    def status(self) -> AIStatus:
        return AIStatus(
            available=True,
            provider=self._provider.name,
            model=self._provider.model,
            configured=not self._provider.is_mock,
        )
