"""Base classes and models for chat providers."""

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, Field

from shared.models import Personality


class ModelConfig(BaseModel):
    """Configuration for a hosted chat model.

    Attributes:
        model_id: Model identifier (e.g., "gpt-4")
        api_key: API key for the provider
        max_tokens: Completion token cap per request
        temperature: Sampling temperature
        timeout_seconds: Per-request timeout; a timeout counts as the
            provider being unavailable
    """

    model_config = {"frozen": True}

    model_id: str
    api_key: str = ""
    max_tokens: int = 2048
    temperature: float = 0.7
    timeout_seconds: float = 60.0


class PromptMessage(BaseModel):
    """One entry of the prompt sent to a provider."""

    model_config = {"frozen": True}

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """A fully composed prompt. The last message is the user's new message."""

    messages: list[PromptMessage] = Field(..., min_length=1)
    personality: Personality = Personality.FRIENDLY
    max_tokens: int | None = None

    @property
    def user_message(self) -> str:
        return self.messages[-1].content


class ProviderResult(BaseModel):
    """Normalized provider output with token accounting."""

    text: str
    prompt_tokens: int = Field(..., ge=0)
    completion_tokens: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)
    model: str
    is_mock: bool = False


class ChatProvider(ABC):
    """Abstract base class for chat providers.

    Implementations turn a composed prompt into a completion. Failures are
    raised as ProviderError subclasses with a `retryable` flag; any other
    exception escaping complete() is a bug.
    """

    name: str = "unknown"

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier reported in responses."""
        pass

    @property
    def is_mock(self) -> bool:
        return False

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> ProviderResult:
        """Generate a completion for the request.

        Args:
            request: Composed prompt (system preamble, history, new message)

        Returns:
            ProviderResult with text and token counts

        Raises:
            ProviderError: On any provider failure
        """
        pass
