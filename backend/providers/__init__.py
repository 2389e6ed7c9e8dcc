"""Chat provider implementations."""

from .base import ChatProvider, CompletionRequest, ModelConfig, PromptMessage, ProviderResult
from .exceptions import (
    ProviderError,
    ProviderRateLimitedError,
    ProviderAuthError,
    ProviderUnavailableError,
)
from .factory import create_provider
from .mock import MockProvider
from .openai import OpenAIProvider

__all__ = [
    "ChatProvider",
    "CompletionRequest",
    "ModelConfig",
    "PromptMessage",
    "ProviderResult",
    "ProviderError",
    "ProviderRateLimitedError",
    "ProviderAuthError",
    "ProviderUnavailableError",
    "create_provider",
    "MockProvider",
    "OpenAIProvider",
]
