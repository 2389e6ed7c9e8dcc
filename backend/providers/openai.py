"""OpenAI chat provider implementation.

Calls OpenAI's chat models through the langchain-openai package and maps
the SDK's exceptions onto the provider error taxonomy. Retries are left to
the client of the API, so the underlying client is built with
max_retries=0.
"""

import logging
from typing import Optional

import openai
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from .base import ChatProvider, CompletionRequest, ModelConfig, PromptMessage, ProviderResult
from .exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitedError,
    ProviderUnavailableError,
)


logger = logging.getLogger(__name__)

_MESSAGE_TYPES: dict[str, type[BaseMessage]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_message(message: PromptMessage) -> BaseMessage:
    return _MESSAGE_TYPES[message.role](content=message.content)


def map_openai_error(error: Exception, provider: str = "openai") -> ProviderError:
    """Translate an OpenAI SDK exception into a ProviderError.

    Rate limits and outages are retryable; rejected credentials are fatal
    and logged at CRITICAL so operators are alerted.
    """
    if isinstance(error, openai.RateLimitError):
        return ProviderRateLimitedError(provider)
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        logger.critical("OpenAI rejected the configured API key: %s", error)
        return ProviderAuthError(provider)
    if isinstance(error, openai.APIConnectionError):
        # Includes APITimeoutError
        return ProviderUnavailableError(provider)
    if isinstance(error, openai.APIStatusError) and error.status_code >= 500:
        return ProviderUnavailableError(provider)
    return ProviderError(f"AI provider request failed: {error}", provider)


class OpenAIProvider(ChatProvider):
    """Provider for OpenAI GPT models.

    Requires a valid API key. The ChatOpenAI client is created on first use.
    """

    name = "openai"

    def __init__(self, config: ModelConfig, llm: Optional[ChatOpenAI] = None):
        if not config.api_key:
            raise ValueError(
                "OpenAI API key is required. Set it via the OPENAI_API_KEY environment variable."
            )
        self._config = config
        self._llm = llm

    @property
    def model(self) -> str:
        return self._config.model_id

    def get_llm(self) -> ChatOpenAI:
        """Return the configured ChatOpenAI client."""
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self._config.model_id,
                api_key=self._config.api_key,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                timeout=self._config.timeout_seconds,
                max_retries=0,
            )
        return self._llm

    async def complete(self, request: CompletionRequest) -> ProviderResult:
        messages = [to_langchain_message(m) for m in request.messages]
        llm = self.get_llm()
        if request.max_tokens is not None:
            llm = llm.bind(max_tokens=request.max_tokens)

        try:
            response = await llm.ainvoke(messages)
        except openai.OpenAIError as e:
            raise map_openai_error(e, self.name) from e

        text = response.content if isinstance(response.content, str) else ""
        if not text.strip():
            raise ProviderError("No response from AI provider", self.name, code="EMPTY_RESPONSE")

        usage = response.usage_metadata or {}
        prompt_tokens = usage.get("input_tokens", 0)
        completion_tokens = usage.get("output_tokens", 0)
        return ProviderResult(
            text=text,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=usage.get("total_tokens", prompt_tokens + completion_tokens),
            model=response.response_metadata.get("model_name", self.model),
            is_mock=False,
        )
