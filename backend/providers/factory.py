"""Factory functions for creating chat providers."""

import logging

from shared.config import Settings

from .base import ChatProvider, ModelConfig
from .mock import MockProvider
from .openai import OpenAIProvider


logger = logging.getLogger(__name__)


def model_config_from_settings(settings: Settings) -> ModelConfig:
    return ModelConfig(
        model_id=settings.openai_model,
        api_key=settings.openai_api_key.strip(),
        max_tokens=settings.openai_max_tokens,
        temperature=settings.openai_temperature,
        timeout_seconds=settings.openai_timeout_seconds,
    )


def create_provider(settings: Settings) -> ChatProvider:
    """Select the chat provider for these settings.

    The OpenAI provider is used when an API key is configured; otherwise
    the deterministic mock.

    Args:
        settings: Application settings

    Returns:
        A ChatProvider instance
    """
    if settings.openai_configured:
        logger.info("Using OpenAI provider with model %s", settings.openai_model)
        return OpenAIProvider(model_config_from_settings(settings))

    logger.info("No OpenAI API key configured, using mock provider")
    return MockProvider()
