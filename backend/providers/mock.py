"""Offline mock chat provider.

Used when no provider credential is configured. Responses are canned but
deterministic: the same message and personality always produce the same
text, which keeps tests and demos reproducible.
"""

import asyncio
import math
import re
import zlib

from shared.models import Personality

from .base import ChatProvider, CompletionRequest, ProviderResult


MOCK_MODEL = "mock-model"

_GREETING = re.compile(r"^(hi|hello|hey|greetings)")
_QUESTION = re.compile(r"^(what|how|why|when|where|who|which)")
_TASK = re.compile(r"^(can you|could you|please|help me|i need|i want)")

CANNED_RESPONSES: dict[str, list[str]] = {
    "greeting": [
        "Hello! What can I help you with today?",
        "Hi! I'm here and ready to help. What's on your mind?",
        "Hey there! Ask me anything and I'll do my best.",
    ],
    "question": [
        "Good question! Here is what I can tell you about it...",
        "Happy to help with that. Here's some information...",
        "Let me share my take on this...",
    ],
    "task": [
        "Sure, I can help with that. Here's how we could approach it...",
        "Of course! Let's go through it step by step...",
        "Glad to help. Here's what I'd suggest...",
    ],
    "default": [
        "Thanks for your message. Here are my thoughts...",
        "I see what you mean. Here's a helpful response...",
        "Understood. Here's what I can offer...",
    ],
}


def classify_message(message: str) -> str:
    """Bucket a message as greeting, question, task or default."""
    lowered = message.strip().lower()
    if _GREETING.match(lowered):
        return "greeting"
    if "?" in lowered or _QUESTION.match(lowered):
        return "question"
    if _TASK.match(lowered):
        return "task"
    return "default"


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


def flavor_response(base: str, personality: Personality, message: str) -> str:
    """Dress a canned response in the given personality."""
    if personality == Personality.PROFESSIONAL:
        return (
            f"{base}\n\nThis response was produced in mock mode for demonstration "
            f"purposes. With a provider configured, you would receive a full AI "
            f"answer tailored to your request."
        )
    if personality == Personality.CONCISE:
        return f"{base}\n\n• Mock mode active\n• Configure an OpenAI key for real answers"
    if personality == Personality.DETAILED:
        return (
            f"{base}\n\nAdditional context:\nThe assistant is running in mock mode "
            f"because no OpenAI API key is configured.\n\nTo enable real answers:\n"
            f"1. Create an API key in your OpenAI account\n"
            f"2. Set OPENAI_API_KEY in the server's .env file\n"
            f"3. Restart the server\n\nYou wrote: \"{message}\""
        )
    return f"{base} 😊\n\n[Mock response. Configure an OpenAI API key for real AI answers!]"


class MockProvider(ChatProvider):
    """Deterministic offline provider.

    Args:
        latency_seconds: Artificial delay before answering
    """

    name = "mock"

    def __init__(self, latency_seconds: float = 0.0):
        self._latency_seconds = latency_seconds

    @property
    def model(self) -> str:
        return MOCK_MODEL

    @property
    def is_mock(self) -> bool:
        return True

    async def complete(self, request: CompletionRequest) -> ProviderResult:
        if self._latency_seconds > 0:
            await asyncio.sleep(self._latency_seconds)

        message = request.user_message
        candidates = CANNED_RESPONSES[classify_message(message)]
        base = candidates[zlib.crc32(message.encode("utf-8")) % len(candidates)]
        text = flavor_response(base, request.personality, message)

        prompt_tokens = estimate_tokens(message)
        completion_tokens = estimate_tokens(text)
        return ProviderResult(
            text=text,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            model=MOCK_MODEL,
            is_mock=True,
        )
