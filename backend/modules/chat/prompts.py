"""
Prompt composition.

A prompt is the personality preamble, a window of recent history with
system entries removed, and the new user message.
"""

from typing import Optional, Sequence

from shared.models import Personality
from providers.base import PromptMessage

from .models import ChatMessage


PERSONALITY_PROMPTS: dict[Personality, str] = {
    Personality.PROFESSIONAL: (
        "You are a professional AI assistant. Respond in a formal, business-appropriate "
        "manner. Be precise and thorough, and keep your focus on accuracy and clarity."
    ),
    Personality.FRIENDLY: (
        "You are a friendly and helpful AI assistant. Be warm, approachable and "
        "conversational. Keep a casual but respectful tone; an occasional emoji is fine."
    ),
    Personality.CONCISE: (
        "You are a concise AI assistant. Give brief, to-the-point answers without "
        "unnecessary elaboration. Use bullet points when listing several items."
    ),
    Personality.DETAILED: (
        "You are a detailed AI assistant. Give comprehensive answers with relevant "
        "context and examples, and break complex topics down step by step."
    ),
}


def build_system_prompt(personality: Optional[Personality] = None) -> str:
    return PERSONALITY_PROMPTS[personality or Personality.FRIENDLY]


def build_prompt_messages(
    message: str,
    history: Sequence[ChatMessage] = (),
    personality: Optional[Personality] = None,
    history_window: int = 10,
) -> list[PromptMessage]:
    """
    Compose the provider prompt.

    The last `history_window` history entries are taken first and system
    entries are dropped afterwards, so fewer than `history_window` turns
    may be included.
    """
    messages = [PromptMessage(role="system", content=build_system_prompt(personality))]

    recent = list(history)[-history_window:] if history_window > 0 else []
    for entry in recent:
        if entry.role == "system":
            continue
        messages.append(PromptMessage(role=entry.role, content=entry.content))

    messages.append(PromptMessage(role="user", content=message))
    return messages
