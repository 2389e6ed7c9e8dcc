"""
Request rate limiting dependencies.

- limit_ai_requests: POST /ai/chat, every request counts, keyed by user.
- limit_auth_attempts: login/register, only failed attempts count,
  keyed by client IP.

Limits come from settings (AI_RATE_LIMIT_*, AUTH_RATE_LIMIT_*) and can be
switched off with RATE_LIMIT_ENABLED=false.
"""

import logging
from typing import AsyncIterator

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError

from shared.exceptions import LumenError, RateLimitExceededError
from shared.models import User

from ..dependencies import get_container
from .auth import get_current_user


logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def limit_ai_requests(user: User = Depends(get_current_user)) -> User:
    """Authenticate, then count the request against the user's AI window."""
    container = get_container()
    if not container.settings.rate_limit_enabled:
        return user

    limiter = container.ai_rate_limiter
    key = f"user:{user.id}"
    if not limiter.hit(key):
        logger.info("AI rate limit hit for user %s", user.id)
        raise RateLimitExceededError(
            "Too many AI requests, please slow down.",
            code="AI_RATE_LIMIT_EXCEEDED",
            retry_after=limiter.retry_after(key),
        )
    return user


async def limit_auth_attempts(request: Request) -> AsyncIterator[None]:
    """Reject callers with too many recent failures; count this one if it fails."""
    container = get_container()
    if not container.settings.rate_limit_enabled:
        yield
        return

    limiter = container.auth_rate_limiter
    key = f"ip:{client_ip(request)}"
    if limiter.exhausted(key):
        logger.warning("Auth rate limit hit for %s", key)
        raise RateLimitExceededError(
            "Too many login attempts, please try again later.",
            code="AUTH_RATE_LIMIT_EXCEEDED",
            retry_after=limiter.retry_after(key),
        )
    try:
        yield
    except (LumenError, RequestValidationError):
        limiter.hit(key)
        raise
