"""
Shared infrastructure for Lumen backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- models: The user record and API model base
- fifo / locks: Bounded token lists and per-user serialization
- ratelimit: Per-caller request throttling

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    LumenError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ConcurrentUpdateError,
    ExternalServiceError,
    RateLimitExceededError,
)
from .models import User, UsageCounters, CamelModel

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "LumenError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "ConcurrentUpdateError",
    "ExternalServiceError",
    "RateLimitExceededError",
    "User",
    "UsageCounters",
    "CamelModel",
]
