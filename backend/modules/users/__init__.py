"""
Users module.

Stores user records, including the inline token lists and usage counters.

Public API:
- IUserRepository: Interface for user storage
- InMemoryUserRepository, SupabaseUserRepository: Implementations
- update_user: Compare-and-swap read-modify-write helper
- Exceptions: UserNotFoundError, EmailAlreadyExistsError
"""

from .interfaces import IUserRepository
from .repository import (
    InMemoryUserRepository,
    SupabaseUserRepository,
    normalize_email,
    update_user,
)
from .exceptions import UserNotFoundError, EmailAlreadyExistsError

__all__ = [
    # Interface
    "IUserRepository",
    # Implementations
    "InMemoryUserRepository",
    "SupabaseUserRepository",
    "normalize_email",
    "update_user",
    # Exceptions
    "UserNotFoundError",
    "EmailAlreadyExistsError",
]
