"""
Authentication module.

Handles the session lifecycle (access/refresh JWTs, rotation, revocation,
device tokens) and account management.

Public API:
- IAuthService: Interface for account and session operations
- SessionManager: Token issue, verification, rotation and revocation
- TokenSigner: JWT signing and verification
- Models: TokenPair, AuthResponse, UserResponse, request bodies
- Auth exceptions: InvalidTokenError, ExpiredTokenError, RevokedTokenError, etc.
"""

from .interfaces import IAuthService
from .models import (
    AccessTokenClaims,
    AuthResponse,
    JWTPayload,
    RefreshTokenClaims,
    TokenPair,
    UserResponse,
)
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    WrongTokenTypeError,
    RevokedTokenError,
    StaleTokenError,
    AccountDeactivatedError,
    MissingTokenError,
    InvalidCredentialsError,
    InvalidPasswordError,
    UserNotFoundError,
    EmailAlreadyExistsError,
)
from .tokens import TokenSigner
from .sessions import SessionManager

__all__ = [
    # Interface
    "IAuthService",
    # Sessions
    "SessionManager",
    "TokenSigner",
    # Models
    "AccessTokenClaims",
    "AuthResponse",
    "JWTPayload",
    "RefreshTokenClaims",
    "TokenPair",
    "UserResponse",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "WrongTokenTypeError",
    "RevokedTokenError",
    "StaleTokenError",
    "AccountDeactivatedError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "InvalidPasswordError",
    "UserNotFoundError",
    "EmailAlreadyExistsError",
]
