"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught by the API
error handler, which returns 401 for every AuthenticationError and 400
for every ValidationError.
"""

from shared.exceptions import AuthenticationError, ValidationError
from modules.users.exceptions import UserNotFoundError, EmailAlreadyExistsError


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="MALFORMED")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="EXPIRED")


class WrongTokenTypeError(AuthenticationError):
    """Raised when an access token is presented where a refresh token is required."""

    def __init__(self, message: str = "Invalid token type"):
        super().__init__(message, code="WRONG_TYPE")


class RevokedTokenError(AuthenticationError):
    """Raised when a refresh token is no longer in its owner's token list."""

    def __init__(self, message: str = "Refresh token has been revoked"):
        super().__init__(message, code="REVOKED")


class StaleTokenError(AuthenticationError):
    """Raised when an access token predates the user's last password change."""

    def __init__(self, message: str = "Password recently changed. Please log in again"):
        super().__init__(message, code="STALE_TOKEN")


class AccountDeactivatedError(AuthenticationError):
    """Raised when the account behind a token or login is deactivated."""

    def __init__(self, message: str = "Account has been deactivated"):
        super().__init__(message, code="ACCOUNT_DEACTIVATED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password do not match an account."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class InvalidPasswordError(ValidationError):
    """Raised when the current password supplied for a sensitive change is wrong."""

    def __init__(self, message: str = "Current password is incorrect"):
        super().__init__(message, code="INVALID_PASSWORD")


__all__ = [
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
