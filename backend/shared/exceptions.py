"""
Base exception classes for the Lumen backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class LumenError(Exception):
    """
    Base exception for all Lumen errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(LumenError):
    """Resource not found."""

    pass


class ValidationError(LumenError):
    """Input validation failed."""

    pass


class AuthenticationError(LumenError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(LumenError):
    """Authorization failed (insufficient permissions)."""

    pass


class ConflictError(LumenError):
    """A write lost a race against a concurrent update."""

    pass


class ConcurrentUpdateError(ConflictError):
    """Raised when a compare-and-swap on a record's version fails."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            f"Concurrent update on {resource}: {resource_id}",
            code="CONCURRENT_UPDATE",
            details={"resource": resource, "id": resource_id},
        )


class ExternalServiceError(LumenError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class RateLimitExceededError(LumenError):
    """Too many requests from one caller in the current window."""

    def __init__(self, message: str, code: str, retry_after: int):
        super().__init__(message, code=code, details={"retry_after": retry_after})
        self.retry_after = retry_after
