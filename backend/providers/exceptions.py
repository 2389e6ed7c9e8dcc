"""
Chat provider exceptions.

Every provider failure is a ProviderError. `retryable` tells the caller
whether the same request may succeed later (rate limits, outages) or will
keep failing until an operator intervenes (bad credentials).
"""

from typing import Any, Optional

from shared.exceptions import ExternalServiceError


class ProviderError(ExternalServiceError):
    """Raised when a chat provider fails to produce a completion."""

    def __init__(
        self,
        message: str,
        provider: str,
        code: str = "PROVIDER_ERROR",
        retryable: bool = False,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, service=provider, code=code, details=details)
        self.provider = provider
        self.retryable = retryable
        self.details["retryable"] = retryable


class ProviderRateLimitedError(ProviderError):
    """The provider is throttling us."""

    def __init__(self, provider: str, message: str = "AI service is busy. Please try again later"):
        super().__init__(message, provider, code="RATE_LIMITED", retryable=True)


class ProviderAuthError(ProviderError):
    """The provider rejected our credentials."""

    def __init__(self, provider: str, message: str = "AI service configuration error"):
        super().__init__(message, provider, code="AUTH_FAILURE", retryable=False)


class ProviderUnavailableError(ProviderError):
    """The provider is down, unreachable or timed out."""

    def __init__(
        self,
        provider: str,
        message: str = "AI service is temporarily unavailable",
    ):
        super().__init__(message, provider, code="PROVIDER_UNAVAILABLE", retryable=True)
