"""
API error handling.

Maps the Lumen exception hierarchy onto HTTP status codes and renders
every error in the same shape: {"error": code, "message", "details"}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    LumenError,
    NotFoundError,
    RateLimitExceededError,
    ValidationError,
)
from modules.usage.exceptions import UsageLimitExceededError
from providers.exceptions import ProviderError


logger = logging.getLogger(__name__)


def status_code_for(error: LumenError) -> int:
    """HTTP status for a Lumen exception."""
    if isinstance(error, (UsageLimitExceededError, RateLimitExceededError)):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(error, ProviderError):
        if error.retryable:
            return status.HTTP_503_SERVICE_UNAVAILABLE
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(error, AuthenticationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, AuthorizationError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, ConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, ExternalServiceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def lumen_error_handler(request: Request, exc: LumenError) -> JSONResponse:
    status_code = status_code_for(exc)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    if status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


async def request_validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Invalid request",
            "details": {"errors": errors},
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LumenError, lumen_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
