"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.config import get_settings

from ..dependencies import ServiceContainer, get_container

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    database: str
    provider: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    container: ServiceContainer = Depends(get_container),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports the configured storage backend and the active chat provider.
    """
    return ReadinessResponse(
        status="ready",
        database=container.settings.database_backend,
        provider=container.provider.name,
    )
