"""
Health check and monitoring router.

Provides endpoints for liveness and readiness probes.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import settings
from ..dependencies import get_search_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = "marketplace-search"
    version: str = __version__


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc).isoformat())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the search service is wired and which record source it reads",
)
async def readiness_check():
    """
    Readiness check.

    Returns 200 when the search service is initialized, 503 otherwise.
    The record source is reported as "supabase" or "memory" (no project configured).
    """
    try:
        service = await get_search_service()
    except RuntimeError as e:
        logger.warning(f"Readiness check failed: {e}")
        response = ReadinessResponse(
            ready=False,
            checks={"search_service": "not_initialized"},
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump()
        )

    checks = {
        "search_service": "healthy",
        "record_source": service.repository.name,
        "supabase_configured": settings.supabase_configured,
        "max_candidates_per_kind": service.max_candidates_per_kind,
    }
    return ReadinessResponse(
        ready=True, checks=checks, timestamp=datetime.now(timezone.utc).isoformat()
    )
