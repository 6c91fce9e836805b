"""
Main FastAPI application.

This file wires together all layers:
- Domain: Records, filters and scoring outcomes
- Search: Tokenizer, intent parser, fuzzy matcher, scorer, filters
- Repositories: Supabase / in-memory record sources
- Services: Search orchestration
- Routers: HTTP endpoints
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .core.supabase_client import get_supabase_client, reset_supabase_client
from .dependencies import set_search_service
from .logging_config import configure_logging
from .metrics import metrics_endpoint, track_request_metrics
from .repositories.record_repository import IRecordRepository, InMemoryRecordRepository
from .repositories.supabase_repository import SupabaseRecordRepository
from .routers import health_router, search_router
from .services.search_service import SmartSearchService

configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

logger = structlog.get_logger(__name__)

# Global state
search_service: Optional[SmartSearchService] = None


def create_record_repository() -> IRecordRepository:
    """
    Create the record source.

    Uses Supabase when credentials are configured, otherwise an empty
    in-memory source so the service still starts (every search returns []).
    """
    if not settings.supabase_configured:
        logger.warning("Supabase not configured, using empty in-memory record source")
        return InMemoryRecordRepository()

    return SupabaseRecordRepository(get_supabase_client())


def create_search_service(repository: Optional[IRecordRepository] = None) -> SmartSearchService:
    """
    Create and configure the search service with all dependencies.

    Args:
        repository: Record source (created from settings if None)

    Returns:
        Configured SmartSearchService instance
    """
    return SmartSearchService(
        repository=repository or create_record_repository(),
        max_candidates_per_kind=settings.MAX_CANDIDATES_PER_KIND,
        fetch_timeout_seconds=settings.SOURCE_FETCH_TIMEOUT_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global search_service

    logger.info("Starting Marketplace Search Service...", version=__version__)

    try:
        search_service = create_search_service()
        set_search_service(search_service)
        logger.info(
            "Search service initialized", record_source=search_service.repository.name
        )
    except Exception as e:
        logger.error("Failed to initialize search service", error=str(e))
        raise

    yield

    logger.info("Shutting down Marketplace Search Service...")
    set_search_service(None)
    reset_supabase_client()
    logger.info("Marketplace Search Service shut down complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Smart search and relevance ranking for stays, tours and transport",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for distributed tracing."""
    request_id = request.headers.get("X-Request-ID", f"req-{id(request)}")

    structlog.contextvars.bind_contextvars(request_id=request_id)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    structlog.contextvars.clear_contextvars()

    return response


# Metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Track Prometheus metrics."""
    start_time = time.time()

    response = await call_next(request)

    track_request_metrics(
        request.method, request.url.path, response.status_code, time.time() - start_time
    )

    return response


# Include routers
app.include_router(search_router.router)
app.include_router(health_router.router)

# Prometheus metrics endpoint
app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/v1/health",
        "ready": "/api/v1/ready",
        "search": "/api/v1/search",
    }


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "request_id": request.headers.get("X-Request-ID"),
        },
    )


def main() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    uvicorn.run(
        "marketplace_search.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
