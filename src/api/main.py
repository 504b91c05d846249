"""AI Insights Bot API - Main FastAPI Application.

This module provides the FastAPI application wrapping the bot's pipelines.
It includes:
- CORS middleware configuration
- Optional X-API-Key authentication
- API versioning (/api/v1)
- Health check endpoints and Prometheus metrics (/metrics)
- Manual run triggers for the collection cycle and weekly digest
- Cron scheduler started on application startup

Usage:
    # Run with uvicorn
    uvicorn src.api.main:app --reload

    # Or run directly
    python -m src.api.main
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src import __version__
from src.api.dependencies import reset_dependencies, set_scheduler
from src.api.models import ErrorResponse, ValidationErrorDetail, ValidationErrorResponse
from src.api.routes.health import router as health_router, set_server_start_time
from src.api.routes.runs import router as runs_router
from src.config.settings import get_settings
from src.core.container import get_container, shutdown_container
from src.core.exceptions import ConfigurationError, InitializationError
from src.monitoring.metrics import get_metrics_app
from src.scheduler.scheduler import Scheduler

logger = structlog.get_logger(__name__)

# API metadata for OpenAPI documentation
API_TITLE = "AI Insights Bot API"
API_DESCRIPTION = """
## AI news collection and Slack delivery

Collects recent AI content from X (Twitter), AI lab blogs (RSS / Atom) and
GitHub, drops anything already delivered during the last 30 days, and posts
the rest to a Slack channel. A weekly digest summarizes what was delivered.

### Endpoints

- `POST /api/v1/runs/collect`: run one collection cycle now
- `POST /api/v1/runs/digest`: post the weekly digest now
- `GET /health`: dependency status
- `GET /metrics`: Prometheus metrics

### Authentication

Set `API_KEY_ENABLED=true` and `API_KEY=your-secret-key` in the environment to
require an X-API-Key header on all non-public endpoints.
"""


# =============================================================================
# API Key Authentication Middleware
# =============================================================================


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Middleware to validate API key for all requests except health/docs endpoints.

    Enable by setting API_KEY_ENABLED=true and API_KEY=<secret> in environment.
    """

    # Endpoints that don't require authentication
    PUBLIC_PATHS = {
        "/",
        "/health",
        "/health/live",
        "/health/ready",
        "/metrics",
        "/metrics/",
        "/docs",
        "/redoc",
        "/openapi.json",
    }

    async def dispatch(self, request: Request, call_next):
        settings = get_settings()

        # Skip auth if disabled
        if not settings.api_key_enabled:
            return await call_next(request)

        # Skip auth for public paths
        if request.url.path in self.PUBLIC_PATHS:
            return await call_next(request)

        # Validate API key
        api_key = request.headers.get("X-API-Key")
        expected_key = settings.api_key.get_secret_value() if settings.api_key else None

        if not expected_key:
            logger.error("api_key_enabled_but_not_set")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Server misconfiguration: API key authentication enabled but no key configured"},
            )

        if not api_key:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Missing X-API-Key header"},
            )

        if api_key != expected_key:
            logger.warning("invalid_api_key_attempt", path=request.url.path)
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Invalid API key"},
            )

        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    - Startup: build the container, start the scheduler
    - Shutdown: stop the scheduler, close HTTP and Redis connections
    """
    # Startup
    logger.info("application_starting")
    set_server_start_time()
    settings = get_settings()

    container = get_container()
    try:
        await container.initialize()
    except (ConfigurationError, InitializationError) as e:
        # Manual runs will report the same error in their RunOutcome
        logger.error("container_initialization_failed", error=str(e))

    scheduler = None
    if settings.scheduler_enabled and container.is_initialized:
        scheduler = Scheduler(container, settings)
        try:
            await scheduler.start()
            logger.info("scheduler_initialized")
        except Exception as e:
            logger.error("scheduler_initialization_failed", error=str(e))
        set_scheduler(scheduler)

    logger.info("application_started")

    yield

    # Shutdown
    logger.info("application_stopping")

    try:
        if scheduler is not None and scheduler.is_running:
            await scheduler.stop()
    except Exception as e:
        logger.error("scheduler_shutdown_error", error=str(e))

    await shutdown_container()
    reset_dependencies()
    logger.info("application_stopped")


# Create FastAPI application
app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=[
        {
            "name": "Health",
            "description": "System health and status endpoints",
        },
        {
            "name": "Runs",
            "description": "Trigger the collection cycle or weekly digest on demand",
        },
    ],
)

# Configure CORS middleware (from settings)
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allowed_origins,
    allow_credentials=_settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key", "Accept"],
)

# Add API Key authentication middleware
app.add_middleware(APIKeyMiddleware)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with detailed response."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(ValidationErrorDetail(
            field=field,
            message=error["msg"],
            value=error.get("input"),
        ))

    response = ValidationErrorResponse(
        errors=errors,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    response = ErrorResponse(
        error="internal_server_error",
        message="An unexpected error occurred",
        detail=str(exc) if get_settings().debug else None,
        path=request.url.path,
        timestamp=datetime.now(timezone.utc),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Root endpoint - points at the API documentation."""
    return {
        "name": API_TITLE,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
        "api": "/api/v1",
    }


# =============================================================================
# Include Routers
# =============================================================================

# Health endpoints at root level
app.include_router(health_router)

# Create API v1 router for versioned endpoints
api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(runs_router)

# Include the versioned router
app.include_router(api_v1_router)

# Prometheus metrics
app.mount("/metrics", get_metrics_app())


# =============================================================================
# Development Server
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
