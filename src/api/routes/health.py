"""Health check endpoints for the AI Insights Bot API.

Reports post-history store connectivity, configuration and scheduler status.
"""

from datetime import datetime, timezone
import time
from typing import Optional

import redis.asyncio as redis
import structlog
from fastapi import APIRouter, Depends, HTTPException

from src import __version__
from src.api.models import HealthCheckResponse, HealthStatus
from src.config.settings import get_settings, Settings
from src.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Health"])

# Track server start time for uptime calculation
_server_start_time: Optional[float] = None


def set_server_start_time() -> None:
    """Set the server start time. Called on application startup."""
    global _server_start_time
    _server_start_time = time.time()


def get_uptime_seconds() -> Optional[float]:
    """Get server uptime in seconds."""
    if _server_start_time is None:
        return None
    return time.time() - _server_start_time


async def check_dedup_store_health(settings: Settings) -> HealthStatus:
    """Check post-history store connectivity."""
    if not settings.redis_url:
        return HealthStatus(
            status="degraded",
            message="In-memory post history (not persistent across restarts)",
        )

    start_time = time.time()
    client = redis.from_url(settings.redis_url)
    try:
        await client.ping()
        latency = (time.time() - start_time) * 1000

        return HealthStatus(
            status="healthy",
            latency_ms=round(latency, 2),
            message="Connected to Redis",
        )
    except Exception as e:
        latency = (time.time() - start_time) * 1000
        logger.error("redis_health_check_failed", error=str(e))
        return HealthStatus(
            status="unhealthy",
            latency_ms=round(latency, 2),
            message=f"Redis connection failed: {str(e)[:100]}",
        )
    finally:
        await client.aclose()


def check_configuration_health(settings: Settings) -> HealthStatus:
    """Check that the run-time secrets are present."""
    try:
        settings.credentials()
    except ConfigurationError as e:
        return HealthStatus(status="unhealthy", message=e.message)
    return HealthStatus(status="healthy", message="Slack and X credentials configured")


async def check_scheduler_health(settings: Settings) -> HealthStatus:
    """Check scheduler status."""
    if not settings.scheduler_enabled:
        return HealthStatus(status="healthy", message="Scheduler disabled by configuration")

    try:
        # Import here to avoid circular imports
        from src.api.dependencies import get_scheduler

        scheduler = get_scheduler()
        if scheduler and scheduler.is_running:
            return HealthStatus(
                status="healthy",
                message="Scheduler is running",
            )
        else:
            return HealthStatus(
                status="degraded",
                message="Scheduler is not running",
            )
    except Exception as e:
        logger.error("scheduler_health_check_failed", error=str(e))
        return HealthStatus(
            status="unhealthy",
            message=f"Scheduler check failed: {str(e)[:100]}",
        )


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health Check",
    description="Check the health status of the API and its dependencies.",
)
async def health_check(
    settings: Settings = Depends(get_settings),
) -> HealthCheckResponse:
    """
    Perform a health check of all system components.

    Returns the status of:
    - Post-history store (Redis)
    - Configuration (Slack / X credentials)
    - Scheduler (APScheduler)
    """
    services = {
        "dedup_store": await check_dedup_store_health(settings),
        "configuration": check_configuration_health(settings),
        "scheduler": await check_scheduler_health(settings),
    }

    # Determine overall status
    statuses = [s.status for s in services.values()]
    if all(s == "healthy" for s in statuses):
        overall_status = "healthy"
    elif any(s == "unhealthy" for s in statuses):
        overall_status = "unhealthy"
    else:
        overall_status = "degraded"

    return HealthCheckResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        services=services,
        uptime_seconds=get_uptime_seconds(),
    )


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness check for container orchestration.",
)
async def liveness() -> dict:
    """Returns 200 if the service is alive."""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get(
    "/health/ready",
    summary="Readiness Check",
    description="Check if the service is ready to run pipelines.",
)
async def readiness(
    settings: Settings = Depends(get_settings),
) -> dict:
    """Returns 200 only if credentials are set and the store is reachable."""
    if check_configuration_health(settings).status == "unhealthy":
        raise HTTPException(
            status_code=503,
            detail="Service not ready: credentials missing",
        )

    store_status = await check_dedup_store_health(settings)
    if store_status.status == "unhealthy":
        raise HTTPException(
            status_code=503,
            detail="Service not ready: post history unavailable",
        )

    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
