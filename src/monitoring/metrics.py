"""
Prometheus metrics for AI Insights Bot observability.

Provides standardized metrics for pipeline runs, collection volume,
delivery and dedup store health.

Usage:
    from src.monitoring.metrics import track_run

    with track_run("collect"):
        await cycle.run()

    # Or manually
    ITEMS_DELIVERED.inc(len(items))
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from starlette.applications import Starlette
from starlette.responses import Response
from starlette.routing import Route


# =============================================================================
# Metric Definitions
# =============================================================================

# Pipeline run metrics
RUN_DURATION = Histogram(
    "aiinsights_run_duration_seconds",
    "Duration of pipeline runs in seconds",
    ["job"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
)

RUN_TOTAL = Counter(
    "aiinsights_run_total",
    "Total number of pipeline runs",
    ["job", "status"],
)

# Collection metrics
ITEMS_COLLECTED = Counter(
    "aiinsights_items_collected_total",
    "Items returned by collectors",
    ["source"],
)

ITEMS_DELIVERED = Counter(
    "aiinsights_items_delivered_total",
    "New items posted to the chat channel",
)

# Dedup store metrics
DEDUP_OPERATIONS = Counter(
    "aiinsights_dedup_operations_total",
    "Dedup store operations",
    ["operation", "status"],
)


# =============================================================================
# Tracking Helpers
# =============================================================================


@contextmanager
def track_run(job: str) -> Generator[None, None, None]:
    """
    Context manager to track pipeline run duration and status.

    Usage:
        with track_run("digest"):
            await job.run()
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.perf_counter() - start_time
        RUN_DURATION.labels(job=job).observe(duration)
        RUN_TOTAL.labels(job=job, status=status).inc()


def record_items_collected(source: str, count: int) -> None:
    """Add a collector's contribution to the per-source counter."""
    ITEMS_COLLECTED.labels(source=source).inc(count)


def record_dedup_operation(operation: str, status: str) -> None:
    """Count a dedup store operation.

    Args:
        operation: "lookup" or "record"
        status: "hit", "miss", "stored", "fail_open" or "error"
    """
    DEDUP_OPERATIONS.labels(operation=operation, status=status).inc()


# =============================================================================
# Metrics Endpoint
# =============================================================================


async def metrics_endpoint(request) -> Response:
    """Prometheus metrics endpoint handler."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


def get_metrics_app() -> Starlette:
    """
    Get a Starlette app for serving metrics.

    Mount this at /metrics in your main app:
        from src.monitoring.metrics import get_metrics_app
        app.mount("/metrics", get_metrics_app())
    """
    return Starlette(
        routes=[
            Route("/", metrics_endpoint),
        ]
    )
