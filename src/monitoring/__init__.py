"""
Monitoring and observability for AI Insights Bot.

Provides Prometheus metrics for pipeline runs, collection volume,
delivery and dedup store health.

Usage:
    from src.monitoring import track_run

    with track_run("collect"):
        await cycle.run()
"""

from src.monitoring.metrics import (
    DEDUP_OPERATIONS,
    ITEMS_COLLECTED,
    ITEMS_DELIVERED,
    RUN_DURATION,
    RUN_TOTAL,
    get_metrics_app,
    record_dedup_operation,
    record_items_collected,
    track_run,
)

__all__ = [
    # Prometheus metrics
    "DEDUP_OPERATIONS",
    "ITEMS_COLLECTED",
    "ITEMS_DELIVERED",
    "RUN_DURATION",
    "RUN_TOTAL",
    # Helpers
    "get_metrics_app",
    "record_dedup_operation",
    "record_items_collected",
    "track_run",
]
