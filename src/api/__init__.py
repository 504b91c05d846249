"""
AI Insights Bot FastAPI Application.

- main: FastAPI application entry point and configuration
- routes/: health checks and manual run triggers
- models: Pydantic response models
- dependencies: FastAPI dependency injection providers

API Structure:
- /health - Health check and readiness probes
- /api/v1/runs/collect - Run one collection cycle
- /api/v1/runs/digest - Post the weekly digest
- /metrics - Prometheus metrics

Example:
    from src.api.main import app

    # Run with: uvicorn src.api.main:app --reload
"""

from src.api.main import app

__all__ = ["app"]
