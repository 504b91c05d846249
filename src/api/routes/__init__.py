"""API route modules."""

from src.api.routes.health import router as health_router
from src.api.routes.runs import router as runs_router

__all__ = [
    "health_router",
    "runs_router",
]
