"""FastAPI dependency injection providers.

This module provides dependency functions for injecting services into route handlers.
"""

from typing import Optional

from src.core.container import DependencyContainer
from src.core.container import get_container as get_global_container
from src.scheduler.scheduler import Scheduler

# Global instances for singleton pattern
_scheduler_instance: Optional[Scheduler] = None


def get_container() -> DependencyContainer:
    """
    Get the dependency container.

    Returns the global container built on startup. Override this dependency
    in tests to inject a container with fake collaborators.
    """
    return get_global_container()


def get_scheduler() -> Scheduler:
    """
    Get Scheduler instance.

    Returns the global scheduler instance that is initialized on startup.

    Raises:
        RuntimeError: If scheduler has not been initialized.
    """
    if _scheduler_instance is None:
        raise RuntimeError(
            "Scheduler not initialized. Ensure the application startup event has run."
        )

    return _scheduler_instance


def set_scheduler(scheduler: Optional[Scheduler]) -> None:
    """
    Set the global scheduler instance.

    Called during application startup to initialize the scheduler.
    """
    global _scheduler_instance
    _scheduler_instance = scheduler


def reset_dependencies() -> None:
    """
    Reset all global dependency instances.

    Useful for testing or application shutdown.
    """
    global _scheduler_instance
    _scheduler_instance = None
