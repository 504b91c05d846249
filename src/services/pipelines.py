"""Entry points for the two pipelines, wired through the global container."""

from typing import Optional

from src.core.container import DependencyContainer, get_container
from src.models.schemas import CycleResult, DigestResult, RunOutcome
from src.services.runner import execute_run


async def run_collection_cycle(container: Optional[DependencyContainer] = None) -> CycleResult:
    """Collect, filter, post and record new AI content once."""
    container = container or get_container()
    return await container.collection_cycle.run()


async def run_weekly_digest(container: Optional[DependencyContainer] = None) -> DigestResult:
    """Post a summary of the items delivered during the digest window."""
    container = container or get_container()
    return await container.weekly_digest.run()


JOBS = {
    "collect": run_collection_cycle,
    "digest": run_weekly_digest,
}


async def run_job(job: str, container: Optional[DependencyContainer] = None) -> RunOutcome:
    """Run a named job inside the RunOutcome boundary.

    Raises:
        KeyError: If the job name is unknown.
    """
    pipeline = JOBS[job]
    return await execute_run(job, lambda: pipeline(container))
