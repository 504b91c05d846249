"""
Outer run boundary shared by the scheduler, the HTTP trigger and the CLI.

Whatever happens inside a job, the caller gets a RunOutcome back: success
with the job's result as ``data``, or failure with the error message and type.
"""

from typing import Awaitable, Callable

import structlog
from pydantic import BaseModel

from src.core.exceptions import InsightsBotError
from src.models.schemas import RunOutcome

logger = structlog.get_logger(__name__)


async def execute_run(job: str, run: Callable[[], Awaitable[BaseModel]]) -> RunOutcome:
    """Run a job and wrap its result or failure in a RunOutcome.

    Args:
        job: Job name ("collect" or "digest")
        run: Zero-argument coroutine function performing the job
    """
    logger.info("run_started", job=job)
    try:
        result = await run()
    except InsightsBotError as e:
        logger.error("run_failed", job=job, error=str(e), error_type=type(e).__name__)
        return RunOutcome(
            success=False,
            job=job,
            message=f"{job} run failed",
            error=str(e),
            error_type=type(e).__name__,
        )
    except Exception as e:
        logger.exception("run_crashed", job=job, error=str(e))
        return RunOutcome(
            success=False,
            job=job,
            message=f"{job} run failed unexpectedly",
            error=str(e),
            error_type=type(e).__name__,
        )

    logger.info("run_succeeded", job=job)
    return RunOutcome(
        success=True,
        job=job,
        message=f"{job} run completed",
        data=result.model_dump(),
    )
