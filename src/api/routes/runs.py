"""Manual pipeline triggers.

Each endpoint runs one job synchronously and returns its RunOutcome:
200 when the run succeeded, 500 when it failed.
"""

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_container
from src.core.container import DependencyContainer
from src.models.schemas import RunOutcome
from src.services.pipelines import run_job

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/runs", tags=["Runs"])


def outcome_response(outcome: RunOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK if outcome.success else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=outcome.model_dump(mode="json"),
    )


@router.post(
    "/collect",
    response_model=RunOutcome,
    summary="Run collection cycle",
    description="Collect, deduplicate and post new AI content now.",
    responses={500: {"model": RunOutcome}},
)
async def trigger_collection(
    container: DependencyContainer = Depends(get_container),
) -> JSONResponse:
    logger.info("manual_run_requested", job="collect")
    return outcome_response(await run_job("collect", container))


@router.post(
    "/digest",
    response_model=RunOutcome,
    summary="Run weekly digest",
    description="Post a summary of items delivered during the digest window.",
    responses={500: {"model": RunOutcome}},
)
async def trigger_digest(
    container: DependencyContainer = Depends(get_container),
) -> JSONResponse:
    logger.info("manual_run_requested", job="digest")
    return outcome_response(await run_job("digest", container))
