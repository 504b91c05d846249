"""Cron scheduling for the collection and digest pipelines.

Uses APScheduler's AsyncIOScheduler on the API's event loop. Schedules are
crontab expressions evaluated in UTC:

    collection: 00:00 and 09:00 Mon-Fri, 01:00 Sat
    digest:     10:00 Sun
"""

from __future__ import annotations

import asyncio
from datetime import timezone
from typing import Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.config.settings import Settings, get_settings
from src.core.container import DependencyContainer
from src.models.schemas import RunOutcome
from src.services.pipelines import run_job

logger = structlog.get_logger(__name__)


def build_trigger(expression: str) -> CronTrigger:
    """Parse a five-field crontab expression into a UTC trigger."""
    return CronTrigger.from_crontab(expression, timezone=timezone.utc)


class Scheduler:
    """Runs the pipelines on their cron schedules.

    Example:
        scheduler = Scheduler(container)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(self, container: DependencyContainer, settings: Optional[Settings] = None):
        self._container = container
        self._settings = settings or get_settings()
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._is_running = False

        logger.info("scheduler_initialized")

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is currently running."""
        return self._is_running

    def job_ids(self) -> list[str]:
        if not self._scheduler:
            return []
        return [job.id for job in self._scheduler.get_jobs()]

    async def start(self) -> None:
        """Register cron jobs and start the scheduler."""
        if self._is_running:
            logger.warning("scheduler_already_running")
            return

        logger.info("scheduler_starting")

        # Parse every expression before starting so a typo fails startup
        collection_triggers = [build_trigger(e) for e in self._settings.collection_schedules]
        digest_trigger = build_trigger(self._settings.digest_schedule)

        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        for index, trigger in enumerate(collection_triggers):
            self._add_job("collect", trigger, f"collect_{index}")
        self._add_job("digest", digest_trigger, "digest")
        self._scheduler.start()

        self._is_running = True
        logger.info("scheduler_started", jobs=self.job_ids())

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._is_running:
            logger.warning("scheduler_not_running")
            return

        logger.info("scheduler_stopping")

        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None

        self._is_running = False
        logger.info("scheduler_stopped")

    def _add_job(self, job: str, trigger: CronTrigger, job_id: str) -> None:
        self._scheduler.add_job(
            self._execute_job,
            trigger=trigger,
            id=job_id,
            args=[job],
            name=f"AI Insights Bot: {job}",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info("job_added_to_scheduler", job=job, job_id=job_id, trigger=str(trigger))

    async def _execute_job(self, job: str) -> RunOutcome:
        """Run a pipeline with timeout protection."""
        timeout_seconds = self._settings.run_timeout_seconds

        logger.info("job_execution_start", job=job, timeout_seconds=timeout_seconds)

        try:
            async with asyncio.timeout(timeout_seconds):
                outcome = await run_job(job, self._container)
        except asyncio.TimeoutError:
            logger.error("job_execution_timeout", job=job, timeout_seconds=timeout_seconds)
            # Re-raise so APScheduler records the failed run
            raise

        logger.info(
            "job_execution_complete",
            job=job,
            success=outcome.success,
            error=outcome.error,
        )
        return outcome
