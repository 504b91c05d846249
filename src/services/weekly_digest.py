"""Weekly digest pipeline: summarize what was delivered in the last window."""

from datetime import datetime, timedelta
from typing import Callable

import structlog

from src.delivery.digest import DigestBuilder, breakdown_by_kind
from src.delivery.slack import SlackPoster
from src.models.schemas import DigestResult, utc_now
from src.monitoring.metrics import track_run
from src.storage.dedup_store import DedupStore

logger = structlog.get_logger(__name__)


class WeeklyDigestJob:
    """Read the post history for the window and post one summary.

    An empty window posts nothing and reports ``nothing_to_report``.
    """

    def __init__(
        self,
        store: DedupStore,
        builder: DigestBuilder,
        poster: SlackPoster,
        channel: str,
        window: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.builder = builder
        self.poster = poster
        self.channel = channel
        self.window = window
        self._clock = clock

    async def run(self) -> DigestResult:
        with track_run("digest"):
            since = self._clock() - self.window
            records = await self.store.records_since(since)
            message = self.builder.build(records)

            if message is None:
                logger.info("weekly_digest_nothing_to_report", since=since.isoformat())
                return DigestResult(posts_count=0, breakdown={}, posted=False)

            await self.poster.post(self.channel, message)

        result = DigestResult(
            posts_count=len(records),
            breakdown=breakdown_by_kind(records),
            posted=True,
        )
        logger.info(
            "weekly_digest_posted",
            posts_count=result.posts_count,
            breakdown=result.breakdown,
        )
        return result
