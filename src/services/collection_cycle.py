"""
Collection cycle pipeline.

collect (all sources) -> drop already-delivered -> render -> post -> record.

Items are recorded only after Slack accepted the message, so a failed post
leaves nothing recorded and the next run retries the same items.
"""

import time

import structlog

from src.collectors.aggregator import Aggregator
from src.delivery.formatter import DeliveryFormatter
from src.delivery.slack import SlackPoster
from src.models.schemas import CycleResult
from src.monitoring.metrics import ITEMS_DELIVERED, track_run
from src.storage.dedup_store import DedupStore

logger = structlog.get_logger(__name__)


class CollectionCycle:
    """One collect-filter-post-record pass.

    Example:
        cycle = CollectionCycle(aggregator, store, formatter, poster, "#ai-news")
        result = await cycle.run()
    """

    def __init__(
        self,
        aggregator: Aggregator,
        store: DedupStore,
        formatter: DeliveryFormatter,
        poster: SlackPoster,
        channel: str,
    ):
        self.aggregator = aggregator
        self.store = store
        self.formatter = formatter
        self.poster = poster
        self.channel = channel

    async def run(self) -> CycleResult:
        started = time.perf_counter()
        with track_run("collect"):
            batch = await self.aggregator.collect_all()
            fresh = await self.store.filter_new(batch.items)

            recorded = 0
            if fresh:
                message = self.formatter.render(fresh)
                await self.poster.post(self.channel, message)
                ITEMS_DELIVERED.inc(len(fresh))
                recorded = await self.store.record_delivered(fresh)
            else:
                logger.info("collection_cycle_nothing_new", collected=batch.total)

        result = CycleResult(
            total_collected=batch.total,
            new_items_delivered=len(fresh),
            processing_time_ms=int((time.perf_counter() - started) * 1000),
            collected_by_source=batch.counts,
            recorded=recorded,
        )
        logger.info(
            "collection_cycle_complete",
            total_collected=result.total_collected,
            new_items_delivered=result.new_items_delivered,
            recorded=result.recorded,
            processing_time_ms=result.processing_time_ms,
        )
        return result
