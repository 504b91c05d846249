"""Aggregator running every collector for one collection cycle.

Collectors run concurrently and share no state; their outputs are
concatenated in the fixed source order (social, feed, repo_trend). Each
collector already orders its own items, so no global re-sort happens here:
the delivery formatter groups by source anyway.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Sequence

import structlog

from src.collectors.base import BaseCollector
from src.models.schemas import ContentItem, SourceKind
from src.monitoring.metrics import record_items_collected

logger = structlog.get_logger(__name__)

SOURCE_ORDER = list(SourceKind)


@dataclass
class AggregateBatch:
    """Combined output of one aggregation pass."""

    items: list[ContentItem] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.items)


class Aggregator:
    """Fan out to a fixed set of collectors and fan their results back in.

    Example:
        aggregator = Aggregator([twitter, feeds, github])
        batch = await aggregator.collect_all()
    """

    def __init__(self, collectors: Sequence[BaseCollector]):
        # One collector per source kind, held in aggregation order
        self.collectors = sorted(collectors, key=lambda c: SOURCE_ORDER.index(c.source_kind))

    async def collect_all(self) -> AggregateBatch:
        results = await asyncio.gather(
            *(collector.collect() for collector in self.collectors),
            return_exceptions=True,
        )

        batch = AggregateBatch()
        for collector, result in zip(self.collectors, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                # Collectors recover their own failures; this only catches bugs.
                logger.error(
                    "collector_failed",
                    collector=collector.name,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                result = []
            batch.items.extend(result)
            batch.counts[collector.name] = len(result)
            record_items_collected(collector.name, len(result))

        logger.info("aggregation_complete", total=batch.total, **batch.counts)
        return batch
