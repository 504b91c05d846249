"""Post-history store answering "was this item already delivered?".

Wraps a DedupBackend with the bot's failure policy:

- Lookups fail open: if the backend cannot answer, the item is treated as
  new and a possible duplicate post is accepted over silently dropping it.
- Writes are per item: a failed write is logged and skipped, the rest of
  the batch is still recorded.
- Window scans (for the weekly digest) propagate errors to the caller.
"""

from datetime import datetime, timedelta
from typing import Callable, Iterable

import structlog

from src.models.schemas import ContentItem, DedupRecord, utc_now
from src.monitoring.metrics import record_dedup_operation
from src.storage.backends import DedupBackend

logger = structlog.get_logger(__name__)

DEFAULT_RETENTION = timedelta(days=30)


class DedupStore:
    """Persistent memory of delivered item ids with a fixed retention.

    Example:
        store = DedupStore(InMemoryDedupBackend())
        fresh = await store.filter_new(batch.items)
        ...
        await store.record_delivered(fresh)
    """

    def __init__(
        self,
        backend: DedupBackend,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
    ):
        if retention <= timedelta(0):
            raise ValueError("retention must be positive")
        self.backend = backend
        self.retention = retention
        self._clock = clock

    async def is_delivered(self, item_id: str) -> bool:
        """Point lookup. Raises DedupStoreError if the backend fails."""
        return await self.backend.exists(item_id, self._clock())

    async def filter_new(self, items: Iterable[ContentItem]) -> list[ContentItem]:
        """Return items with no live record, in input order."""
        fresh: list[ContentItem] = []
        seen_ids: set[str] = set()

        for item in items:
            if item.id in seen_ids:
                continue
            try:
                delivered = await self.is_delivered(item.id)
            except Exception as e:
                logger.warning(
                    "dedup_lookup_failed_open",
                    item_id=item.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                record_dedup_operation("lookup", "fail_open")
                delivered = False
            else:
                record_dedup_operation("lookup", "hit" if delivered else "miss")

            if not delivered:
                fresh.append(item)
                seen_ids.add(item.id)

        logger.info("dedup_filter_complete", new=len(fresh), seen=len(seen_ids))
        return fresh

    async def record_delivered(self, items: Iterable[ContentItem]) -> int:
        """Write one record per item. Returns how many were created."""
        now = self._clock()
        expires_at = now + self.retention
        created = 0

        for item in items:
            record = DedupRecord.for_item(item, recorded_at=now, expires_at=expires_at)
            try:
                if await self.backend.put(record):
                    created += 1
            except Exception as e:
                logger.error(
                    "dedup_record_failed",
                    item_id=item.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                record_dedup_operation("record", "error")
                continue
            record_dedup_operation("record", "stored")

        logger.info("dedup_records_written", created=created)
        return created

    async def records_since(self, since: datetime) -> list[DedupRecord]:
        """Live records with recorded_at >= since, oldest first."""
        records = await self.backend.scan(since, self._clock())
        return sorted(records, key=lambda r: r.recorded_at)

    async def close(self) -> None:
        await self.backend.close()
