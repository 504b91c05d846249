"""Key-value backends with expiry for the post-history (dedup) store.

Two implementations share the DedupBackend protocol:

- RedisDedupBackend: one string key per record with an absolute expiry, plus
  a sorted set (score = recorded_at) used for time-window scans.
- InMemoryDedupBackend: process-local dict for development and tests.
  Does not persist across restarts and is not shared between instances.

Key structure (Redis):
- {prefix}:item:{id} -> JSON DedupRecord, expires at record.expires_at
- {prefix}:recorded  -> sorted set (score=recorded_at epoch, member=id)
"""

from datetime import datetime
from typing import Optional, Protocol

import structlog
import redis.asyncio as redis
from redis.exceptions import RedisError

from src.core.exceptions import DedupStoreError
from src.models.schemas import DedupRecord

logger = structlog.get_logger(__name__)


class DedupBackend(Protocol):
    """Protocol for post-history storage backends."""

    async def exists(self, item_id: str, now: datetime) -> bool: ...

    async def put(self, record: DedupRecord) -> bool: ...

    async def scan(self, since: datetime, now: datetime) -> list[DedupRecord]: ...

    async def close(self) -> None: ...


class InMemoryDedupBackend:
    """
    In-memory post history for development and tests.

    WARNING: Does not persist across restarts and does not share
    state between multiple application instances.
    """

    def __init__(self) -> None:
        self._records: dict[str, DedupRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def exists(self, item_id: str, now: datetime) -> bool:
        record = self._records.get(item_id)
        if record is None:
            return False
        if record.is_expired(now):
            del self._records[item_id]
            return False
        return True

    async def put(self, record: DedupRecord) -> bool:
        """Store a record unless one already exists. Returns True if created."""
        existing = self._records.get(record.id)
        if existing is not None and not existing.is_expired(record.recorded_at):
            return False
        self._records[record.id] = record
        return True

    async def scan(self, since: datetime, now: datetime) -> list[DedupRecord]:
        self.purge_expired(now)
        return [r for r in self._records.values() if r.recorded_at >= since]

    def purge_expired(self, now: datetime) -> int:
        """Drop expired records. Returns how many were removed."""
        expired = [key for key, record in self._records.items() if record.is_expired(now)]
        for key in expired:
            del self._records[key]
        return len(expired)

    async def close(self) -> None:
        return None


class RedisDedupBackend:
    """
    Redis-backed post history shared by every bot instance.

    Records expire through Redis key expiry, so an expired item simply looks
    unseen. The time index is trimmed on every write.

    Args:
        redis_url: Redis connection URL
        key_prefix: Prefix for Redis keys
        client: Pre-built client (tests); otherwise created lazily from redis_url
    """

    def __init__(
        self,
        redis_url: str,
        key_prefix: str = "ai-insights-bot:post-history",
        client: Optional[redis.Redis] = None,
    ):
        self._redis_url = redis_url
        self._key_prefix = key_prefix
        self._client = client

    @property
    def _index_key(self) -> str:
        return f"{self._key_prefix}:recorded"

    def _record_key(self, item_id: str) -> str:
        return f"{self._key_prefix}:item:{item_id}"

    @property
    def _redis_url_masked(self) -> str:
        """Return masked Redis URL for logging (hide password)."""
        if "@" in self._redis_url:
            parts = self._redis_url.split("@")
            return f"{parts[0].rsplit(':', 1)[0]}:****@{parts[-1]}"
        return self._redis_url

    async def _get_redis(self) -> redis.Redis:
        """Get or create the Redis connection."""
        if self._client is None:
            try:
                client = redis.from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                # Test connection
                await client.ping()
            except (RedisError, OSError) as e:
                logger.error(
                    "dedup_redis_connection_failed",
                    redis_url=self._redis_url_masked,
                    error=str(e),
                )
                raise DedupStoreError("connect", f"Redis unavailable: {e}")
            self._client = client
            logger.info("dedup_redis_connected", redis_url=self._redis_url_masked)
        return self._client

    async def exists(self, item_id: str, now: datetime) -> bool:
        client = await self._get_redis()
        try:
            return bool(await client.exists(self._record_key(item_id)))
        except (RedisError, OSError) as e:
            raise DedupStoreError("lookup", str(e), {"id": item_id})

    async def put(self, record: DedupRecord) -> bool:
        """Create the record (never overwrite). Returns True if created."""
        client = await self._get_redis()
        recorded_ts = record.recorded_at.timestamp()
        retention = record.expires_at.timestamp() - recorded_ts
        try:
            pipe = client.pipeline()
            # Trim first: a re-delivered item still has its stale index entry
            pipe.zremrangebyscore(self._index_key, 0, recorded_ts - retention)
            pipe.set(
                self._record_key(record.id),
                record.model_dump_json(),
                nx=True,
                exat=int(record.expires_at.timestamp()),
            )
            _, created = await pipe.execute()
            if created:
                # Index score always matches the live record's recorded_at
                await client.zadd(self._index_key, {record.id: recorded_ts})
        except (RedisError, OSError) as e:
            raise DedupStoreError("record", str(e), {"id": record.id})
        return bool(created)

    async def scan(self, since: datetime, now: datetime) -> list[DedupRecord]:
        client = await self._get_redis()
        try:
            ids = await client.zrangebyscore(self._index_key, since.timestamp(), "+inf")
            if not ids:
                return []
            raw_records = await client.mget([self._record_key(item_id) for item_id in ids])
        except (RedisError, OSError) as e:
            raise DedupStoreError("scan", str(e), {"since": since.isoformat()})

        # Index entries can outlive their expired record keys
        return [DedupRecord.model_validate_json(raw) for raw in raw_records if raw]

    async def close(self) -> None:
        """Close Redis connection if open."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("dedup_redis_disconnected")
