"""Throttled iteration for rate-limited external APIs.

Wraps a sequence so that consecutive items are separated by a fixed pause.
Collectors iterate over accounts or keywords through it instead of sleeping
inline, keeping the delay policy in one place.

Usage:
    async for username in ThrottledSequence(accounts, delay=1.0):
        posts = await client.get_user_timeline(username)
"""

import asyncio
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class ThrottledSequence(Generic[T]):
    """
    Async iterable yielding items with a fixed pause between them.

    The pause happens before every item except the first, so N items cost
    N - 1 pauses. It runs regardless of how the caller handled the previous
    item; a failed request still counts against the external rate limit.

    Args:
        items: Items to iterate over.
        delay: Seconds to pause between consecutive items.
        limit: Optional cap on how many items are yielded.
        sleep: Awaitable pause function (injectable for tests).
    """

    items: Sequence[T]
    delay: float
    limit: Optional[int] = None
    sleep: Sleeper = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ValueError("delay must be non-negative")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be non-negative")

    def __len__(self) -> int:
        if self.limit is None:
            return len(self.items)
        return min(self.limit, len(self.items))

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        for index in range(len(self)):
            if index and self.delay > 0:
                logger.debug("throttle_pause", delay_seconds=self.delay, next_index=index)
                await self.sleep(self.delay)
            yield self.items[index]
