"""Base collector interface for all data collectors.

All collectors extend BaseCollector and implement collect(). The source set
is closed: the aggregator holds one instance of each concrete collector.
"""

from abc import ABC, abstractmethod

from src.models.schemas import ContentItem, SourceKind


class BaseCollector(ABC):
    """Abstract base class for all data collectors.

    collect() must never raise for failures scoped to one account, keyword,
    feed or query: those are logged and contribute nothing.
    """

    source_kind: SourceKind

    @property
    def name(self) -> str:
        return self.source_kind.value

    @abstractmethod
    async def collect(self) -> list[ContentItem]:
        """Fetch and normalize the latest content from this source.

        Returns:
            Normalized items, ordered newest first.
        """
        ...


def newest_first(items: list[ContentItem], limit: int) -> list[ContentItem]:
    """Sort items by publication time descending and keep the first ``limit``."""
    return sorted(items, key=lambda item: item.published_at, reverse=True)[:limit]
