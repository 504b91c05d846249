"""GitHub repository-trend collector.

Queries the repository search API for the most-starred repositories tagged
with an AI topic.

API Reference: https://docs.github.com/en/rest/search/search#search-repositories
"""

from datetime import datetime
from typing import Any, Callable, Optional

import httpx
import structlog

from src.collectors.base import BaseCollector
from src.core.http import fetch_json
from src.models.schemas import ContentItem, ContentMetrics, SourceKind, utc_now

logger = structlog.get_logger(__name__)


def repo_item_id(repo_id: int | str) -> str:
    """Dedup key for a repository, from GitHub's numeric id."""
    return f"github_{repo_id}"


def _parse_github_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def transform_repository(raw: dict[str, Any], collected_at: datetime) -> ContentItem:
    """Transform a search result to the unified ContentItem schema."""
    return ContentItem(
        id=repo_item_id(raw["id"]),
        source_kind=SourceKind.REPO_TREND,
        title=raw.get("name") or raw.get("full_name") or "",
        body=raw.get("description") or "",
        url=raw["html_url"],
        author=(raw.get("owner") or {}).get("login"),
        published_at=_parse_github_timestamp(raw.get("updated_at")) or collected_at,
        metrics=ContentMetrics(stars=raw.get("stargazers_count", 0)),
        extra={
            "language": raw.get("language"),
            "forks": raw.get("forks_count", 0),
        },
    )


class GitHubTrendingCollector(BaseCollector):
    """Collector for top-starred repositories on an AI topic.

    Any failure yields an empty list; nothing propagates to the pipeline.

    Example:
        collector = GitHubTrendingCollector(http_client, topic="artificial-intelligence")
        repos = await collector.collect()
    """

    source_kind = SourceKind.REPO_TREND
    COLLECTOR_TYPE = "github"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        topic: str = "artificial-intelligence",
        max_items: int = 5,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        clock: Callable[[], datetime] = utc_now,
    ):
        self._http = http_client
        self.topic = topic
        self.max_items = max_items
        self._base_url = base_url.rstrip("/")
        self._headers = {"Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._clock = clock

    async def collect(self) -> list[ContentItem]:
        collected_at = self._clock()
        try:
            payload = await fetch_json(
                self._http,
                f"{self._base_url}/search/repositories",
                collector_type=self.COLLECTOR_TYPE,
                params={
                    "q": f"topic:{self.topic}",
                    "sort": "stars",
                    "order": "desc",
                    "per_page": self.max_items,
                },
                headers=self._headers,
            )
            results = [
                transform_repository(repo, collected_at)
                for repo in (payload.get("items") or [])[: self.max_items]
            ]
        except Exception as e:
            logger.error(
                "github_collection_failed",
                topic=self.topic,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        logger.info("github_collected", topic=self.topic, count=len(results))
        return results
