"""RSS / Atom feed collector.

Downloads each configured feed with the shared HTTP client, parses it with
feedparser and normalizes the newest entries into ContentItems. A feed that
fails to download or parse is logged and skipped; the others still proceed.
"""

import base64
import hashlib
import re
from datetime import datetime, timezone
from html import unescape
from typing import Any, Callable, Optional, Sequence

import feedparser
import httpx
import structlog

from src.collectors.base import BaseCollector, newest_first
from src.core.exceptions import CollectorError
from src.core.http import fetch
from src.models.schemas import ContentItem, SourceKind, utc_now

logger = structlog.get_logger(__name__)

FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.5"
LEGACY_ID_LENGTH = 10

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


def feed_item_id(link: str, legacy: bool = False) -> str:
    """Dedup key for a feed entry, derived from its link.

    Titles are not used because they repeat and get edited. The default is a
    full SHA-256 digest of the link. ``legacy=True`` gives the older
    ``rss_`` + 10 base64 characters format, which collides for links sharing
    a prefix; use it only to stay compatible with existing post history.
    """
    if legacy:
        encoded = base64.b64encode(link.encode("utf-8")).decode("ascii")
        return f"rss_{encoded[:LEGACY_ID_LENGTH]}"
    return f"rss_{hashlib.sha256(link.encode('utf-8')).hexdigest()}"


def html_to_text(value: str) -> str:
    """Strip tags and entities from an HTML snippet."""
    return _SPACE_RE.sub(" ", unescape(_TAG_RE.sub(" ", value))).strip()


def entry_published_at(entry: Any) -> Optional[datetime]:
    """Publication time of a feed entry, falling back to its update time."""
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    return datetime(*parsed[:6], tzinfo=timezone.utc)


def entry_snippet(entry: Any) -> str:
    """Plain-text excerpt of an entry: summary first, then full content."""
    summary = entry.get("summary")
    if summary:
        return html_to_text(summary)
    for content in entry.get("content") or []:
        if content.get("value"):
            return html_to_text(content["value"])
    return ""


class FeedCollector(BaseCollector):
    """Collector for the newest articles of a fixed list of feeds.

    Example:
        collector = FeedCollector(http_client, ["https://openai.com/blog/rss.xml"])
        articles = await collector.collect()
    """

    source_kind = SourceKind.FEED
    COLLECTOR_TYPE = "rss"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        feed_urls: Sequence[str],
        *,
        entries_per_feed: int = 3,
        max_items: int = 3,
        legacy_ids: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._http = http_client
        self.feed_urls = list(feed_urls)
        self.entries_per_feed = entries_per_feed
        self.max_items = max_items
        self.legacy_ids = legacy_ids
        self._clock = clock

    async def collect(self) -> list[ContentItem]:
        collected_at = self._clock()
        articles: list[ContentItem] = []

        for feed_url in self.feed_urls:
            try:
                articles.extend(await self.collect_feed(feed_url, collected_at))
            except Exception as e:
                logger.warning(
                    "feed_collection_failed",
                    feed_url=feed_url,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        results = newest_first(articles, self.max_items)
        logger.info("feeds_collected", feeds=len(self.feed_urls), candidates=len(articles), count=len(results))
        return results

    async def collect_feed(self, feed_url: str, collected_at: datetime) -> list[ContentItem]:
        """Fetch one feed and normalize its newest entries.

        Raises:
            CollectorError: If the feed cannot be downloaded or parsed.
        """
        response = await fetch(
            self._http,
            feed_url,
            collector_type=self.COLLECTOR_TYPE,
            headers={"Accept": FEED_ACCEPT},
        )
        parsed = feedparser.parse(response.content)
        if parsed.bozo and not parsed.entries:
            raise CollectorError(
                self.COLLECTOR_TYPE,
                f"Unparseable feed: {parsed.get('bozo_exception')}",
                {"feed_url": feed_url},
            )

        feed_title = parsed.feed.get("title") or "Unknown"

        # Undated entries sort after dated ones; ties keep document order.
        newest = sorted(
            parsed.entries,
            key=lambda e: (entry_published_at(e) is not None, entry_published_at(e) or collected_at),
            reverse=True,
        )[: self.entries_per_feed]

        items = []
        for entry in newest:
            link = entry.get("link")
            title = entry.get("title")
            if not link or not title:
                continue
            items.append(
                ContentItem(
                    id=feed_item_id(link, legacy=self.legacy_ids),
                    source_kind=SourceKind.FEED,
                    title=html_to_text(title),
                    body=entry_snippet(entry),
                    url=link,
                    author=feed_title,
                    published_at=entry_published_at(entry) or collected_at,
                )
            )

        logger.debug("feed_collected", feed_url=feed_url, entries=len(parsed.entries), count=len(items))
        return items
