"""Unit tests for the RSS / Atom feed collector.

Feeds are served from an httpx.MockTransport so feedparser runs on real XML.
"""

import base64
import hashlib
from datetime import datetime, timezone
from email.utils import format_datetime

import httpx
import pytest

from src.collectors.feeds import FeedCollector, entry_snippet, feed_item_id, html_to_text
from src.models.schemas import SourceKind

COLLECTED_AT = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


def rss(title: str, entries: list[dict]) -> bytes:
    items = []
    for entry in entries:
        parts = []
        if entry.get("title"):
            parts.append(f"<title>{entry['title']}</title>")
        if entry.get("link"):
            parts.append(f"<link>{entry['link']}</link>")
        if entry.get("description"):
            parts.append(f"<description><![CDATA[{entry['description']}]]></description>")
        if entry.get("day"):
            published = datetime(2024, 5, entry["day"], 9, 0, tzinfo=timezone.utc)
            parts.append(f"<pubDate>{format_datetime(published, usegmt=True)}</pubDate>")
        items.append(f"<item>{''.join(parts)}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://example.com</link><description>d</description>"
        f"{''.join(items)}"
        "</channel></rss>"
    ).encode("utf-8")


def entries_for(prefix: str, days: list[int]) -> list[dict]:
    return [
        {
            "title": f"{prefix} post {day}",
            "link": f"https://{prefix}.example.com/posts/{day}",
            "description": f"<p>About <b>{prefix}</b> on day {day}</p>",
            "day": day,
        }
        for day in days
    ]


def make_http(feeds: dict[str, tuple[int, bytes]]) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = feeds.get(str(request.url), (404, b""))
        return httpx.Response(status, content=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFeedHelpers:
    """Tests for id and text helpers."""

    def test_feed_item_id_default_is_full_digest(self):
        link = "https://openai.com/blog/post"
        assert feed_item_id(link) == "rss_" + hashlib.sha256(link.encode()).hexdigest()

    def test_feed_item_id_legacy_format(self):
        link = "https://openai.com/blog/post"
        expected = "rss_" + base64.b64encode(link.encode()).decode()[:10]
        assert feed_item_id(link, legacy=True) == expected

    def test_legacy_ids_collide_for_shared_prefix(self):
        a = "https://openai.com/blog/one"
        b = "https://openai.com/blog/two"
        assert feed_item_id(a, legacy=True) == feed_item_id(b, legacy=True)
        assert feed_item_id(a) != feed_item_id(b)

    def test_html_to_text(self):
        assert html_to_text("<p>Hello&nbsp;<b>world</b> &amp; more</p>") == "Hello world & more"

    def test_entry_snippet_falls_back_to_content(self):
        entry = {"content": [{"value": "<p>Full text</p>"}]}
        assert entry_snippet(entry) == "Full text"
        assert entry_snippet({}) == ""


class TestFeedCollector:
    """Tests for FeedCollector.collect()."""

    @pytest.mark.asyncio
    async def test_newest_three_overall_from_two_feeds(self):
        """Two feeds x five entries: three newest per feed, three newest overall."""
        feeds = {
            "https://a.example.com/rss": (200, rss("Feed A", entries_for("a", [1, 3, 5, 7, 9]))),
            "https://b.example.com/rss": (200, rss("Feed B", entries_for("b", [2, 4, 6, 8, 10]))),
        }
        async with make_http(feeds) as http:
            collector = FeedCollector(http, list(feeds), clock=lambda: COLLECTED_AT)
            items = await collector.collect()

        assert [i.title for i in items] == ["b post 10", "a post 9", "b post 8"]
        assert all(i.source_kind == SourceKind.FEED for i in items)
        assert items[0].author == "Feed B"
        assert items[0].body == "About b on day 10"
        assert items[0].url == "https://b.example.com/posts/10"
        assert items[0].id == feed_item_id("https://b.example.com/posts/10")
        assert items[0].published_at == datetime(2024, 5, 10, 9, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_failing_feed_is_skipped(self):
        feeds = {
            "https://a.example.com/rss": (200, rss("Feed A", entries_for("a", [1, 2]))),
        }
        urls = ["https://missing.example.com/rss", "https://a.example.com/rss"]
        async with make_http(feeds) as http:
            items = await FeedCollector(http, urls, clock=lambda: COLLECTED_AT).collect()

        assert [i.title for i in items] == ["a post 2", "a post 1"]

    @pytest.mark.asyncio
    async def test_unparseable_feed_is_skipped(self):
        feeds = {
            "https://broken.example.com/rss": (200, b"this is not a feed"),
            "https://a.example.com/rss": (200, rss("Feed A", entries_for("a", [1]))),
        }
        async with make_http(feeds) as http:
            items = await FeedCollector(http, list(feeds), clock=lambda: COLLECTED_AT).collect()

        assert [i.title for i in items] == ["a post 1"]

    @pytest.mark.asyncio
    async def test_entries_without_link_or_title_are_skipped(self):
        entries = [
            {"title": "No link", "day": 3},
            {"link": "https://a.example.com/untitled", "day": 2},
            {"title": "Complete", "link": "https://a.example.com/ok", "day": 1},
        ]
        feeds = {"https://a.example.com/rss": (200, rss("Feed A", entries))}
        async with make_http(feeds) as http:
            items = await FeedCollector(http, list(feeds), clock=lambda: COLLECTED_AT).collect()

        assert [i.title for i in items] == ["Complete"]

    @pytest.mark.asyncio
    async def test_undated_entry_uses_collection_time(self):
        entries = [{"title": "Undated", "link": "https://a.example.com/u"}]
        feeds = {"https://a.example.com/rss": (200, rss("Feed A", entries))}
        async with make_http(feeds) as http:
            items = await FeedCollector(http, list(feeds), clock=lambda: COLLECTED_AT).collect()

        assert items[0].published_at == COLLECTED_AT

    @pytest.mark.asyncio
    async def test_legacy_ids_setting(self):
        feeds = {"https://a.example.com/rss": (200, rss("Feed A", entries_for("a", [1])))}
        async with make_http(feeds) as http:
            collector = FeedCollector(
                http, list(feeds), legacy_ids=True, clock=lambda: COLLECTED_AT
            )
            items = await collector.collect()

        assert items[0].id == feed_item_id("https://a.example.com/posts/1", legacy=True)

    @pytest.mark.asyncio
    async def test_no_feeds(self):
        async with make_http({}) as http:
            assert await FeedCollector(http, []).collect() == []


class TestFeedScenario:
    """Two feeds with five entries each, only some complete."""

    @pytest.mark.asyncio
    async def test_at_most_three_complete_articles_newest_first(self):
        def feed(prefix, days):
            entries = entries_for(prefix, days)
            # two entries per feed lack a link
            entries[1].pop("link")
            entries[3].pop("link")
            return rss(f"Feed {prefix}", entries)

        feeds = {
            "https://a.example.com/rss": (200, feed("a", [9, 7, 5, 3, 1])),
            "https://b.example.com/rss": (200, feed("b", [10, 8, 6, 4, 2])),
        }
        async with make_http(feeds) as http:
            items = await FeedCollector(http, list(feeds), clock=lambda: COLLECTED_AT).collect()

        assert len(items) <= 3
        assert all(i.url and i.title for i in items)
        published = [i.published_at for i in items]
        assert published == sorted(published, reverse=True)
        assert [i.title for i in items] == ["b post 10", "a post 9", "b post 6"]
