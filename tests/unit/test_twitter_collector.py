"""Unit tests for the X (Twitter) collector.

The X API client is replaced with AsyncMocks; the throttle's sleep is a
no-op AsyncMock so tests run instantly and can count pauses.
"""

from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.collectors.twitter.collector import (
    TwitterCollector,
    dedupe_by_fingerprint,
    is_ai_related,
)
from src.collectors.twitter.normalizer import (
    LEGACY_SEARCH_ID_PREFIX,
    transform_tweet,
    tweet_item_id,
)
from src.core.exceptions import CollectorAuthError, CollectorNotFoundError
from src.models.schemas import SourceKind

COLLECTED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
KEYWORDS = ["AI", "LLM", "machine learning"]


def tweet(tweet_id, text, hour=10, likes=0, retweets=0, author_id="u1"):
    return {
        "id": str(tweet_id),
        "text": text,
        "created_at": f"2024-05-01T{hour:02d}:00:00.000Z",
        "public_metrics": {"like_count": likes, "retweet_count": retweets},
        "author_id": author_id,
    }


@pytest.fixture
def client():
    """Fake TwitterClient: every account exists, no posts unless configured."""
    fake = MagicMock()
    fake.get_user_by_username = AsyncMock(
        side_effect=lambda username: {"id": f"id_{username}", "username": username}
    )
    fake.get_user_timeline = AsyncMock(return_value=[])
    fake.search_recent = AsyncMock(return_value=([], {}))
    return fake


def make_collector(client, accounts=("OpenAI",), search_keywords=(), **kwargs):
    kwargs.setdefault("sleep", AsyncMock())
    kwargs.setdefault("clock", lambda: COLLECTED_AT)
    return TwitterCollector(client, list(accounts), list(search_keywords), KEYWORDS, **kwargs)


class TestHelpers:
    """Tests for relevance and fingerprint helpers."""

    def test_is_ai_related_case_insensitive(self):
        assert is_ai_related("New llm benchmark released", KEYWORDS)
        assert is_ai_related("Advances in Machine Learning", KEYWORDS)
        assert not is_ai_related("Lunch was great today", KEYWORDS)

    def test_dedupe_by_fingerprint_keeps_first(self):
        prefix = "x" * 50
        first = transform_tweet(tweet(1, prefix + " first"), "a", COLLECTED_AT)
        second = transform_tweet(tweet(2, prefix + " second"), "b", COLLECTED_AT)
        other = transform_tweet(tweet(3, "different text"), "c", COLLECTED_AT)

        assert dedupe_by_fingerprint([first, second, other]) == [first, other]

    def test_transform_tweet(self):
        item = transform_tweet(tweet(42, "Hello AI", likes=7, retweets=3), "karpathy", COLLECTED_AT)

        assert item.id == "twitter_42" == tweet_item_id("42")
        assert item.source_kind == SourceKind.SOCIAL
        assert item.title == "@karpathy"
        assert item.url == "https://twitter.com/karpathy/status/42"
        assert item.metrics.likes == 7
        assert item.metrics.shares == 3
        assert item.published_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_transform_tweet_without_timestamp_uses_collection_time(self):
        raw = tweet(1, "AI")
        del raw["created_at"]
        assert transform_tweet(raw, "a", COLLECTED_AT).published_at == COLLECTED_AT


class TestTwitterCollector:
    """Tests for TwitterCollector.collect()."""

    @pytest.mark.asyncio
    async def test_account_posts_filtered_by_relevance(self, client):
        client.get_user_timeline.return_value = [
            tweet(1, "Our new LLM is out"),
            tweet(2, "Happy Friday everyone"),
        ]
        items = await make_collector(client).collect()

        assert [i.id for i in items] == ["twitter_1"]
        client.get_user_timeline.assert_awaited_once_with("id_OpenAI", max_results=5)

    @pytest.mark.asyncio
    async def test_search_keeps_verified_or_popular_authors(self, client):
        client.search_recent.return_value = (
            [
                tweet(1, "verified author", author_id="v"),
                tweet(2, "popular post", likes=21, author_id="p"),
                tweet(3, "at threshold", likes=20, author_id="p"),
                tweet(4, "unknown author", likes=500, author_id="missing"),
            ],
            {
                "v": {"id": "v", "username": "verified", "verified": True},
                "p": {"id": "p", "username": "popular", "verified": False},
            },
        )
        items = await make_collector(client, accounts=(), search_keywords=["LLM"]).collect()

        assert sorted(i.id for i in items) == ["twitter_1", "twitter_2"]
        query = client.search_recent.await_args.args[0]
        assert query == '"LLM" -is:retweet lang:en'

    @pytest.mark.asyncio
    async def test_legacy_search_ids(self, client):
        client.search_recent.return_value = (
            [tweet(1, "verified author", author_id="v")],
            {"v": {"id": "v", "username": "verified", "verified": True}},
        )
        client.get_user_timeline.return_value = [tweet(2, "New AI model")]
        collector = make_collector(client, search_keywords=["LLM"], legacy_search_ids=True)

        items = await collector.collect()

        assert sorted(i.id for i in items) == ["twitter_2", "twitter_search_1"]
        assert tweet_item_id("1", LEGACY_SEARCH_ID_PREFIX) == "twitter_search_1"

    @pytest.mark.asyncio
    async def test_failing_account_is_skipped(self, client):
        async def lookup(username):
            if username == "gone":
                raise CollectorNotFoundError("twitter", "User not found: @gone")
            return {"id": f"id_{username}", "username": username}

        client.get_user_by_username.side_effect = lookup
        client.get_user_timeline.return_value = [tweet(1, "AI news")]

        items = await make_collector(client, accounts=("gone", "OpenAI")).collect()

        assert [i.id for i in items] == ["twitter_1"]
        assert items[0].author == "OpenAI"

    @pytest.mark.asyncio
    async def test_failing_search_does_not_lose_account_posts(self, client):
        client.get_user_timeline.return_value = [tweet(1, "AI news")]
        client.search_recent.side_effect = CollectorAuthError("twitter", "Not authorized")

        items = await make_collector(client, search_keywords=["LLM"]).collect()

        assert [i.id for i in items] == ["twitter_1"]

    @pytest.mark.asyncio
    async def test_only_first_accounts_and_keywords_used(self, client):
        sleep = AsyncMock()
        accounts = [f"acct{i}" for i in range(14)]
        keywords = ["k1", "k2", "k3", "k4", "k5", "k6"]

        await make_collector(client, accounts=accounts, search_keywords=keywords, sleep=sleep).collect()

        polled = [c.args[0] for c in client.get_user_by_username.await_args_list]
        assert polled == accounts[:5]
        assert client.search_recent.await_count == 2
        # 7 requests in sequence, one pause between each
        assert sleep.await_count == 6
        sleep.assert_awaited_with(1.0)

    @pytest.mark.asyncio
    async def test_returns_newest_five_after_dedupe(self, client):
        client.get_user_timeline.return_value = [
            tweet(i, f"AI update number {i}", hour=i) for i in range(1, 8)
        ] + [tweet(99, "AI update number 7", hour=23)]

        items = await make_collector(client, posts_per_account=10).collect()

        # tweet 7 and 99 share a fingerprint; 7 came first and wins
        assert [i.id for i in items] == [
            "twitter_7",
            "twitter_6",
            "twitter_5",
            "twitter_4",
            "twitter_3",
        ]

    @pytest.mark.asyncio
    async def test_no_accounts_or_keywords(self, client):
        assert await make_collector(client, accounts=()).collect() == []
        client.get_user_by_username.assert_not_awaited()
