"""X (Twitter) collector extending BaseCollector.

Polls a short list of priority accounts and a couple of keyword searches,
keeps AI-related or high-signal posts, and returns the newest few.

Requests go out one at a time with a fixed pause between them to stay under
the API's rate limits. A failing account or keyword is logged and skipped.
"""

import asyncio
from datetime import datetime
from typing import Callable, Sequence

import structlog

from src.collectors.base import BaseCollector, newest_first
from src.collectors.twitter.client import TwitterClient
from src.collectors.twitter.normalizer import (
    LEGACY_SEARCH_ID_PREFIX,
    TWEET_ID_PREFIX,
    transform_tweet,
)
from src.core.throttle import Sleeper, ThrottledSequence
from src.models.schemas import ContentItem, SourceKind, utc_now

logger = structlog.get_logger(__name__)

FINGERPRINT_LENGTH = 50


def is_ai_related(text: str, keywords: Sequence[str]) -> bool:
    """Case-insensitive substring match against the relevance keyword set."""
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def dedupe_by_fingerprint(items: list[ContentItem]) -> list[ContentItem]:
    """Drop items whose first 50 body characters were already seen. First one wins."""
    seen: set[str] = set()
    unique = []
    for item in items:
        fingerprint = item.body[:FINGERPRINT_LENGTH]
        if fingerprint in seen:
            continue
        seen.add(fingerprint)
        unique.append(item)
    return unique


class TwitterCollector(BaseCollector):
    """Collector for AI-related posts on X.

    Example:
        collector = TwitterCollector(
            TwitterClient(http_client, bearer_token),
            accounts=["OpenAI", "karpathy"],
            search_keywords=["LLM"],
            relevance_keywords=["AI", "LLM"],
        )
        items = await collector.collect()
    """

    source_kind = SourceKind.SOCIAL

    def __init__(
        self,
        client: TwitterClient,
        accounts: Sequence[str],
        search_keywords: Sequence[str],
        relevance_keywords: Sequence[str],
        *,
        max_accounts: int = 5,
        posts_per_account: int = 5,
        max_search_keywords: int = 2,
        results_per_keyword: int = 10,
        engagement_threshold: int = 20,
        max_items: int = 5,
        legacy_search_ids: bool = False,
        request_delay: float = 1.0,
        sleep: Sleeper = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the X collector.

        Args:
            client: X API client.
            accounts: Priority accounts, most important first.
            search_keywords: Search terms, most important first.
            relevance_keywords: Substrings that mark a timeline post as AI-related.
            max_accounts: How many accounts to poll per run.
            posts_per_account: Timeline posts fetched per account.
            max_search_keywords: How many keywords to search per run.
            results_per_keyword: Search results fetched per keyword.
            engagement_threshold: Likes a search result must exceed unless its
                author is verified.
            max_items: Items returned after sorting.
            legacy_search_ids: Key search results as ``twitter_search_<id>`` to
                stay compatible with older post history.
            request_delay: Seconds between consecutive account/keyword requests.
            sleep: Pause function used by the throttle.
            clock: Returns the collection time.
        """
        self.client = client
        self.accounts = list(accounts)
        self.search_keywords = list(search_keywords)
        self.relevance_keywords = list(relevance_keywords)
        self.max_accounts = max_accounts
        self.posts_per_account = posts_per_account
        self.max_search_keywords = max_search_keywords
        self.results_per_keyword = results_per_keyword
        self.engagement_threshold = engagement_threshold
        self.max_items = max_items
        self.search_id_prefix = LEGACY_SEARCH_ID_PREFIX if legacy_search_ids else TWEET_ID_PREFIX
        self.request_delay = request_delay
        self._sleep = sleep
        self._clock = clock

    async def collect(self) -> list[ContentItem]:
        collected_at = self._clock()
        targets = [("account", name) for name in self.accounts[: self.max_accounts]]
        targets += [("keyword", kw) for kw in self.search_keywords[: self.max_search_keywords]]

        items: list[ContentItem] = []
        async for target_type, target in ThrottledSequence(
            targets, delay=self.request_delay, sleep=self._sleep
        ):
            try:
                if target_type == "account":
                    found = await self.collect_account(target, collected_at)
                else:
                    found = await self.search_keyword(target, collected_at)
                items.extend(found)
            except Exception as e:
                logger.warning(
                    "twitter_target_failed",
                    target_type=target_type,
                    target=target,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        results = newest_first(dedupe_by_fingerprint(items), self.max_items)
        logger.info(
            "twitter_collected",
            candidates=len(items),
            count=len(results),
        )
        return results

    async def collect_account(self, username: str, collected_at: datetime) -> list[ContentItem]:
        """Collect recent AI-related original posts from one account."""
        user = await self.client.get_user_by_username(username)
        tweets = await self.client.get_user_timeline(
            str(user["id"]), max_results=self.posts_per_account
        )

        handle = user.get("username") or username
        results = [
            transform_tweet(tweet, handle, collected_at)
            for tweet in tweets
            if is_ai_related(tweet.get("text") or "", self.relevance_keywords)
        ]
        logger.debug("twitter_account_collected", username=username, count=len(results))
        return results

    async def search_keyword(self, keyword: str, collected_at: datetime) -> list[ContentItem]:
        """Collect recent posts matching a keyword from verified or popular authors."""
        tweets, users = await self.client.search_recent(
            f'"{keyword}" -is:retweet lang:en', max_results=self.results_per_keyword
        )

        results = []
        for tweet in tweets:
            author = users.get(str(tweet.get("author_id")))
            if not author:
                continue
            likes = (tweet.get("public_metrics") or {}).get("like_count", 0)
            if author.get("verified") or likes > self.engagement_threshold:
                results.append(
                    transform_tweet(tweet, author["username"], collected_at, self.search_id_prefix)
                )

        logger.debug("twitter_keyword_collected", keyword=keyword, count=len(results))
        return results
