"""
Data Source Integrations.

This module contains collectors for gathering AI-related content:

- twitter: X API v2 posts from priority accounts and keyword searches
- feeds: RSS / Atom articles from AI lab blogs
- github_trending: Most-starred repositories on an AI topic
- aggregator: Runs all collectors concurrently for one cycle

Collectors share one interface: ``async collect() -> list[ContentItem]``.
They absorb failures scoped to one account, keyword, feed or query, so a
broken source contributes nothing instead of failing the cycle.

Example:
    from src.collectors import Aggregator, FeedCollector, GitHubTrendingCollector

    aggregator = Aggregator([twitter_collector, feed_collector, github_collector])
    batch = await aggregator.collect_all()
"""

from src.collectors.aggregator import AggregateBatch, Aggregator
from src.collectors.base import BaseCollector
from src.collectors.feeds import FeedCollector, feed_item_id
from src.collectors.github_trending import GitHubTrendingCollector, repo_item_id
from src.collectors.twitter import TwitterClient, TwitterCollector, tweet_item_id

__all__ = [
    "AggregateBatch",
    "Aggregator",
    "BaseCollector",
    "FeedCollector",
    "GitHubTrendingCollector",
    "TwitterClient",
    "TwitterCollector",
    "feed_item_id",
    "repo_item_id",
    "tweet_item_id",
]
