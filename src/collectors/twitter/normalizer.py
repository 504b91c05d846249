"""X (Twitter) data normalizer.

Provides functions to transform X API v2 tweet objects to the unified
ContentItem schema.
"""

from datetime import datetime
from typing import Optional

from src.models.schemas import ContentItem, ContentMetrics, SourceKind


TWEET_ID_PREFIX = "twitter"
LEGACY_SEARCH_ID_PREFIX = "twitter_search"


def tweet_item_id(tweet_id: str, prefix: str = TWEET_ID_PREFIX) -> str:
    """Dedup key for a tweet, shared by timeline and search results.

    Older post history keyed search results as ``twitter_search_<id>``;
    pass ``LEGACY_SEARCH_ID_PREFIX`` to match those records.
    """
    return f"{prefix}_{tweet_id}"


def parse_twitter_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 ``created_at`` value such as ``2024-05-01T12:00:00.000Z``."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def transform_tweet(
    raw: dict,
    username: str,
    collected_at: datetime,
    id_prefix: str = TWEET_ID_PREFIX,
) -> ContentItem:
    """Transform a tweet to the unified ContentItem schema.

    Args:
        raw: Tweet object from the X API.
        username: Author handle (without @).
        collected_at: Fallback publication time when the tweet has none.
        id_prefix: Prefix of the dedup key.

    Returns:
        Normalized ContentItem instance
    """
    tweet_id = str(raw["id"])
    public_metrics = raw.get("public_metrics") or {}

    return ContentItem(
        id=tweet_item_id(tweet_id, id_prefix),
        source_kind=SourceKind.SOCIAL,
        title=f"@{username}",
        body=raw.get("text") or "",
        url=f"https://twitter.com/{username}/status/{tweet_id}",
        author=username,
        published_at=parse_twitter_timestamp(raw.get("created_at")) or collected_at,
        metrics=ContentMetrics(
            likes=public_metrics.get("like_count", 0),
            shares=public_metrics.get("retweet_count", 0),
        ),
    )
