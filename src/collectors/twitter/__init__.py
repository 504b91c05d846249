"""X (Twitter) collector module.

Provides TwitterCollector for collecting and normalizing AI-related posts
from priority accounts and keyword searches via the X API v2.
"""

from src.collectors.twitter.client import TwitterClient
from src.collectors.twitter.collector import TwitterCollector
from src.collectors.twitter.normalizer import transform_tweet, tweet_item_id

__all__ = [
    "TwitterClient",
    "TwitterCollector",
    "transform_tweet",
    "tweet_item_id",
]
