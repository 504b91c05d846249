"""X (Twitter) API v2 client.

Provides async methods for user lookup, user timelines and recent search.
Each call may fail independently; failures surface as collector exceptions.

API Reference: https://developer.x.com/en/docs/x-api
"""

from typing import Any, Optional

import httpx
import structlog

from src.core.exceptions import CollectorNotFoundError
from src.core.http import fetch_json

logger = structlog.get_logger(__name__)

TWEET_FIELDS = "created_at,public_metrics,author_id"
USER_FIELDS = "username,verified"


class TwitterClient:
    """Thin async wrapper over the X API v2 endpoints the social collector uses.

    Example:
        client = TwitterClient(http_client, bearer_token="...")
        user = await client.get_user_by_username("karpathy")
        tweets = await client.get_user_timeline(user["id"], max_results=5)
    """

    COLLECTOR_TYPE = "twitter"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        bearer_token: str,
        base_url: str = "https://api.twitter.com/2",
    ):
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {bearer_token}"}

    async def _get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return await fetch_json(
            self._http,
            f"{self._base_url}/{endpoint}",
            collector_type=self.COLLECTOR_TYPE,
            params=params,
            headers=self._headers,
        )

    async def get_user_by_username(self, username: str) -> dict[str, Any]:
        """Look up a user by handle.

        Raises:
            CollectorNotFoundError: If the account does not exist.
        """
        payload = await self._get(f"users/by/username/{username}")
        user = payload.get("data")
        if not user:
            raise CollectorNotFoundError(
                self.COLLECTOR_TYPE,
                f"User not found: @{username}",
                {"username": username},
            )
        return user

    async def get_user_timeline(self, user_id: str, max_results: int = 5) -> list[dict[str, Any]]:
        """Fetch a user's most recent original posts (no retweets or replies)."""
        payload = await self._get(
            f"users/{user_id}/tweets",
            params={
                "max_results": max_results,
                "tweet.fields": TWEET_FIELDS,
                "exclude": "retweets,replies",
            },
        )
        return payload.get("data") or []

    async def search_recent(
        self, query: str, max_results: int = 10
    ) -> tuple[list[dict[str, Any]], dict[str, dict[str, Any]]]:
        """Search recent posts.

        Returns:
            Tuple of (tweets, users keyed by id) from the author_id expansion.
        """
        payload = await self._get(
            "tweets/search/recent",
            params={
                "query": query,
                "max_results": max_results,
                "tweet.fields": TWEET_FIELDS,
                "user.fields": USER_FIELDS,
                "expansions": "author_id",
            },
        )
        users = {
            user["id"]: user
            for user in (payload.get("includes") or {}).get("users", [])
            if user.get("id")
        }
        return payload.get("data") or [], users
