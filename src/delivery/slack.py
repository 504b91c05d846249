"""Slack Web API client for posting rendered messages."""

from typing import Any

import httpx
import structlog

from src.core.exceptions import DeliveryError
from src.models.schemas import ChatMessage

logger = structlog.get_logger(__name__)

SLACK_API_BASE = "https://slack.com/api"


class SlackPoster:
    """Posts ChatMessages through ``chat.postMessage``.

    Posting is not retried: a resent message would reach the channel twice.
    Any failure raises DeliveryError and ends the run before items are
    recorded as delivered.

    Args:
        http_client: Shared httpx client
        token: Bot token (xoxb-...)
        api_base: Slack Web API base URL
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str,
        api_base: str = SLACK_API_BASE,
    ):
        self.http_client = http_client
        self.token = token
        self.api_base = api_base.rstrip("/")

    async def post(self, channel: str, message: ChatMessage) -> dict[str, Any]:
        """Post a message and return Slack's response payload."""
        payload = {"channel": channel, "text": message.text, "blocks": message.blocks}

        try:
            response = await self.http_client.post(
                f"{self.api_base}/chat.postMessage",
                json=payload,
                headers={"Authorization": f"Bearer {self.token}"},
            )
        except httpx.HTTPError as e:
            logger.error("slack_post_failed", channel=channel, error=str(e))
            raise DeliveryError(channel, f"Request failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "slack_post_failed",
                channel=channel,
                status_code=response.status_code,
            )
            raise DeliveryError(
                channel,
                f"HTTP {response.status_code}",
                {"body": response.text[:500]},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DeliveryError(channel, "Invalid JSON in response") from e

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            logger.error("slack_post_rejected", channel=channel, error=error)
            raise DeliveryError(channel, f"Slack API error: {error}", {"error": error})

        logger.info("slack_post_succeeded", channel=channel, ts=data.get("ts"))
        return data
