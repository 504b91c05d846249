"""
Message rendering and delivery.

- formatter: Block Kit message for a batch of new items
- digest: weekly summary built from the post history
- slack: chat.postMessage client

Example:
    from src.delivery import DeliveryFormatter, SlackPoster

    message = DeliveryFormatter(timezone="Asia/Tokyo").render(new_items)
    await poster.post("#ai-news", message)
"""

from src.delivery.digest import DigestBuilder
from src.delivery.formatter import DeliveryFormatter, escape_mrkdwn, truncate
from src.delivery.slack import SlackPoster

__all__ = [
    "DeliveryFormatter",
    "DigestBuilder",
    "SlackPoster",
    "escape_mrkdwn",
    "truncate",
]
