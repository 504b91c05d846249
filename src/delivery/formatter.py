"""Render a batch of new content items as a Slack Block Kit message.

Layout:
    header
    context  (date in the display timezone | item count)
    divider
    per present source kind, in fixed order social -> feed -> repo_trend:
        section title, one section per item, divider between groups
"""

from datetime import datetime
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from src.models.schemas import ChatMessage, ContentItem, SourceKind, utc_now

HEADER_TEXT = ":robot_face: AI News Roundup"

SOCIAL_TEXT_CAP = 140
FEED_EXCERPT_CAP = 100

GROUP_TITLES = {
    SourceKind.SOCIAL: "*:bird: Notable posts on X*",
    SourceKind.FEED: "*:newspaper: Latest articles*",
    SourceKind.REPO_TREND: "*:star: GitHub trending*",
}


def escape_mrkdwn(text: str) -> str:
    """Escape &, <, > so they don't break Slack mrkdwn."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def truncate(text: str, cap: int) -> str:
    """Cut text to exactly ``cap`` characters plus "..." when it is longer.

    Caps count displayed characters: callers escape after truncating, so an
    ``&amp;`` in the payload is one character here.
    """
    if len(text) <= cap:
        return text
    return f"{text[:cap]}..."


def section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def header(text: str) -> dict:
    return {"type": "header", "text": {"type": "plain_text", "text": text, "emoji": True}}


def context(text: str) -> dict:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


DIVIDER = {"type": "divider"}


def group_by_kind(items: Sequence[ContentItem]) -> dict[SourceKind, list[ContentItem]]:
    """Bucket items per source kind in fixed kind order, keeping item order."""
    groups: dict[SourceKind, list[ContentItem]] = {kind: [] for kind in SourceKind}
    for item in items:
        groups[item.source_kind].append(item)
    return {kind: group for kind, group in groups.items() if group}


class DeliveryFormatter:
    """Turns a non-empty list of new items into one chat message.

    Args:
        timezone: IANA zone used for the date in the summary line
        social_cap: Character cap for post text
        feed_cap: Character cap for article excerpts
        clock: Current-time source (tests)
    """

    def __init__(
        self,
        timezone: str = "Asia/Tokyo",
        social_cap: int = SOCIAL_TEXT_CAP,
        feed_cap: int = FEED_EXCERPT_CAP,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.timezone = ZoneInfo(timezone)
        self.social_cap = social_cap
        self.feed_cap = feed_cap
        self._clock = clock

    def today(self) -> str:
        return self._clock().astimezone(self.timezone).strftime("%Y-%m-%d")

    def render(self, items: Sequence[ContentItem]) -> ChatMessage:
        if not items:
            raise ValueError("Cannot render a message without items")

        count = len(items)
        blocks: list[dict] = [
            header(HEADER_TEXT),
            context(f":calendar: {self.today()} | {count} new item{'s' if count != 1 else ''}"),
            DIVIDER,
        ]

        groups = group_by_kind(items)
        for index, (kind, group) in enumerate(groups.items()):
            if index:
                blocks.append(DIVIDER)
            blocks.append(section(GROUP_TITLES[kind]))
            blocks.extend(section(self.render_item(item)) for item in group)

        return ChatMessage(
            text=f"{HEADER_TEXT} - {count} new item{'s' if count != 1 else ''}",
            blocks=blocks,
        )

    def render_item(self, item: ContentItem) -> str:
        if item.source_kind == SourceKind.SOCIAL:
            return self._render_social(item)
        if item.source_kind == SourceKind.FEED:
            return self._render_feed(item)
        return self._render_repo(item)

    def _render_social(self, item: ContentItem) -> str:
        text = (
            f"*{escape_mrkdwn(item.title)}*\n"
            f"{escape_mrkdwn(truncate(item.body, self.social_cap))}\n"
            f"<{item.url}|View post>"
        )
        likes, shares = item.metrics.likes, item.metrics.shares
        if likes is not None or shares is not None:
            text += f" | :heart: {likes or 0} | :repeat: {shares or 0}"
        return text

    def _render_feed(self, item: ContentItem) -> str:
        text = f"*<{item.url}|{escape_mrkdwn(item.title)}>*"
        if item.body:
            text += f"\n{escape_mrkdwn(truncate(item.body, self.feed_cap))}"
        return text

    def _render_repo(self, item: ContentItem) -> str:
        stars = item.metrics.stars or 0
        language: Optional[str] = item.extra.get("language")
        text = f"*<{item.url}|{escape_mrkdwn(item.title)}>* (:star: {stars:,})"
        if item.body:
            text += f"\n{escape_mrkdwn(item.body)}"
        text += f"\n_Language: {escape_mrkdwn(language or 'Unknown')}_"
        return text
