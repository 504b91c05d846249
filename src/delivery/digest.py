"""Weekly digest built from the post history."""

from datetime import datetime
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from src.delivery.formatter import DIVIDER, GROUP_TITLES, context, escape_mrkdwn, header, section
from src.models.schemas import ChatMessage, DedupRecord, SourceKind, utc_now

DIGEST_HEADER = ":bar_chart: Weekly AI News Digest"
RECENT_PER_KIND = 3


def breakdown_by_kind(records: Sequence[DedupRecord]) -> dict[str, int]:
    """Count records per source kind, omitting kinds with none."""
    counts = {kind.value: 0 for kind in SourceKind}
    for record in records:
        counts[record.source_kind.value] += 1
    return {kind: count for kind, count in counts.items() if count}


class DigestBuilder:
    """Summarize the records delivered during the digest window.

    Returns None from ``build`` when the window is empty so callers can skip
    posting instead of sending an empty digest.
    """

    def __init__(
        self,
        timezone: str = "Asia/Tokyo",
        recent_per_kind: int = RECENT_PER_KIND,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.timezone = ZoneInfo(timezone)
        self.recent_per_kind = recent_per_kind
        self._clock = clock

    def build(self, records: Sequence[DedupRecord]) -> Optional[ChatMessage]:
        if not records:
            return None

        total = len(records)
        breakdown = breakdown_by_kind(records)
        summary = " | ".join(f"{kind}: {count}" for kind, count in breakdown.items())
        today = self._clock().astimezone(self.timezone).strftime("%Y-%m-%d")

        blocks: list[dict] = [
            header(DIGEST_HEADER),
            context(f":calendar: week ending {today} | {total} items delivered"),
            section(f"*Breakdown:* {summary}"),
        ]

        for kind in SourceKind:
            recent = sorted(
                (r for r in records if r.source_kind == kind),
                key=lambda r: r.recorded_at,
                reverse=True,
            )[: self.recent_per_kind]
            if not recent:
                continue
            blocks.append(DIVIDER)
            blocks.append(section(GROUP_TITLES[kind]))
            blocks.append(section("\n".join(self._render_line(r) for r in recent)))

        return ChatMessage(text=f"{DIGEST_HEADER} - {total} items this week", blocks=blocks)

    @staticmethod
    def _render_line(record: DedupRecord) -> str:
        title = escape_mrkdwn(record.title or record.id)
        if record.url:
            return f"- <{record.url}|{title}>"
        return f"- {title}"
