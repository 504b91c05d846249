"""Pydantic models for AI Insights Bot core entities."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceKind(str, Enum):
    """Kind of source a content item was collected from.

    Declaration order is the order sources are aggregated and rendered in.
    """
    SOCIAL = "social"
    FEED = "feed"
    REPO_TREND = "repo_trend"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# Content
# =============================================================================


class ContentMetrics(BaseModel):
    """Kind-specific numeric signals used for filtering and display."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    likes: Optional[int] = Field(None, ge=0)
    shares: Optional[int] = Field(None, ge=0)
    stars: Optional[int] = Field(None, ge=0)


class ContentItem(BaseModel):
    """Normalized unit of collected content from any source.

    Items are immutable once constructed. ``id`` is derived from the
    source-native identifier so re-collecting an item yields the same id.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Stable dedup key, prefixed by source")
    source_kind: SourceKind
    title: str = ""
    body: str = ""
    url: str = Field(..., description="Canonical link")
    author: Optional[str] = None
    published_at: datetime = Field(..., description="Publication instant (UTC)")
    metrics: ContentMetrics = Field(default_factory=ContentMetrics)
    extra: dict[str, Any] = Field(default_factory=dict)

    @field_validator("published_at")
    @classmethod
    def _normalize_timezone(cls, value: datetime) -> datetime:
        return _as_utc(value)


# =============================================================================
# Post history
# =============================================================================


class DedupRecord(BaseModel):
    """Persisted marker proving an item was already delivered.

    Created exactly once per delivered item and never updated. After
    ``expires_at`` the record may be purged, and its item counts as new again.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    recorded_at: datetime
    source_kind: SourceKind
    title: str = ""
    url: str = ""
    expires_at: datetime

    @field_validator("recorded_at", "expires_at")
    @classmethod
    def _normalize_timezone(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @classmethod
    def for_item(
        cls, item: ContentItem, recorded_at: datetime, expires_at: datetime
    ) -> "DedupRecord":
        return cls(
            id=item.id,
            recorded_at=recorded_at,
            source_kind=item.source_kind,
            title=item.title,
            url=item.url,
            expires_at=expires_at,
        )

    def is_expired(self, now: datetime) -> bool:
        return _as_utc(now) >= self.expires_at


# =============================================================================
# Messages and run results
# =============================================================================


class ChatMessage(BaseModel):
    """Structured chat message: Block Kit blocks plus plain-text fallback."""

    text: str
    blocks: list[dict[str, Any]] = Field(default_factory=list)


class CycleResult(BaseModel):
    """Outcome of one collection cycle."""

    total_collected: int = Field(..., ge=0)
    new_items_delivered: int = Field(..., ge=0)
    processing_time_ms: int = Field(..., ge=0)
    collected_by_source: dict[str, int] = Field(default_factory=dict)
    recorded: int = Field(0, ge=0, description="Post-history records written")


class DigestResult(BaseModel):
    """Outcome of one weekly digest run."""

    posts_count: int = Field(..., ge=0)
    breakdown: dict[str, int] = Field(default_factory=dict)
    posted: bool = False

    @property
    def nothing_to_report(self) -> bool:
        return self.posts_count == 0


class RunOutcome(BaseModel):
    """Structured success/failure envelope returned to whichever trigger ran a job."""

    success: bool
    job: str
    message: str
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
