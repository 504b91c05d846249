"""
Data Models and Schemas.

This module defines the data structures shared by every stage of the pipeline:

- ContentItem: normalized unit of collected content (social post, article, repository)
- DedupRecord: persisted marker proving an item was already delivered
- ChatMessage: rendered Block Kit message
- CycleResult / DigestResult / RunOutcome: results reported to triggers

Example:
    from src.models import ContentItem, SourceKind

    item = ContentItem(
        id="github_123",
        source_kind=SourceKind.REPO_TREND,
        title="transformers",
        url="https://github.com/huggingface/transformers",
        published_at=datetime.now(timezone.utc),
    )
"""

from src.models.schemas import (
    ChatMessage,
    ContentItem,
    ContentMetrics,
    CycleResult,
    DedupRecord,
    DigestResult,
    RunOutcome,
    SourceKind,
    utc_now,
)

__all__ = [
    # Enums
    "SourceKind",
    # Content
    "ContentItem",
    "ContentMetrics",
    "DedupRecord",
    # Messages and results
    "ChatMessage",
    "CycleResult",
    "DigestResult",
    "RunOutcome",
    "utc_now",
]
