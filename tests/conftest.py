"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- clock: Mutable fake clock shared by components under test
- make_item: Factory for ContentItems of any source kind
- make_record: Factory for DedupRecords
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.models.schemas import ContentItem, ContentMetrics, DedupRecord, SourceKind

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable returning a controllable "now"."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_item():
    """Return a ContentItem factory with sensible per-kind defaults."""

    def _make(
        item_id: str,
        kind: SourceKind = SourceKind.FEED,
        published_at: Optional[datetime] = None,
        title: Optional[str] = None,
        body: str = "Body text",
        **kwargs,
    ) -> ContentItem:
        metrics = kwargs.pop("metrics", None)
        if metrics is None:
            if kind == SourceKind.SOCIAL:
                metrics = ContentMetrics(likes=10, shares=2)
            elif kind == SourceKind.REPO_TREND:
                metrics = ContentMetrics(stars=1234)
            else:
                metrics = ContentMetrics()
        return ContentItem(
            id=item_id,
            source_kind=kind,
            title=title if title is not None else f"Title {item_id}",
            body=body,
            url=kwargs.pop("url", f"https://example.com/{item_id}"),
            published_at=published_at or BASE_TIME,
            metrics=metrics,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_record():
    """Return a DedupRecord factory."""

    def _make(
        item_id: str,
        kind: SourceKind = SourceKind.FEED,
        recorded_at: datetime = BASE_TIME,
        retention: timedelta = timedelta(days=30),
    ) -> DedupRecord:
        return DedupRecord(
            id=item_id,
            recorded_at=recorded_at,
            source_kind=kind,
            title=f"Title {item_id}",
            url=f"https://example.com/{item_id}",
            expires_at=recorded_at + retention,
        )

    return _make
