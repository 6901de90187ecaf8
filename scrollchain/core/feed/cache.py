"""
Feed cache.

Holds the most recent successful feed build as one immutable snapshot.
Replacing the snapshot is a single reference swap, so readers never see a
partially updated feed.

Dependencies: pydantic, time (stdlib)
System role: TTL cache for the feed reconstructor
"""

import time
from datetime import datetime, timezone
from typing import Callable

from pydantic import BaseModel, ConfigDict

from scrollchain.models.feed import FeedEntry


class FeedSnapshot(BaseModel):
    """One completed feed build."""

    model_config = ConfigDict(frozen=True)

    entries: tuple[FeedEntry, ...]
    limit_per_author: int
    max_total: int
    built_at: float
    built_at_utc: datetime


class FeedCache:
    """Single-snapshot cache with a freshness bound."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """
        Initialize empty cache.

        Args:
            clock: Monotonic seconds source (time.monotonic by default)
        """
        self.clock = clock or time.monotonic
        self._snapshot: FeedSnapshot | None = None

    @property
    def snapshot(self) -> FeedSnapshot | None:
        return self._snapshot

    def get(self, ttl_seconds: float, limit_per_author: int, max_total: int) -> FeedSnapshot | None:
        """
        Cached build for these parameters, if younger than the TTL.

        Returns:
            FeedSnapshot or None on miss, expiry or parameter mismatch
        """
        snapshot = self._snapshot
        if snapshot is None:
            return None
        if (snapshot.limit_per_author, snapshot.max_total) != (limit_per_author, max_total):
            return None
        if self.clock() - snapshot.built_at >= ttl_seconds:
            return None
        return snapshot

    def put(self, entries: list[FeedEntry], limit_per_author: int, max_total: int) -> FeedSnapshot:
        snapshot = FeedSnapshot(
            entries=tuple(entries),
            limit_per_author=limit_per_author,
            max_total=max_total,
            built_at=self.clock(),
            built_at_utc=datetime.now(timezone.utc),
        )
        self._snapshot = snapshot
        return snapshot

    def clear(self) -> None:
        self._snapshot = None

    def status(self, ttl_seconds: float) -> str:
        """Cache state: empty, fresh or stale."""
        snapshot = self._snapshot
        if snapshot is None:
            return "empty"
        if self.clock() - snapshot.built_at < ttl_seconds:
            return "fresh"
        return "stale"
