"""
Feed domain models.

Dependencies: pydantic
System role: Entries produced by chain reconstruction
"""

from datetime import datetime

from pydantic import BaseModel, Field


class FeedEntry(BaseModel):
    """One unit read back from an author's chain."""

    model_config = {"frozen": True}

    unit_id: str
    author_id: str
    timestamp: int = Field(description="Publish time, milliseconds since epoch")
    body: str
    previous_unit_id: str | None = None
    operation_id: str | None = None
    chunk_index: int = 0
    total_chunks: int = 1


class FeedStats(BaseModel):
    """Feed cache and registry summary."""

    total_authors: int
    active_authors: int
    cache_status: str
    last_built_at: datetime | None = None
    cached_entries: int = 0


class DocumentView(BaseModel):
    """A document reassembled from one operation's units."""

    author_id: str
    operation_id: str
    text: str
    total_chunks: int
    unit_ids: list[str] = Field(description="Unit ids in chunk order")
