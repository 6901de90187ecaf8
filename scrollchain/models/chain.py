"""
Chain head domain model.

Dependencies: pydantic
System role: Per-author pointer to the most recently confirmed unit
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class ChainHead(BaseModel):
    """Where an author's chain currently ends."""

    author_id: str
    latest_unit_id: str | None = None
    document_count: int = Field(default=0, ge=0)
    unit_count: int = Field(default=0, ge=0)
    last_updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChainStats(BaseModel):
    """Registry-wide totals."""

    total_authors: int
    active_authors: int
    total_documents: int
    total_units: int
