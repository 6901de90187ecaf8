"""
Publish operation domain models.

Tracks one document's chunks through submission to the ledger.

Dependencies: pydantic
System role: State owned by the publish orchestrator
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from scrollchain.models.chunk import Chunk


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PublishStage(str, Enum):
    """Publish operation lifecycle stages."""

    PREPARING = "preparing"
    PUBLISHING = "publishing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    ERROR = "error"
    CANCELLED = "cancelled"


TERMINAL_STAGES = frozenset({PublishStage.COMPLETED, PublishStage.CANCELLED})
RESUMABLE_STAGES = frozenset({PublishStage.PARTIAL, PublishStage.ERROR})


class ChunkState(str, Enum):
    """Per-chunk submission state."""

    PENDING = "pending"
    PUBLISHED = "published"
    FAILED = "failed"


class ChunkStatus(BaseModel):
    """Submission status of one chunk."""

    state: ChunkState = ChunkState.PENDING
    unit_id: str | None = None
    error: str | None = None
    attempts: int = 0
    published_at: datetime | None = None


class PublishOperation(BaseModel):
    """A document being published as an ordered sequence of units."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    operation_id: str
    author_id: str
    chunks: list[Chunk]
    chunk_status: dict[int, ChunkStatus] = Field(default_factory=dict)
    stage: PublishStage = PublishStage.PREPARING
    progress: int = Field(default=0, ge=0, le=100)
    base_unit_id: str | None = Field(
        default=None, description="Unit chunk 0 links back to (previous chain head)"
    )
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    @property
    def published_count(self) -> int:
        return sum(1 for s in self.chunk_status.values() if s.state == ChunkState.PUBLISHED)

    @property
    def failed_count(self) -> int:
        return sum(1 for s in self.chunk_status.values() if s.state == ChunkState.FAILED)

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    @property
    def unit_ids(self) -> list[str]:
        """Unit ids of published chunks, in index order."""
        return [
            self.chunk_status[chunk.index].unit_id
            for chunk in self.chunks
            if self.chunk_status[chunk.index].state == ChunkState.PUBLISHED
        ]

    @property
    def last_unit_id(self) -> str | None:
        """Unit id of the final chunk, once it is published."""
        if not self.chunks:
            return None
        return self.chunk_status[self.chunks[-1].index].unit_id

    def status_of(self, index: int) -> ChunkStatus:
        return self.chunk_status[index]

    def chunks_needing_work(self) -> list[Chunk]:
        """Chunks whose status is pending or failed, in index order."""
        return [
            chunk
            for chunk in self.chunks
            if self.chunk_status[chunk.index].state != ChunkState.PUBLISHED
        ]

    def link_for(self, index: int) -> str | None:
        """
        Previous unit id embedded in the unit for chunk `index`.

        Chunk 0 links to the author's previous chain unit; every later
        chunk links to the unit of the chunk before it.
        """
        if index == 0:
            return self.base_unit_id
        return self.chunk_status[index - 1].unit_id


class PublishManifest(BaseModel):
    """Record of a fully confirmed operation, used to verify read-back."""

    operation_id: str
    author_id: str
    total_chunks: int
    chunk_hashes: list[str]
    unit_ids: list[str]
    recorded_at: datetime = Field(default_factory=utc_now)
