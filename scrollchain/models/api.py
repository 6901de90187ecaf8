"""
HTTP request and response models.

Dependencies: pydantic, scrollchain.models
System role: API contract for the FastAPI routers
"""

from datetime import datetime

from pydantic import BaseModel, Field

from scrollchain.models.feed import FeedEntry, FeedStats
from scrollchain.models.operation import ChunkStatus, PublishOperation, PublishStage


class PublishRequest(BaseModel):
    """Publish a document for an author."""

    author_id: str = Field(min_length=1, description="Author public identity")
    document: str = Field(min_length=1, description="Document text")


class ResumeRequest(BaseModel):
    """Resume a partial or failed operation."""

    author_id: str | None = Field(
        default=None, description="Author public identity (operation author when omitted)"
    )


class OperationResponse(BaseModel):
    """Status view of a publish operation (without chunk payloads)."""

    operation_id: str
    author_id: str
    stage: PublishStage
    progress: int
    total_chunks: int
    published_count: int
    failed_count: int
    chunk_status: dict[int, ChunkStatus]
    unit_ids: list[str]
    error: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_operation(cls, operation: PublishOperation) -> "OperationResponse":
        return cls(
            operation_id=operation.operation_id,
            author_id=operation.author_id,
            stage=operation.stage,
            progress=operation.progress,
            total_chunks=operation.total_chunks,
            published_count=operation.published_count,
            failed_count=operation.failed_count,
            chunk_status=operation.chunk_status,
            unit_ids=operation.unit_ids,
            error=operation.error,
            created_at=operation.created_at,
            updated_at=operation.updated_at,
        )


class FeedResponse(BaseModel):
    """Merged feed."""

    entries: list[FeedEntry]
    count: int
    stats: FeedStats


class AuthorUnitsResponse(BaseModel):
    """Units walked from one author's head."""

    author_id: str
    units: list[FeedEntry]
    count: int


class RootGenesisRequest(BaseModel):
    """Publish the platform root."""

    platform_id: str = Field(default="platform", min_length=1, description="Platform signer identity")
    network: str | None = None


class AuthorGenesisRequest(BaseModel):
    """Publish an author genesis."""

    author_id: str = Field(min_length=1)
    label: str = Field(min_length=1)


class VerifyGenesisResponse(BaseModel):
    """Result of recomputing a genesis hash."""

    valid: bool
    derived_hash: str
