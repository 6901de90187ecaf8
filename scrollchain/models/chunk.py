"""
Chunk domain model.

One size-bounded, compressed, hash-verified unit of a document.

Dependencies: pydantic
System role: Data structure produced by the chunking engine
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Chunk(BaseModel):
    """Compressed slice of a normalized document."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    index: int = Field(ge=0, description="Position within the document (0-based)")
    total_chunks: int = Field(gt=0, description="Number of chunks in the document")
    payload: bytes = Field(description="Compressed chunk bytes")
    hash: str = Field(min_length=64, max_length=64, description="Hex hash of payload")
    source_text: str | None = Field(default=None, description="Original text span")

    @model_validator(mode="after")
    def _index_within_total(self) -> "Chunk":
        if self.index >= self.total_chunks:
            raise ValueError(
                f"index {self.index} out of range for total_chunks {self.total_chunks}"
            )
        return self


class ChunkingLimits(BaseModel):
    """
    Size limits for one split call.

    A chunk fits when the base64 of its compressed payload plus
    `envelope_overhead_bytes` is at most `max_unit_bytes_after_encoding`.
    """

    target_chunk_chars: int = Field(gt=0)
    max_unit_bytes_after_encoding: int = Field(gt=0)
    envelope_overhead_bytes: int = Field(default=0, ge=0)
    lookback_chars: int = Field(default=200, ge=0)
    min_chunk_chars: int = Field(default=32, gt=0)


class ChunkPreview(BaseModel):
    """Summary of one chunk in a chunking preview."""

    index: int
    length: int
    compressed_size: int
    encoded_size: int
    preview: str


class ChunkingPreview(BaseModel):
    """Breakdown of how a document would be chunked."""

    original_length: int
    processed_length: int
    target_chunk_chars: int
    estimated_chunks: int
    total_chunks: int
    chunks: list[ChunkPreview] = Field(default_factory=list)


class CompressionStats(BaseModel):
    """Compression statistics for a piece of text."""

    original_size: int
    compressed_size: int
    compression_ratio: float
    space_saved: int
    percent_saved: float
