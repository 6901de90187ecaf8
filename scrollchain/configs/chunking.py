"""
Chunking configuration settings.

Size limits for splitting documents into ledger-sized chunks.

Dependencies: pydantic, scrollchain.configs.base
System role: Chunking engine configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from scrollchain.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Limits applied when splitting a document into chunks."""

    model_config = SettingsConfigDict(env_prefix="CHUNKING_")

    target_chunk_chars: int = Field(
        default=500,
        gt=0,
        description="Target window size in characters before compression",
    )
    max_unit_bytes_after_encoding: int = Field(
        default=566,
        gt=0,
        description="Maximum ledger unit size in bytes, envelope included (memo limit)",
    )
    lookback_chars: int = Field(
        default=200,
        ge=0,
        description="How far back from a window end to search for a natural break",
    )
    min_chunk_chars: int = Field(
        default=32,
        gt=0,
        description="Floor below which oversized windows are split at byte level",
    )
