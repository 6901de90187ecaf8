"""Chunking engine: normalization, splitting and reassembly."""

from scrollchain.core.chunking.engine import ChunkingEngine, limits_from_settings
from scrollchain.core.chunking.text_processor import (
    estimate_chunk_count,
    find_natural_break,
    normalize,
)

__all__ = [
    "ChunkingEngine",
    "estimate_chunk_count",
    "find_natural_break",
    "limits_from_settings",
    "normalize",
]
