"""
Core content engine.

Chunking, integrity checks, publishing, chain heads, feed reconstruction and
genesis anchoring, plus the exception hierarchy they share.
"""

from scrollchain.core.exceptions import (
    ChunkingError,
    ConcurrentPublishConflictError,
    CorruptChunkError,
    GenesisValidationError,
    InvalidOperationStateError,
    InvalidSignerError,
    LedgerError,
    LedgerFailedError,
    LedgerRejectedError,
    LedgerTransientError,
    MissingChunkError,
    OperationNotFoundError,
    OversizedChunkError,
    ScrollChainError,
    UnitDecodeError,
)

# Components
from scrollchain.core.chain import ChainHeadRegistry
from scrollchain.core.chunking import ChunkingEngine
from scrollchain.core.feed import ChainWalker, FeedCache, FeedReconstructor
from scrollchain.core.genesis import GenesisAnchor
from scrollchain.core.integrity import IntegrityReport, IntegrityVerifier
from scrollchain.core.publishing import PublishOrchestrator, PublishStatusManager

__all__ = [
    # Exceptions
    "ScrollChainError",
    "ChunkingError",
    "MissingChunkError",
    "CorruptChunkError",
    "OversizedChunkError",
    "UnitDecodeError",
    "LedgerError",
    "LedgerTransientError",
    "LedgerRejectedError",
    "LedgerFailedError",
    "InvalidSignerError",
    "ConcurrentPublishConflictError",
    "OperationNotFoundError",
    "InvalidOperationStateError",
    "GenesisValidationError",
    # Components
    "ChainHeadRegistry",
    "ChainWalker",
    "ChunkingEngine",
    "FeedCache",
    "FeedReconstructor",
    "GenesisAnchor",
    "IntegrityReport",
    "IntegrityVerifier",
    "PublishOrchestrator",
    "PublishStatusManager",
]
