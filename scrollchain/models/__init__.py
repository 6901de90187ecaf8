"""Domain models."""

from scrollchain.models.api import (
    AuthorGenesisRequest,
    AuthorUnitsResponse,
    FeedResponse,
    OperationResponse,
    PublishRequest,
    ResumeRequest,
    RootGenesisRequest,
    VerifyGenesisResponse,
)
from scrollchain.models.chain import ChainHead, ChainStats
from scrollchain.models.chunk import (
    Chunk,
    ChunkingLimits,
    ChunkingPreview,
    ChunkPreview,
    CompressionStats,
)
from scrollchain.models.feed import DocumentView, FeedEntry, FeedStats
from scrollchain.models.genesis import GenesisRecord, RootGenesis
from scrollchain.models.operation import (
    ChunkState,
    ChunkStatus,
    PublishManifest,
    PublishOperation,
    PublishStage,
)
from scrollchain.models.unit import UNIT_PROTOCOL, UnitEnvelope, UnitKind

__all__ = [
    "AuthorGenesisRequest",
    "AuthorUnitsResponse",
    "FeedResponse",
    "OperationResponse",
    "PublishRequest",
    "ResumeRequest",
    "RootGenesisRequest",
    "VerifyGenesisResponse",
    "ChainHead",
    "ChainStats",
    "Chunk",
    "ChunkPreview",
    "ChunkState",
    "ChunkStatus",
    "ChunkingLimits",
    "ChunkingPreview",
    "CompressionStats",
    "DocumentView",
    "FeedEntry",
    "FeedStats",
    "GenesisRecord",
    "PublishManifest",
    "PublishOperation",
    "PublishStage",
    "RootGenesis",
    "UNIT_PROTOCOL",
    "UnitEnvelope",
    "UnitKind",
]
