"""
Chunking engine.

Splits a document into size-bounded, compressed, hashed chunks and
reassembles chunks back into text.

Split walks a cursor over the normalized text, ending each window at the
nearest natural break. Every window is compressed on its own; a window whose
transport-encoded payload, together with the envelope overhead it will be
wrapped in, exceeds the unit limit is halved and re-compressed until every
piece fits. Below `min_chunk_chars` halving switches to UTF-8
byte halves. A single character that still does not fit raises
OversizedChunkError.

Dependencies: scrollchain.core.capabilities, scrollchain.models.chunk
System role: Chunking engine (document <-> chunks)
"""

import logging

from scrollchain.configs.chunking import ChunkingSettings
from scrollchain.core.capabilities import (
    CompressionCapability,
    HashCapability,
    Sha256Hasher,
    ZlibCompressor,
    encoded_size,
)
from scrollchain.core.chunking.text_processor import (
    estimate_chunk_count,
    find_natural_break,
    normalize,
)
from scrollchain.core.exceptions import (
    ChunkingError,
    CorruptChunkError,
    MissingChunkError,
    OversizedChunkError,
)
from scrollchain.models.chunk import (
    Chunk,
    ChunkingLimits,
    ChunkingPreview,
    ChunkPreview,
    CompressionStats,
)

logger = logging.getLogger(__name__)


class ChunkingEngine:
    """Split documents into chunks and reassemble them."""

    def __init__(
        self,
        compressor: CompressionCapability | None = None,
        hasher: HashCapability | None = None,
        default_limits: ChunkingLimits | None = None,
    ) -> None:
        """
        Initialize engine with capabilities.

        Args:
            compressor: Compression capability (zlib by default)
            hasher: Hash capability (SHA-256 by default)
            default_limits: Limits used when split() gets none
        """
        self.compressor = compressor or ZlibCompressor()
        self.hasher = hasher or Sha256Hasher()
        self.default_limits = default_limits or limits_from_settings(ChunkingSettings())

    def split(self, document: str, limits: ChunkingLimits | None = None) -> list[Chunk]:
        """
        Split a document into ordered chunks.

        Args:
            document: Raw document text
            limits: Size limits (engine defaults when omitted)

        Returns:
            list[Chunk]: Chunks with dense indices; empty for empty text

        Raises:
            ChunkingError: When document is not text
            OversizedChunkError: When a piece cannot be made to fit
        """
        limits = limits or self.default_limits
        text = normalize(document)
        if not text:
            return []

        pieces: list[tuple[str, bytes]] = []
        windows = self._windows(text, limits)
        for window in windows:
            pieces.extend(self._fit(window, limits))

        total = len(pieces)
        if total != len(windows):
            logger.info(
                f"{__name__}:split - Oversized windows re-split",
                extra={"windows": len(windows), "chunks": total},
            )

        chunks = [
            Chunk(
                index=index,
                total_chunks=total,
                payload=payload,
                hash=self.hasher.hash(payload),
                source_text=piece,
            )
            for index, (piece, payload) in enumerate(pieces)
        ]

        logger.debug(
            f"{__name__}:split - Created chunks",
            extra={"characters": len(text), "chunks": total},
        )
        return chunks

    def reassemble(self, chunks: list[Chunk]) -> str:
        """
        Rebuild normalized text from a complete chunk set.

        Args:
            chunks: Chunks of one document, any order

        Returns:
            str: Concatenated decompressed text

        Raises:
            MissingChunkError: When indices are not dense over [0, total)
            CorruptChunkError: On hash mismatch or decompression failure
        """
        if not chunks:
            return ""

        ordered = sorted(chunks, key=lambda c: c.index)
        total = ordered[0].total_chunks
        if any(chunk.total_chunks != total for chunk in ordered):
            raise ChunkingError(
                "Chunks disagree on total_chunks",
                {"totals": sorted({c.total_chunks for c in ordered})},
            )

        for position, chunk in enumerate(ordered):
            if chunk.index != position:
                raise MissingChunkError(position, {"total_chunks": total})
        if len(ordered) < total:
            raise MissingChunkError(len(ordered), {"total_chunks": total})

        parts = []
        for chunk in ordered:
            if self.hasher.hash(chunk.payload) != chunk.hash:
                raise CorruptChunkError(chunk.index, "hash mismatch")
            try:
                parts.append(self.compressor.decompress(chunk.payload).decode("utf-8"))
            except (ChunkingError, UnicodeDecodeError) as e:
                raise CorruptChunkError(chunk.index, f"decompression failed: {e}") from e

        return "".join(parts)

    def estimate_chunk_count(self, document: str, limits: ChunkingLimits | None = None) -> int:
        limits = limits or self.default_limits
        return estimate_chunk_count(document, limits.target_chunk_chars)

    def preview(
        self,
        document: str,
        limits: ChunkingLimits | None = None,
        max_chunks: int = 5,
    ) -> ChunkingPreview:
        """
        Show how a document would be chunked without publishing it.

        Args:
            document: Raw document text
            limits: Size limits
            max_chunks: Number of chunks summarized

        Returns:
            ChunkingPreview: Lengths, sizes and the first 100 characters per chunk
        """
        limits = limits or self.default_limits
        chunks = self.split(document, limits)
        processed = normalize(document)

        summaries = []
        for chunk in chunks[:max_chunks]:
            text = chunk.source_text or ""
            summaries.append(
                ChunkPreview(
                    index=chunk.index,
                    length=len(text),
                    compressed_size=len(chunk.payload),
                    encoded_size=encoded_size(len(chunk.payload)),
                    preview=text[:100] + ("..." if len(text) > 100 else ""),
                )
            )

        return ChunkingPreview(
            original_length=len(document),
            processed_length=len(processed),
            target_chunk_chars=limits.target_chunk_chars,
            estimated_chunks=estimate_chunk_count(document, limits.target_chunk_chars),
            total_chunks=len(chunks),
            chunks=summaries,
        )

    def compression_stats(self, text: str) -> CompressionStats:
        original = text.encode("utf-8")
        compressed = self.compressor.compress(original)
        original_size = len(original)
        compressed_size = len(compressed)
        ratio = compressed_size / original_size if original_size else 1.0
        saved = original_size - compressed_size
        percent = saved / original_size * 100 if original_size else 0.0
        return CompressionStats(
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=round(ratio, 2),
            space_saved=saved,
            percent_saved=round(percent, 2),
        )

    def _windows(self, text: str, limits: ChunkingLimits) -> list[str]:
        windows = []
        cursor = 0
        while cursor < len(text):
            end = min(cursor + limits.target_chunk_chars, len(text))
            boundary = find_natural_break(text, cursor, end, limits.lookback_chars)
            windows.append(text[cursor:boundary])
            cursor = boundary
        return windows

    def _fit(self, text: str, limits: ChunkingLimits) -> list[tuple[str, bytes]]:
        payload = self.compressor.compress(text.encode("utf-8"))
        size = encoded_size(len(payload)) + limits.envelope_overhead_bytes
        if size <= limits.max_unit_bytes_after_encoding:
            return [(text, payload)]

        if len(text) <= 1:
            raise OversizedChunkError(size, limits.max_unit_bytes_after_encoding)

        if len(text) > limits.min_chunk_chars:
            left, right = self._halve(text, limits)
        else:
            left, right = _byte_halves(text)

        return self._fit(left, limits) + self._fit(right, limits)

    def _halve(self, text: str, limits: ChunkingLimits) -> tuple[str, str]:
        half = len(text) // 2
        boundary = find_natural_break(text, 0, half, limits.lookback_chars)
        # a break far before the middle would barely shrink the right half
        if boundary < max(1, half // 2):
            boundary = half
        return text[:boundary], text[boundary:]


def _byte_halves(text: str) -> tuple[str, str]:
    """Split text near the middle of its UTF-8 encoding, on a character boundary."""
    data = text.encode("utf-8")
    middle = len(data) // 2
    while 0 < middle < len(data) and (data[middle] & 0xC0) == 0x80:
        middle -= 1
    if middle == 0:
        middle = len(text[0].encode("utf-8"))
    return data[:middle].decode("utf-8"), data[middle:].decode("utf-8")


def limits_from_settings(settings: ChunkingSettings) -> ChunkingLimits:
    return ChunkingLimits(
        target_chunk_chars=settings.target_chunk_chars,
        max_unit_bytes_after_encoding=settings.max_unit_bytes_after_encoding,
        lookback_chars=settings.lookback_chars,
        min_chunk_chars=settings.min_chunk_chars,
    )
