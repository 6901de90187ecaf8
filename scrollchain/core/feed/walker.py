"""
Backward chain walker.

Lazily walks an author's chain from a start unit toward its genesis, one
unit per step. A walk ends at a chain terminator, at a genesis unit, at
the step limit, or at the first fetch/decode/verify error.

Dependencies: scrollchain.core.codec, scrollchain.boundary.ledger
System role: Unit source for the feed reconstructor
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator

from scrollchain.boundary.ledger.base import Ledger
from scrollchain.core.capabilities import CompressionCapability, ZlibCompressor
from scrollchain.core.codec import (
    decode_chunk_unit,
    decode_document,
    envelope_to_chunk,
    is_terminator,
    unit_kind,
)
from scrollchain.core.exceptions import CorruptChunkError, ScrollChainError, UnitDecodeError
from scrollchain.core.integrity import IntegrityVerifier
from scrollchain.models.chunk import Chunk
from scrollchain.models.feed import FeedEntry
from scrollchain.models.unit import UnitEnvelope, UnitKind
from scrollchain.observability.log_utils import log_with_context, short_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkedUnit:
    """One chunk unit read back from the ledger."""

    unit_id: str
    envelope: UnitEnvelope
    chunk: Chunk


class ChainWalker:
    """
    Restartable async sequence of an author's units, newest first.

    Every `async for` starts again from the start unit. Iterating the walker
    yields FeedEntry values and swallows errors (logged, stored in
    `last_error`); units(strict=True) raises them instead.
    """

    def __init__(
        self,
        ledger: Ledger,
        start_unit_id: str | None,
        author_id: str | None = None,
        limit: int | None = None,
        verifier: IntegrityVerifier | None = None,
        compressor: CompressionCapability | None = None,
    ) -> None:
        """
        Initialize walker.

        Args:
            ledger: Ledger units are fetched from
            start_unit_id: Newest unit of the walk
            author_id: Expected author; units from anyone else end the walk
            limit: Maximum units produced (None walks to the genesis)
            verifier: Integrity verifier for per-unit hash checks
            compressor: Decompresses chunk payloads into entry bodies
        """
        self.ledger = ledger
        self.start_unit_id = start_unit_id
        self.author_id = author_id
        self.limit = limit
        self.verifier = verifier or IntegrityVerifier()
        self.compressor = compressor or ZlibCompressor()
        self.last_error: ScrollChainError | None = None

    def __aiter__(self) -> AsyncIterator[FeedEntry]:
        return self.entries()

    async def entries(self) -> AsyncIterator[FeedEntry]:
        async for unit in self.units():
            try:
                body = self.compressor.decompress(unit.chunk.payload).decode("utf-8")
            except (ScrollChainError, UnicodeDecodeError) as e:
                self._stop(unit.unit_id, CorruptChunkError(unit.chunk.index, str(e)))
                return
            yield FeedEntry(
                unit_id=unit.unit_id,
                author_id=unit.envelope.author_id,
                timestamp=unit.envelope.timestamp,
                body=body,
                previous_unit_id=unit.envelope.previous_unit_id,
                operation_id=unit.envelope.operation_id,
                chunk_index=unit.envelope.index,
                total_chunks=unit.envelope.total_chunks,
            )

    async def units(self, strict: bool = False) -> AsyncIterator[WalkedUnit]:
        """
        Walk chunk units from the start unit.

        Args:
            strict: Raise errors instead of ending the walk quietly

        Yields:
            WalkedUnit: Unit id, envelope and verified chunk
        """
        self.last_error = None
        unit_id = self.start_unit_id
        produced = 0

        while not is_terminator(unit_id) and (self.limit is None or produced < self.limit):
            try:
                unit = await self._read(unit_id)
            except ScrollChainError as e:
                if strict:
                    raise
                self._stop(unit_id, e)
                return
            if unit is None:
                return

            yield unit
            produced += 1
            unit_id = unit.envelope.previous_unit_id

    async def _read(self, unit_id: str) -> WalkedUnit | None:
        payload = await self.ledger.fetch(unit_id)
        if payload is None:
            raise UnitDecodeError("Unit not found on ledger", unit_id)

        document = decode_document(payload, unit_id)
        if unit_kind(document, unit_id) != UnitKind.CHUNK:
            # genesis units anchor the chain
            return None

        envelope = decode_chunk_unit(document, unit_id)
        if self.author_id is not None and envelope.author_id != self.author_id:
            raise UnitDecodeError(
                "Unit belongs to a different author",
                unit_id,
                {"expected_author": short_id(self.author_id)},
            )

        chunk = envelope_to_chunk(envelope, unit_id)
        if not self.verifier.verify_chunk(chunk):
            raise CorruptChunkError(chunk.index, "hash mismatch", {"unit_id": unit_id})
        return WalkedUnit(unit_id=unit_id, envelope=envelope, chunk=chunk)

    def _stop(self, unit_id: str, error: ScrollChainError) -> None:
        self.last_error = error
        log_with_context(
            logger,
            logging.WARNING,
            f"{__name__}:units - Chain walk stopped",
            author_id=short_id(self.author_id),
            unit_id=short_id(unit_id),
            error=error,
        )
