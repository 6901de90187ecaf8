"""
Test suite for the unit payload codec.

System role: Verification of the ledger envelope format
"""

import json

import pytest

from scrollchain.core.chunking.engine import ChunkingEngine
from scrollchain.core.codec import (
    decode_chunk_unit,
    decode_document,
    encode_chunk_unit,
    encode_document,
    envelope_overhead,
    envelope_to_chunk,
    is_terminator,
    unit_kind,
)
from scrollchain.core.exceptions import UnitDecodeError
from scrollchain.models.unit import UNIT_PROTOCOL, UnitKind


class TestChunkUnitEncoding:
    """Test suite for chunk envelopes."""

    def test_encode_should_use_compact_keys(self, engine: ChunkingEngine) -> None:
        """Test envelope uses short aliases and carries the chain link."""
        # Arrange
        chunk = engine.split("Hello ledger.")[0]

        # Act
        payload = encode_chunk_unit(
            chunk,
            author_id="author-alice",
            operation_id="op-1",
            previous_unit_id="prev-unit",
            timestamp=1234,
        )

        # Assert
        document = json.loads(payload)
        assert document["p"] == UNIT_PROTOCOL
        assert document["k"] == "chunk"
        assert document["a"] == "author-alice"
        assert document["o"] == "op-1"
        assert document["i"] == 0
        assert document["n"] == 1
        assert document["h"] == chunk.hash
        assert document["prev"] == "prev-unit"
        assert document["ts"] == 1234

    def test_decoded_envelope_should_rebuild_the_chunk(self, engine: ChunkingEngine) -> None:
        """Test payload and hash survive the envelope."""
        chunk = engine.split("Hello ledger.")[0]
        payload = encode_chunk_unit(
            chunk, author_id="a", operation_id="o", previous_unit_id=None, timestamp=1
        )

        envelope = decode_chunk_unit(decode_document(payload))
        rebuilt = envelope_to_chunk(envelope)

        assert envelope.previous_unit_id is None
        assert rebuilt.payload == chunk.payload
        assert rebuilt.hash == chunk.hash


class TestEnvelopeOverhead:
    """Test suite for envelope_overhead()."""

    def test_overhead_should_bound_real_envelopes(self, engine: ChunkingEngine) -> None:
        """Test a real envelope never exceeds overhead plus its base64 data."""
        # Arrange
        chunk = engine.split("Hello ledger.")[0]
        payload = encode_chunk_unit(
            chunk,
            author_id="author-alice",
            operation_id="f" * 32,
            previous_unit_id="e" * 64,
            timestamp=1_700_000_000_000,
        )

        # Act
        overhead = envelope_overhead("author-alice")

        # Assert
        data = json.loads(payload)["d"]
        assert len(payload) <= overhead + len(data)

    def test_overhead_should_count_escaped_author_bytes(self) -> None:
        """Test identities that need JSON escaping are measured as sent."""
        plain = envelope_overhead("ab")
        escaped = envelope_overhead('a"')

        assert escaped == plain + 1


class TestDecodeErrors:
    """Test suite for malformed payloads."""

    def test_decode_document_should_reject_non_json(self) -> None:
        """Test binary garbage raises UnitDecodeError with the unit id."""
        with pytest.raises(UnitDecodeError) as exc_info:
            decode_document(b"\xff\x00garbage", "unit-9")

        assert exc_info.value.details["unit_id"] == "unit-9"

    def test_decode_document_should_reject_non_object(self) -> None:
        """Test a JSON array is not a unit."""
        with pytest.raises(UnitDecodeError):
            decode_document(b"[1, 2, 3]")

    def test_unit_kind_should_reject_unknown_kind(self) -> None:
        """Test unknown kinds raise UnitDecodeError."""
        with pytest.raises(UnitDecodeError):
            unit_kind({"k": "mystery"})

    def test_unit_kind_should_read_genesis_kinds(self) -> None:
        """Test genesis documents are recognized."""
        document = decode_document(encode_document({"k": "author_genesis"}))

        assert unit_kind(document) == UnitKind.AUTHOR_GENESIS

    def test_decode_chunk_unit_should_reject_missing_fields(self) -> None:
        """Test an envelope without its hash is invalid."""
        with pytest.raises(UnitDecodeError):
            decode_chunk_unit({"k": "chunk", "a": "x", "o": "y", "i": 0, "n": 1, "d": "", "ts": 1})

    def test_decode_chunk_unit_should_reject_genesis_kind(self) -> None:
        """Test a genesis-kind document is not a chunk envelope."""
        document = {
            "k": "root_genesis", "a": "x", "o": "y", "i": 0, "n": 1, "h": "0" * 64, "d": "", "ts": 1,
        }

        with pytest.raises(UnitDecodeError):
            decode_chunk_unit(document)

    def test_envelope_to_chunk_should_reject_bad_base64(self, engine: ChunkingEngine) -> None:
        """Test invalid payload encoding raises UnitDecodeError."""
        chunk = engine.split("Hello ledger.")[0]
        payload = encode_chunk_unit(
            chunk, author_id="a", operation_id="o", previous_unit_id=None, timestamp=1
        )
        document = json.loads(payload)
        document["d"] = "!!not base64!!"

        with pytest.raises(UnitDecodeError):
            envelope_to_chunk(decode_chunk_unit(document))

    def test_envelope_to_chunk_should_reject_index_beyond_total(self, engine: ChunkingEngine) -> None:
        """Test an index outside total_chunks raises UnitDecodeError."""
        chunk = engine.split("Hello ledger.")[0]
        document = json.loads(
            encode_chunk_unit(chunk, author_id="a", operation_id="o", previous_unit_id=None, timestamp=1)
        )
        document["i"] = 5

        with pytest.raises(UnitDecodeError):
            envelope_to_chunk(decode_chunk_unit(document))


class TestTerminators:
    """Test suite for is_terminator()."""

    @pytest.mark.parametrize("unit_id", [None, "", "none"])
    def test_terminators_should_end_the_chain(self, unit_id) -> None:
        """Test None, empty and "none" end a chain walk."""
        assert is_terminator(unit_id) is True

    def test_unit_id_should_not_terminate(self) -> None:
        """Test a real unit id continues the walk."""
        assert is_terminator("a1b2c3") is False
