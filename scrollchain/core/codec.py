"""
Unit payload codec.

Encodes chunks into the JSON envelopes written to the ledger and decodes
fetched payloads back into envelopes and chunks.

Dependencies: json (stdlib), pydantic, scrollchain.models
System role: Ledger payload format for chunk and genesis units
"""

import binascii
import json
from typing import Any

from pydantic import ValidationError

from scrollchain.core.capabilities import decode_payload, encode_payload
from scrollchain.core.exceptions import UnitDecodeError
from scrollchain.models.chunk import Chunk
from scrollchain.models.unit import UnitEnvelope, UnitKind

CHAIN_TERMINATORS = frozenset({"", "none"})

# Largest header values a chunk envelope can carry. Unit ids are at most a
# base58 transaction signature (88 chars); ms timestamps keep 13 digits until 2286.
MAX_UNIT_ID_CHARS = 88
MAX_CHUNK_INDEX = 999_999
MAX_TIMESTAMP_MS = 9_999_999_999_999


def encode_chunk_unit(
    chunk: Chunk,
    *,
    author_id: str,
    operation_id: str,
    previous_unit_id: str | None,
    timestamp: int,
) -> bytes:
    """
    Wrap a chunk in a unit envelope.

    Args:
        chunk: Chunk to publish
        author_id: Author public identity
        operation_id: Publish operation the chunk belongs to
        previous_unit_id: Unit this one links back to
        timestamp: Milliseconds since epoch

    Returns:
        bytes: Compact UTF-8 JSON envelope
    """
    envelope = UnitEnvelope(
        author_id=author_id,
        operation_id=operation_id,
        index=chunk.index,
        total_chunks=chunk.total_chunks,
        hash=chunk.hash,
        data=encode_payload(chunk.payload),
        previous_unit_id=previous_unit_id,
        timestamp=timestamp,
    )
    return envelope.model_dump_json(by_alias=True).encode("utf-8")


def envelope_overhead(
    author_id: str,
    *,
    operation_id_chars: int = 32,
    hash_chars: int = 64,
    unit_id_chars: int = MAX_UNIT_ID_CHARS,
) -> int:
    """
    Bytes a chunk envelope adds around its base64 data.

    Measured on an envelope with empty data and the largest header values,
    so `overhead + len(base64 data)` bounds the encoded unit of any chunk
    the author publishes. Base64 text needs no JSON escaping.

    Args:
        author_id: Author public identity stamped into every unit
        operation_id_chars: Length of operation ids
        hash_chars: Length of chunk hashes
        unit_id_chars: Longest unit id a chunk can link back to

    Returns:
        int: Envelope size in bytes without the payload
    """
    envelope = UnitEnvelope(
        author_id=author_id,
        operation_id="f" * operation_id_chars,
        index=MAX_CHUNK_INDEX - 1,
        total_chunks=MAX_CHUNK_INDEX,
        hash="f" * hash_chars,
        data="",
        previous_unit_id="f" * unit_id_chars,
        timestamp=MAX_TIMESTAMP_MS,
    )
    return len(envelope.model_dump_json(by_alias=True).encode("utf-8"))


def encode_document(document: dict[str, Any]) -> bytes:
    """Encode a genesis document with sorted keys and no whitespace."""
    return json.dumps(document, sort_keys=True, separators=(",", ":")).encode("utf-8")


def decode_document(payload: bytes, unit_id: str | None = None) -> dict[str, Any]:
    """
    Parse a ledger payload into a JSON object.

    Raises:
        UnitDecodeError: When the payload is not a JSON object
    """
    try:
        document = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise UnitDecodeError(f"Unit payload is not JSON: {e}", unit_id) from e
    if not isinstance(document, dict):
        raise UnitDecodeError("Unit payload is not a JSON object", unit_id)
    return document


def unit_kind(document: dict[str, Any], unit_id: str | None = None) -> UnitKind:
    try:
        return UnitKind(document.get("k"))
    except ValueError as e:
        raise UnitDecodeError(f"Unknown unit kind: {document.get('k')!r}", unit_id) from e


def decode_chunk_unit(document: dict[str, Any], unit_id: str | None = None) -> UnitEnvelope:
    """
    Validate a parsed payload as a chunk envelope.

    Raises:
        UnitDecodeError: When required envelope fields are missing or invalid
    """
    try:
        envelope = UnitEnvelope.model_validate(document)
    except ValidationError as e:
        raise UnitDecodeError(f"Invalid chunk envelope: {e.error_count()} errors", unit_id) from e
    if envelope.kind != UnitKind.CHUNK:
        raise UnitDecodeError(f"Expected chunk unit, got {envelope.kind.value}", unit_id)
    return envelope


def envelope_to_chunk(envelope: UnitEnvelope, unit_id: str | None = None) -> Chunk:
    """
    Rebuild the chunk carried by an envelope (hash is not re-checked here).

    Raises:
        UnitDecodeError: When the payload is not valid base64 or indices are inconsistent
    """
    try:
        payload = decode_payload(envelope.data)
    except (binascii.Error, ValueError) as e:
        raise UnitDecodeError(f"Invalid payload encoding: {e}", unit_id) from e
    try:
        return Chunk(
            index=envelope.index,
            total_chunks=envelope.total_chunks,
            payload=payload,
            hash=envelope.hash,
        )
    except ValidationError as e:
        raise UnitDecodeError(f"Invalid chunk fields: {e.error_count()} errors", unit_id) from e


def is_terminator(unit_id: str | None) -> bool:
    """True when a previous-unit reference ends the chain."""
    return unit_id is None or unit_id in CHAIN_TERMINATORS
