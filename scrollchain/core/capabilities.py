"""
Pluggable hashing and compression capabilities.

The chunking engine, integrity verifier and genesis anchor only see these
protocols. Defaults are SHA-256 (hex) and zlib deflate at level 6.

Dependencies: hashlib, zlib, base64 (stdlib)
System role: Primitive capabilities consumed by the core
"""

import base64
import hashlib
import math
import zlib
from typing import Protocol

from scrollchain.core.exceptions import ChunkingError


class HashCapability(Protocol):
    """Deterministic fixed-width hash rendered as lowercase hex."""

    def hash(self, data: bytes) -> str: ...


class CompressionCapability(Protocol):
    """Deterministic, side-effect-free byte compression."""

    def compress(self, data: bytes) -> bytes: ...

    def decompress(self, data: bytes) -> bytes: ...


class Sha256Hasher:
    """SHA-256 hash capability (64 hex characters)."""

    def hash(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()


class ZlibCompressor:
    """Deflate compression with a zlib header."""

    def __init__(self, level: int = 6) -> None:
        self.level = level

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.level)

    def decompress(self, data: bytes) -> bytes:
        try:
            return zlib.decompress(data)
        except zlib.error as e:
            raise ChunkingError(f"Failed to decompress data: {e}") from e


def encode_payload(payload: bytes) -> str:
    """Transport encoding of a compressed payload (base64 text)."""
    return base64.b64encode(payload).decode("ascii")


def decode_payload(data: str) -> bytes:
    return base64.b64decode(data.encode("ascii"), validate=True)


def encoded_size(payload_length: int) -> int:
    """Length of the base64 encoding of `payload_length` bytes."""
    return 4 * math.ceil(payload_length / 3)
