"""
Integrity verifier.

Recomputes chunk hashes and compares chunk sets against a recorded manifest
to detect tampering between publish and read-back. Mismatches are reported,
never corrected. Holds no mutable state.

Dependencies: scrollchain.core.capabilities, scrollchain.models
System role: Integrity checks over chunks and published operations
"""

import logging

from pydantic import BaseModel, Field

from scrollchain.core.capabilities import HashCapability, Sha256Hasher
from scrollchain.models.chunk import Chunk
from scrollchain.models.operation import PublishManifest

logger = logging.getLogger(__name__)


class IntegrityReport(BaseModel):
    """Outcome of comparing chunks against a manifest."""

    valid: bool
    expected_count: int
    actual_count: int
    mismatched_indices: list[int] = Field(default_factory=list)
    missing_indices: list[int] = Field(default_factory=list)


class IntegrityVerifier:
    """Stateless hash checks over chunks."""

    def __init__(self, hasher: HashCapability | None = None) -> None:
        self.hasher = hasher or Sha256Hasher()

    def verify_chunk(self, chunk: Chunk) -> bool:
        """
        Check that a chunk's hash matches its payload.

        Args:
            chunk: Chunk to verify

        Returns:
            bool: True iff Hash(payload) == chunk.hash
        """
        valid = self.hasher.hash(chunk.payload) == chunk.hash
        if not valid:
            logger.warning(
                f"{__name__}:verify_chunk - Hash mismatch",
                extra={"index": chunk.index},
            )
        return valid

    def verify_document(self, chunks: list[Chunk]) -> bool:
        """True when indices are dense over [0, total) and every chunk verifies."""
        if not chunks:
            return True
        ordered = sorted(chunks, key=lambda c: c.index)
        total = ordered[0].total_chunks
        if [c.index for c in ordered] != list(range(total)):
            logger.warning(
                f"{__name__}:verify_document - Missing or duplicate chunks",
                extra={"total_chunks": total, "received": len(ordered)},
            )
            return False
        return all(self.verify_chunk(chunk) for chunk in ordered)

    def compare(self, manifest: PublishManifest, actual_chunks: list[Chunk]) -> IntegrityReport:
        """
        Compare fetched chunks with a manifest, collecting every mismatch.

        Args:
            manifest: Manifest recorded when the operation completed
            actual_chunks: Chunks rebuilt from ledger units

        Returns:
            IntegrityReport: Per-index findings
        """
        by_index = {chunk.index: chunk for chunk in actual_chunks}
        mismatched = []
        missing = []
        for index, expected_hash in enumerate(manifest.chunk_hashes):
            chunk = by_index.get(index)
            if chunk is None:
                missing.append(index)
            elif chunk.hash != expected_hash or not self.verify_chunk(chunk):
                mismatched.append(index)

        count_ok = len(actual_chunks) == manifest.total_chunks
        report = IntegrityReport(
            valid=count_ok and not mismatched and not missing,
            expected_count=manifest.total_chunks,
            actual_count=len(actual_chunks),
            mismatched_indices=mismatched,
            missing_indices=missing,
        )
        if not report.valid:
            logger.error(
                f"{__name__}:compare - Operation failed verification",
                extra={
                    "operation_id": manifest.operation_id,
                    "mismatched": mismatched,
                    "missing": missing,
                },
            )
        return report

    def verify_operation(self, manifest: PublishManifest, actual_chunks: list[Chunk]) -> bool:
        """Count equality plus per-index hash equality against the manifest."""
        return self.compare(manifest, actual_chunks).valid
