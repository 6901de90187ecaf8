"""
Exception hierarchy for the scrollchain content engine.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ScrollChainError(Exception):
    """Base exception for all scrollchain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ChunkingError(ScrollChainError):
    """Raised when a document cannot be split into chunks."""

    pass


class MissingChunkError(ChunkingError):
    """Raised when a chunk sequence has a gap."""

    def __init__(self, index: int, details: dict[str, Any] | None = None) -> None:
        """
        Initialize missing chunk error.

        Args:
            index: First index absent from the sequence
            details: Additional context
        """
        details = details or {}
        details["index"] = index
        self.index = index
        super().__init__(f"Missing chunk at index {index}", details)


class CorruptChunkError(ChunkingError):
    """Raised when a chunk fails hash verification or decompression."""

    def __init__(
        self,
        index: int,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize corrupt chunk error.

        Args:
            index: Index of the offending chunk
            reason: What check failed (hash mismatch, decompression)
            details: Additional context
        """
        details = details or {}
        details["index"] = index
        self.index = index
        super().__init__(f"Corrupt chunk at index {index}: {reason}", details)


class OversizedChunkError(ChunkingError):
    """Raised when recursive splitting cannot bring a chunk under the unit limit."""

    def __init__(
        self,
        encoded_size: int,
        limit: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize oversized chunk error.

        Args:
            encoded_size: Encoded size of the smallest window reached
            limit: Maximum allowed encoded size
            details: Additional context
        """
        details = details or {}
        details.update({"encoded_size": encoded_size, "limit": limit})
        super().__init__(
            f"Chunk does not fit the unit limit: {encoded_size} > {limit} bytes",
            details,
        )


class UnitDecodeError(ScrollChainError):
    """Raised when a ledger payload is not a valid unit envelope."""

    def __init__(
        self,
        message: str,
        unit_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if unit_id:
            details["unit_id"] = unit_id
        super().__init__(message, details)


class LedgerError(ScrollChainError):
    """Base exception for ledger collaborator failures."""

    pass


class LedgerTransientError(LedgerError):
    """Raised by a ledger call that may succeed if retried."""

    pass


class LedgerRejectedError(LedgerTransientError):
    """Raised when the ledger rejects a submission (e.g. stale freshness token)."""

    pass


class LedgerFailedError(LedgerError):
    """Raised when a submission still fails after the retry budget is spent."""

    def __init__(
        self,
        message: str,
        attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize ledger failure.

        Args:
            message: Last underlying error message
            attempts: Number of attempts made
            details: Additional context
        """
        details = details or {}
        details["attempts"] = attempts
        self.attempts = attempts
        super().__init__(message, details)


class InvalidSignerError(LedgerError):
    """Raised when the signer cannot be used; never retried."""

    pass


class ConcurrentPublishConflictError(ScrollChainError):
    """Raised when a second publish for the same author is attempted."""

    def __init__(self, author_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["author_id"] = author_id
        self.author_id = author_id
        super().__init__(f"Publish already in progress for author: {author_id}", details)


class OperationNotFoundError(ScrollChainError):
    """Raised when a publish operation cannot be found."""

    def __init__(self, operation_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["operation_id"] = operation_id
        super().__init__(f"Publish operation not found: {operation_id}", details)


class InvalidOperationStateError(ScrollChainError):
    """Raised when an action is not allowed in the operation's current stage."""

    def __init__(
        self,
        operation_id: str,
        stage: str,
        action: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update({"operation_id": operation_id, "stage": stage, "action": action})
        super().__init__(f"Cannot {action} operation in stage '{stage}'", details)


class GenesisValidationError(ScrollChainError):
    """Raised when a genesis record is malformed or its hash does not verify."""

    pass
