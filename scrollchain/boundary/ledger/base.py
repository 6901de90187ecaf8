"""
Ledger and signer contracts.

The core treats the ledger as an append-only store: submit a payload and get
a unit id back, fetch a payload by unit id. Transport, fees and wire format
live behind these protocols.

Dependencies: typing (stdlib)
System role: Capability contracts for ledger collaborators
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Signer(Protocol):
    """Identity that authorizes ledger submissions."""

    @property
    def public_identity(self) -> str: ...

    def sign(self, payload: bytes) -> bytes: ...


@runtime_checkable
class Ledger(Protocol):
    """Append-only ledger of opaque payloads."""

    async def submit(
        self,
        payload: bytes,
        signer: Signer,
        freshness_token: str | None = None,
    ) -> str:
        """
        Submit a payload and wait for confirmation.

        Returns:
            str: Unit id of the confirmed unit

        Raises:
            LedgerTransientError: Retriable failure (LedgerRejectedError for stale tokens)
            InvalidSignerError: Signer cannot be used
            LedgerError: Permanent rejection
        """
        ...

    async def fetch(self, unit_id: str) -> bytes | None:
        """Payload of a confirmed unit, or None when not found."""
        ...

    async def current_freshness_token(self) -> str:
        """Token that keeps submissions inside the ledger's validity window."""
        ...
