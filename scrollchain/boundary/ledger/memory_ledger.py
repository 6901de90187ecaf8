"""
In-memory ledger.

Append-only dict of unit id -> payload with freshness tokens, optional
latency and failure injection. Used for local runs and tests.

Dependencies: asyncio, hashlib (stdlib), scrollchain.core.exceptions
System role: Ledger implementation without a network
"""

import asyncio
import hashlib
import logging
from collections import deque
from typing import Callable

from scrollchain.boundary.ledger.base import Signer
from scrollchain.core.exceptions import (
    InvalidSignerError,
    LedgerError,
    LedgerRejectedError,
)

logger = logging.getLogger(__name__)

FailureRule = Callable[[bytes], Exception | None]


class InMemoryLedger:
    """Ledger held in process memory."""

    def __init__(
        self,
        max_payload_bytes: int | None = None,
        latency_seconds: float = 0.0,
    ) -> None:
        """
        Initialize empty ledger.

        Args:
            max_payload_bytes: Reject payloads above this size (None for no limit)
            latency_seconds: Simulated confirmation delay per submission
        """
        self.max_payload_bytes = max_payload_bytes
        self.latency_seconds = latency_seconds
        self._units: dict[str, bytes] = {}
        self._sequence = 0
        self._freshness = 0
        self._queued_failures: deque[Exception] = deque()
        self._failure_rules: list[FailureRule] = []
        self.submitted_payloads: list[bytes] = []
        self.submit_calls = 0
        self.fetch_calls = 0

    async def submit(
        self,
        payload: bytes,
        signer: Signer,
        freshness_token: str | None = None,
    ) -> str:
        self.submit_calls += 1
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        if not signer.public_identity:
            raise InvalidSignerError("Signer has no public identity")

        if self._queued_failures:
            raise self._queued_failures.popleft()
        for rule in self._failure_rules:
            error = rule(payload)
            if error is not None:
                raise error

        if freshness_token is not None and freshness_token != self._token():
            raise LedgerRejectedError(
                "Stale freshness token",
                {"expected": self._token(), "received": freshness_token},
            )
        if self.max_payload_bytes is not None and len(payload) > self.max_payload_bytes:
            raise LedgerError(
                "Payload exceeds ledger limit",
                {"size": len(payload), "limit": self.max_payload_bytes},
            )

        return self._append(payload, signer.sign(payload))

    async def fetch(self, unit_id: str) -> bytes | None:
        self.fetch_calls += 1
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        return self._units.get(unit_id)

    async def current_freshness_token(self) -> str:
        return self._token()

    def expire_freshness(self) -> None:
        """Invalidate the current token, as when a validity window passes."""
        self._freshness += 1

    def inject_failures(self, *errors: Exception) -> None:
        """Raise these errors, in order, from the next submissions."""
        self._queued_failures.extend(errors)

    def add_failure_rule(self, rule: FailureRule) -> None:
        """Raise the error `rule(payload)` returns on every matching submission."""
        self._failure_rules.append(rule)

    def clear_failures(self) -> None:
        self._queued_failures.clear()
        self._failure_rules.clear()

    def put(self, payload: bytes) -> str:
        """Append a payload directly, bypassing signing and failure injection."""
        return self._append(payload, b"")

    def overwrite(self, unit_id: str, payload: bytes) -> None:
        """Replace a stored payload (simulates tampering in tests)."""
        if unit_id not in self._units:
            raise KeyError(unit_id)
        self._units[unit_id] = payload

    def __len__(self) -> int:
        return len(self._units)

    def _append(self, payload: bytes, signature: bytes) -> str:
        self._sequence += 1
        digest = hashlib.sha256(
            self._sequence.to_bytes(8, "big") + signature + payload
        ).hexdigest()
        self._units[digest] = payload
        self.submitted_payloads.append(payload)
        logger.debug(
            f"{__name__}:submit - Unit appended",
            extra={"unit_id": digest[:8], "size": len(payload)},
        )
        return digest

    def _token(self) -> str:
        return f"anchor-{self._freshness}"
