"""
Store-backed ledger.

In-memory ledger whose confirmed units are also written to the key-value
store, so unit ids recorded in chain heads, manifests and the platform root
still resolve after a restart. Default ledger of the application service.

Dependencies: scrollchain.boundary.db.kv_store, scrollchain.boundary.ledger.memory_ledger
System role: Durable local ledger for single-node deployments
"""

import asyncio
import logging

from scrollchain.boundary.db.kv_store import KeyValueStore
from scrollchain.boundary.ledger.base import Signer
from scrollchain.boundary.ledger.memory_ledger import InMemoryLedger

logger = logging.getLogger(__name__)

UNIT_PREFIX = "unit:"


class StoreBackedLedger(InMemoryLedger):
    """Ledger that persists every confirmed unit under `unit:{id}`."""

    def __init__(self, store: KeyValueStore, **options) -> None:
        """
        Initialize ledger over a key-value store.

        Args:
            store: Store holding confirmed unit payloads
            **options: InMemoryLedger options (max_payload_bytes, latency_seconds)
        """
        super().__init__(**options)
        self.store = store
        self._sequence_loaded = False
        self._load_lock = asyncio.Lock()

    async def submit(
        self,
        payload: bytes,
        signer: Signer,
        freshness_token: str | None = None,
    ) -> str:
        await self._load_sequence()
        unit_id = await super().submit(payload, signer, freshness_token)
        await self.store.set(UNIT_PREFIX + unit_id, payload)
        return unit_id

    async def fetch(self, unit_id: str) -> bytes | None:
        payload = await super().fetch(unit_id)
        if payload is None:
            payload = await self.store.get(UNIT_PREFIX + unit_id)
        return payload

    async def _load_sequence(self) -> None:
        # unit ids mix in the append sequence, so it continues across restarts
        if self._sequence_loaded:
            return
        async with self._load_lock:
            if self._sequence_loaded:
                return
            stored = len(await self.store.list_keys(UNIT_PREFIX))
            self._sequence = max(self._sequence, stored)
            self._sequence_loaded = True
        logger.info(
            f"{__name__}:_load_sequence - Stored units found",
            extra={"units": stored},
        )
