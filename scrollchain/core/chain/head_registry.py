"""
Chain head registry.

Records, per author, the most recently confirmed unit plus monotonic counts
of published documents and confirmed units. Heads live in the key-value
store so they survive restarts. The registry also owns the per-author
publish lock: one in-flight publish per author, different authors fully
concurrent.

Dependencies: asyncio (stdlib), scrollchain.boundary.db.kv_store, scrollchain.models.chain
System role: Single source of truth for where each author's chain ends
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from scrollchain.boundary.db.kv_store import KeyValueStore
from scrollchain.core.exceptions import ConcurrentPublishConflictError
from scrollchain.models.chain import ChainHead, ChainStats
from scrollchain.models.operation import utc_now
from scrollchain.observability.log_utils import short_id

logger = logging.getLogger(__name__)

HEAD_PREFIX = "chain_head:"
ANCHOR_PREFIX = "chain_anchor:"


class ChainHeadRegistry:
    """
    Per-author chain heads backed by a key-value store.

    advance_head() is serialized per author, so concurrent advances never
    lose a count. publish_lock() is the fail-fast exclusion used by the
    publish orchestrator.
    """

    def __init__(self, store: KeyValueStore) -> None:
        """
        Initialize registry.

        Args:
            store: Key-value store holding head and anchor records
        """
        self.store = store
        self._head_locks: dict[str, asyncio.Lock] = {}
        self._publishing: set[str] = set()

    async def get_head(self, author_id: str) -> ChainHead | None:
        """
        Get an author's chain head.

        Args:
            author_id: Author public identity

        Returns:
            ChainHead if the author has one, None otherwise
        """
        raw = await self.store.get(HEAD_PREFIX + author_id)
        if raw is None:
            return None
        return ChainHead.model_validate_json(raw)

    async def advance_head(self, author_id: str, new_unit_id: str, unit_count: int = 1) -> ChainHead:
        """
        Point the author's head at a newly confirmed unit.

        Only called once a whole unit sequence is confirmed on the ledger.

        Args:
            author_id: Author public identity
            new_unit_id: Unit id of the last confirmed unit
            unit_count: Units the sequence put on the ledger

        Returns:
            ChainHead: Updated head

        Raises:
            ValueError: When new_unit_id is empty or unit_count is below 1
        """
        if not new_unit_id:
            raise ValueError("advance_head requires a confirmed unit id")
        if unit_count < 1:
            raise ValueError("advance_head requires at least one confirmed unit")

        async with self._head_lock(author_id):
            current = await self.get_head(author_id)
            head = ChainHead(
                author_id=author_id,
                latest_unit_id=new_unit_id,
                document_count=(current.document_count if current else 0) + 1,
                unit_count=(current.unit_count if current else 0) + unit_count,
                last_updated_at=utc_now(),
            )
            await self.store.set(HEAD_PREFIX + author_id, head.model_dump_json().encode("utf-8"))

        logger.info(
            f"{__name__}:advance_head - Chain head advanced",
            extra={
                "author_id": short_id(author_id),
                "unit_id": short_id(new_unit_id),
                "document_count": head.document_count,
                "unit_count": head.unit_count,
            },
        )
        return head

    async def remove(self, author_id: str) -> None:
        """Deregister an author's head and chain anchor."""
        async with self._head_lock(author_id):
            await self.store.remove(HEAD_PREFIX + author_id)
            await self.store.remove(ANCHOR_PREFIX + author_id)
        logger.info(
            f"{__name__}:remove - Author removed",
            extra={"author_id": short_id(author_id)},
        )

    async def list_heads(self) -> list[ChainHead]:
        heads = []
        for key in await self.store.list_keys(HEAD_PREFIX):
            raw = await self.store.get(key)
            if raw is not None:
                heads.append(ChainHead.model_validate_json(raw))
        return heads

    async def list_active_authors(self) -> list[ChainHead]:
        """Heads that point at a unit."""
        return [head for head in await self.list_heads() if head.latest_unit_id]

    async def record_genesis(self, author_id: str, genesis_unit_id: str) -> None:
        """
        Record the author genesis unit that anchors the author's chain.

        Args:
            author_id: Author public identity
            genesis_unit_id: Unit id of the published author genesis
        """
        await self.store.set(ANCHOR_PREFIX + author_id, genesis_unit_id.encode("utf-8"))

    async def get_genesis(self, author_id: str) -> str | None:
        raw = await self.store.get(ANCHOR_PREFIX + author_id)
        return raw.decode("utf-8") if raw is not None else None

    async def get_chain_base(self, author_id: str) -> str | None:
        """
        Unit a new publish links back to.

        Returns:
            The head's latest unit, else the author's genesis unit, else None
        """
        head = await self.get_head(author_id)
        if head and head.latest_unit_id:
            return head.latest_unit_id
        return await self.get_genesis(author_id)

    async def get_stats(self) -> ChainStats:
        heads = await self.list_heads()
        return ChainStats(
            total_authors=len(heads),
            active_authors=sum(1 for head in heads if head.latest_unit_id),
            total_documents=sum(head.document_count for head in heads),
            total_units=sum(head.unit_count for head in heads),
        )

    def is_publishing(self, author_id: str) -> bool:
        return author_id in self._publishing

    @asynccontextmanager
    async def publish_lock(self, author_id: str) -> AsyncIterator[None]:
        """
        Hold the author's publish slot for the duration of the block.

        Raises:
            ConcurrentPublishConflictError: When another publish holds the slot
        """
        # check-and-add has no await in between, so it is atomic on the event loop
        if author_id in self._publishing:
            raise ConcurrentPublishConflictError(author_id)
        self._publishing.add(author_id)
        try:
            yield
        finally:
            self._publishing.discard(author_id)

    def _head_lock(self, author_id: str) -> asyncio.Lock:
        lock = self._head_locks.get(author_id)
        if lock is None:
            lock = asyncio.Lock()
            self._head_locks[author_id] = lock
        return lock
