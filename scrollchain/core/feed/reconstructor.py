"""
Feed reconstructor.

Builds a multi-author chronological feed by walking every active author's
chain backward from its head, and reassembles single documents from an
author's units. Per-author walks run concurrently; one author's failure
only drops that author's entries.

Dependencies: asyncio (stdlib), scrollchain.core.chain, scrollchain.core.feed
System role: Read side of the content engine (ledger -> feed / documents)
"""

import asyncio
import logging

from scrollchain.boundary.ledger.base import Ledger
from scrollchain.configs.feed import FeedSettings
from scrollchain.core.chain.head_registry import ChainHeadRegistry
from scrollchain.core.chunking.engine import ChunkingEngine
from scrollchain.core.exceptions import MissingChunkError
from scrollchain.core.feed.cache import FeedCache
from scrollchain.core.feed.walker import ChainWalker
from scrollchain.core.integrity import IntegrityVerifier
from scrollchain.models.chain import ChainHead
from scrollchain.models.feed import DocumentView, FeedEntry, FeedStats
from scrollchain.observability.log_utils import log_exception_with_context, short_id

logger = logging.getLogger(__name__)


class FeedReconstructor:
    """Feed and document reconstruction over chain heads and the ledger."""

    def __init__(
        self,
        ledger: Ledger,
        registry: ChainHeadRegistry,
        engine: ChunkingEngine | None = None,
        verifier: IntegrityVerifier | None = None,
        settings: FeedSettings | None = None,
        cache: FeedCache | None = None,
    ) -> None:
        """
        Initialize reconstructor.

        Args:
            ledger: Ledger units are fetched from
            registry: Chain head registry listing active authors
            engine: Chunking engine used for reassembly
            verifier: Integrity verifier for fetched chunks
            settings: Feed defaults (limits and cache TTL)
            cache: Feed cache
        """
        self.ledger = ledger
        self.registry = registry
        self.engine = engine or ChunkingEngine()
        self.verifier = verifier or IntegrityVerifier(self.engine.hasher)
        self.settings = settings or FeedSettings()
        self.cache = cache or FeedCache()

    def walker(
        self,
        start_unit_id: str | None,
        author_id: str | None = None,
        limit: int | None = None,
    ) -> ChainWalker:
        return ChainWalker(
            self.ledger,
            start_unit_id,
            author_id=author_id,
            limit=limit,
            verifier=self.verifier,
            compressor=self.engine.compressor,
        )

    async def build_feed(
        self,
        limit_per_author: int | None = None,
        max_total: int | None = None,
        use_cache: bool = True,
        cache_ttl: float | None = None,
    ) -> list[FeedEntry]:
        """
        Build the merged feed, newest first.

        Args:
            limit_per_author: Units walked per author (settings default when None)
            max_total: Maximum entries returned (settings default when None)
            use_cache: Serve a fresh cached build when available
            cache_ttl: Cache freshness bound in seconds

        Returns:
            list[FeedEntry]: Entries sorted by timestamp descending

        Raises:
            ValueError: When a limit is negative
        """
        if limit_per_author is None:
            limit_per_author = self.settings.limit_per_author
        if max_total is None:
            max_total = self.settings.max_total
        if limit_per_author < 0 or max_total < 0:
            raise ValueError("Feed limits must not be negative")
        cache_ttl = self.settings.cache_ttl_seconds if cache_ttl is None else cache_ttl

        if use_cache:
            snapshot = self.cache.get(cache_ttl, limit_per_author, max_total)
            if snapshot is not None:
                logger.debug(
                    f"{__name__}:build_feed - Serving cached feed",
                    extra={"entries": len(snapshot.entries)},
                )
                return list(snapshot.entries)

        heads = await self.registry.list_active_authors()
        results = await asyncio.gather(
            *(self._walk_author(head, limit_per_author) for head in heads)
        )

        merged = [entry for entries in results for entry in entries]
        merged.sort(key=lambda entry: entry.timestamp, reverse=True)
        feed = merged[:max_total]

        self.cache.put(feed, limit_per_author, max_total)
        logger.info(
            f"{__name__}:build_feed - Feed built",
            extra={"authors": len(heads), "entries": len(feed)},
        )
        return feed

    async def refresh_feed(
        self,
        limit_per_author: int | None = None,
        max_total: int | None = None,
    ) -> list[FeedEntry]:
        """Rebuild the feed, bypassing the cache."""
        return await self.build_feed(limit_per_author, max_total, use_cache=False)

    def clear_cache(self) -> None:
        self.cache.clear()

    async def get_feed_stats(self) -> FeedStats:
        stats = await self.registry.get_stats()
        snapshot = self.cache.snapshot
        return FeedStats(
            total_authors=stats.total_authors,
            active_authors=stats.active_authors,
            cache_status=self.cache.status(self.settings.cache_ttl_seconds),
            last_built_at=snapshot.built_at_utc if snapshot else None,
            cached_entries=len(snapshot.entries) if snapshot else 0,
        )

    async def get_units_for_author(self, author_id: str, limit: int | None = None) -> list[FeedEntry]:
        """
        Walk one author's chain from the head.

        Args:
            author_id: Author public identity
            limit: Maximum units (None walks to the genesis)

        Returns:
            list[FeedEntry]: Entries newest first; empty when the author has no head
        """
        head = await self.registry.get_head(author_id)
        if head is None or not head.latest_unit_id:
            return []
        return [entry async for entry in self.walker(head.latest_unit_id, author_id, limit)]

    async def reconstruct_document(
        self,
        author_id: str,
        unit_id: str | None = None,
    ) -> DocumentView | None:
        """
        Reassemble the document a unit belongs to.

        Walks back from `unit_id` (default: the author's head) collecting the
        units of that unit's operation down to chunk 0, then verifies and
        reassembles them. The start unit should be the document's last unit.

        Args:
            author_id: Author public identity
            unit_id: Last unit of the document

        Returns:
            DocumentView, or None when the author has no chain

        Raises:
            MissingChunkError: When units of the document are absent
            CorruptChunkError: When a unit fails hash or decompression checks
            UnitDecodeError: When a unit cannot be fetched or decoded
        """
        if unit_id is None:
            head = await self.registry.get_head(author_id)
            if head is None or not head.latest_unit_id:
                return None
            unit_id = head.latest_unit_id

        collected = []
        operation_id = None
        async for unit in self.walker(unit_id, author_id).units(strict=True):
            if operation_id is None:
                operation_id = unit.envelope.operation_id
            elif unit.envelope.operation_id != operation_id:
                break
            collected.append(unit)
            if unit.chunk.index == 0:
                break

        if not collected:
            raise MissingChunkError(0, {"unit_id": unit_id, "reason": "no chunk units found"})

        collected.reverse()
        text = self.engine.reassemble([unit.chunk for unit in collected])

        return DocumentView(
            author_id=author_id,
            operation_id=operation_id,
            text=text,
            total_chunks=collected[0].chunk.total_chunks,
            unit_ids=[unit.unit_id for unit in collected],
        )

    async def _walk_author(self, head: ChainHead, limit: int) -> list[FeedEntry]:
        try:
            return [
                entry
                async for entry in self.walker(head.latest_unit_id, head.author_id, limit)
            ]
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_walk_author - Author skipped",
                e,
                author_id=short_id(head.author_id),
            )
            return []
