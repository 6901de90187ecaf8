"""
Scroll service orchestrator.

Facade over the content engine for callers (HTTP API, scripts). Wires the
chunking engine, integrity verifier, chain head registry, publish
orchestrator, feed reconstructor and genesis anchor around one ledger and
one key-value store.

Dependencies: scrollchain.core, scrollchain.boundary, scrollchain.configs
System role: Application service layer
"""

import logging

from scrollchain.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from scrollchain.boundary.db.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
)
from scrollchain.boundary.ledger.base import Ledger, Signer
from scrollchain.boundary.ledger.memory_ledger import InMemoryLedger
from scrollchain.boundary.ledger.signer import LocalSigner
from scrollchain.boundary.ledger.stored_ledger import StoreBackedLedger
from scrollchain.configs import Settings, get_settings
from scrollchain.core.chain.head_registry import ChainHeadRegistry
from scrollchain.core.chunking.engine import ChunkingEngine, limits_from_settings
from scrollchain.core.feed.reconstructor import FeedReconstructor
from scrollchain.core.genesis.anchor import GenesisAnchor
from scrollchain.core.integrity import IntegrityReport, IntegrityVerifier
from scrollchain.core.publishing.orchestrator import PublishOrchestrator
from scrollchain.core.publishing.status_manager import ProgressCallback
from scrollchain.models.chain import ChainHead, ChainStats
from scrollchain.models.chunk import ChunkingPreview
from scrollchain.models.feed import DocumentView, FeedEntry, FeedStats
from scrollchain.models.genesis import GenesisRecord, RootGenesis
from scrollchain.models.operation import PublishOperation

logger = logging.getLogger(__name__)


class ScrollService:
    """
    Scroll service orchestrator.

    Exposes publishing, feed and genesis operations. Components are created
    once per service and share the same ledger, store and registry.
    """

    def __init__(
        self,
        ledger: Ledger,
        store: KeyValueStore,
        settings: Settings | None = None,
        **orchestrator_options,
    ) -> None:
        """
        Initialize service and its components.

        Args:
            ledger: Ledger collaborator
            store: Key-value store for heads, operations and manifests
            settings: Application settings (cached settings when omitted)
            **orchestrator_options: Extra PublishOrchestrator arguments (clock, sleep)
        """
        self.settings = settings or get_settings()
        self.ledger = ledger
        self.store = store

        self.engine = ChunkingEngine(default_limits=limits_from_settings(self.settings.chunking))
        self.verifier = IntegrityVerifier(self.engine.hasher)
        self.registry = ChainHeadRegistry(store)
        self.orchestrator = PublishOrchestrator(
            ledger,
            self.registry,
            store,
            engine=self.engine,
            verifier=self.verifier,
            settings=self.settings.publishing,
            **orchestrator_options,
        )
        self.feed = FeedReconstructor(
            ledger,
            self.registry,
            engine=self.engine,
            verifier=self.verifier,
            settings=self.settings.feed,
        )
        self.genesis = GenesisAnchor(
            ledger,
            registry=self.registry,
            store=store,
            hasher=self.engine.hasher,
            settings=self.settings.genesis,
        )
        self._signers: dict[str, Signer] = {}

    def signer_for(self, author_id: str) -> Signer:
        """
        Local signer for an author identity, created on first use.

        Key custody is outside this service; local signers stand in for
        wallets in development and tests.
        """
        signer = self._signers.get(author_id)
        if signer is None:
            signer = LocalSigner(author_id)
            self._signers[author_id] = signer
        return signer

    # Publishing

    async def create_publish_operation(
        self,
        signer: Signer,
        document: str,
        on_progress: ProgressCallback | None = None,
    ) -> PublishOperation:
        return await self.orchestrator.create_publish_operation(signer, document, on_progress)

    async def resume(self, operation_id: str, signer: Signer | None = None) -> PublishOperation:
        return await self.orchestrator.resume(operation_id, signer)

    async def cancel(self, operation_id: str) -> PublishOperation:
        return await self.orchestrator.cancel(operation_id)

    async def get_status(self, operation_id: str) -> PublishOperation:
        return await self.orchestrator.get_status(operation_id)

    async def list_operations(self) -> list[PublishOperation]:
        return await self.orchestrator.list_operations()

    async def verify_published(self, operation_id: str) -> IntegrityReport:
        return await self.orchestrator.verify_published(operation_id)

    def preview(self, document: str, max_chunks: int = 5) -> ChunkingPreview:
        return self.engine.preview(document, max_chunks=max_chunks)

    # Chains and feed

    async def get_head(self, author_id: str) -> ChainHead | None:
        return await self.registry.get_head(author_id)

    async def get_chain_stats(self) -> ChainStats:
        return await self.registry.get_stats()

    async def build_feed(
        self,
        limit_per_author: int | None = None,
        max_total: int | None = None,
        use_cache: bool = True,
        cache_ttl: float | None = None,
    ) -> list[FeedEntry]:
        return await self.feed.build_feed(limit_per_author, max_total, use_cache, cache_ttl)

    async def refresh_feed(
        self,
        limit_per_author: int | None = None,
        max_total: int | None = None,
    ) -> list[FeedEntry]:
        return await self.feed.refresh_feed(limit_per_author, max_total)

    def clear_feed_cache(self) -> None:
        self.feed.clear_cache()

    async def get_feed_stats(self) -> FeedStats:
        return await self.feed.get_feed_stats()

    async def get_units_for_author(self, author_id: str, limit: int | None = None) -> list[FeedEntry]:
        return await self.feed.get_units_for_author(author_id, limit)

    async def reconstruct_document(
        self,
        author_id: str,
        unit_id: str | None = None,
    ) -> DocumentView | None:
        return await self.feed.reconstruct_document(author_id, unit_id)

    # Genesis

    def derive_author_genesis_hash(self, author_public_identity: str, root_id: str, label: str) -> str:
        return self.genesis.derive_author_genesis_hash(author_public_identity, root_id, label)

    def verify_genesis(self, record: GenesisRecord) -> bool:
        return self.genesis.verify(record)

    async def publish_root(self, signer: Signer, network: str | None = None) -> RootGenesis:
        return await self.genesis.publish_root(signer, network)

    async def get_root(self) -> RootGenesis | None:
        return await self.genesis.get_root()

    async def publish_author_genesis(self, signer: Signer, label: str) -> GenesisRecord:
        return await self.genesis.publish_author_genesis(signer, label)

    async def read_author_genesis(self, unit_id: str) -> GenesisRecord:
        return await self.genesis.read_author_genesis(unit_id)


async def build_scroll_service(settings: Settings | None = None) -> ScrollService:
    """
    Build a service over the configured database and the local ledger.

    With `ledger.persist_units` (the default) confirmed units are written to
    the same database as heads and manifests, and the key-value table is
    created when it does not exist. Otherwise ledger and store both live in
    memory, so no stored record can outlive the units it points at.

    Args:
        settings: Application settings (cached settings when omitted)

    Returns:
        ScrollService: Ready-to-use service
    """
    settings = settings or get_settings()
    ledger_options = {"max_payload_bytes": settings.ledger.max_payload_bytes}

    if settings.ledger.persist_units:
        engine = get_async_engine(settings.database)
        await create_tables(engine)
        store: KeyValueStore = SqlKeyValueStore(get_async_session_factory(engine))
        ledger: Ledger = StoreBackedLedger(store, **ledger_options)
    else:
        store = InMemoryKeyValueStore()
        ledger = InMemoryLedger(**ledger_options)

    logger.info(
        f"{__name__}:build_scroll_service - Service initialized",
        extra={
            "environment": settings.environment,
            "persist_units": settings.ledger.persist_units,
        },
    )
    return ScrollService(ledger, store, settings)
