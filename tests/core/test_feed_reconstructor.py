"""
Test suite for feed reconstruction.

Covers the merged multi-author feed, cache freshness, per-author error
isolation, backward chain walks and document reassembly.

Dependencies: pytest, pytest-asyncio
System role: Verification of the read side
"""

import base64
import json

import pytest
from pydantic import ValidationError

from scrollchain.boundary.db.kv_store import InMemoryKeyValueStore
from scrollchain.boundary.ledger.memory_ledger import InMemoryLedger
from scrollchain.boundary.ledger.signer import LocalSigner
from scrollchain.configs.feed import FeedSettings
from scrollchain.configs.publishing import PublishingSettings
from scrollchain.core.chain.head_registry import ChainHeadRegistry
from scrollchain.core.chunking.engine import ChunkingEngine
from scrollchain.core.codec import encode_document
from scrollchain.core.exceptions import CorruptChunkError, MissingChunkError, UnitDecodeError
from scrollchain.core.feed.cache import FeedCache
from scrollchain.core.feed.reconstructor import FeedReconstructor
from scrollchain.core.publishing.orchestrator import PublishOrchestrator
from scrollchain.models.unit import UNIT_PROTOCOL


class ListClock:
    """Clock returning preset timestamps in order."""

    def __init__(self, *values: int) -> None:
        self.values = list(values)

    def __call__(self) -> int:
        return self.values.pop(0)


class ManualClock:
    """Monotonic clock moved by hand."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def feed_clock() -> ListClock:
    """Provide unit timestamps for the two-author feed."""
    return ListClock(80, 90, 100, 85, 95)


@pytest.fixture
def cache_clock() -> ManualClock:
    """Provide hand-driven cache clock."""
    return ManualClock()


@pytest.fixture
def publisher(
    ledger: InMemoryLedger,
    registry: ChainHeadRegistry,
    store: InMemoryKeyValueStore,
    engine: ChunkingEngine,
    feed_clock: ListClock,
) -> PublishOrchestrator:
    """Provide orchestrator stamping units from the feed clock."""
    return PublishOrchestrator(
        ledger,
        registry,
        store,
        engine=engine,
        settings=PublishingSettings(retry_delay_seconds=0),
        clock=feed_clock,
    )


@pytest.fixture
def reconstructor(
    ledger: InMemoryLedger,
    registry: ChainHeadRegistry,
    engine: ChunkingEngine,
    cache_clock: ManualClock,
) -> FeedReconstructor:
    """Provide reconstructor with a 30 second cache TTL."""
    return FeedReconstructor(
        ledger,
        registry,
        engine=engine,
        settings=FeedSettings(limit_per_author=3, max_total=20, cache_ttl_seconds=30),
        cache=FeedCache(clock=cache_clock),
    )


@pytest.fixture
async def two_author_chains(
    publisher: PublishOrchestrator,
    signer: LocalSigner,
    other_signer: LocalSigner,
) -> dict[str, list[str]]:
    """Provide alice notes at t=80/90/100 and bob notes at t=85/95, as unit ids."""
    units: dict[str, list[str]] = {signer.public_identity: [], other_signer.public_identity: []}
    for author, body in [
        (signer, "alice one"),
        (signer, "alice two"),
        (signer, "alice three"),
        (other_signer, "bob one"),
        (other_signer, "bob two"),
    ]:
        operation = await publisher.create_publish_operation(author, body)
        units[author.public_identity].append(operation.last_unit_id)
    return units


async def corrupt_payload(ledger: InMemoryLedger, unit_id: str) -> None:
    document = json.loads(await ledger.fetch(unit_id))
    document["d"] = base64.b64encode(b"tampered").decode("ascii")
    ledger.overwrite(unit_id, json.dumps(document).encode("utf-8"))


class TestBuildFeed:
    """Test suite for FeedReconstructor.build_feed()."""

    @pytest.mark.asyncio
    async def test_build_feed_should_merge_authors_newest_first(
        self, reconstructor: FeedReconstructor, two_author_chains
    ) -> None:
        """Test per-author limit applies before the global timestamp sort."""
        # Act
        feed = await reconstructor.build_feed(limit_per_author=2, max_total=10)

        # Assert
        assert [entry.timestamp for entry in feed] == [100, 95, 90, 85]
        assert [entry.body for entry in feed] == ["alice three", "bob two", "alice two", "bob one"]

    @pytest.mark.asyncio
    async def test_build_feed_should_truncate_to_max_total(
        self, reconstructor: FeedReconstructor, two_author_chains
    ) -> None:
        """Test max_total caps the merged feed."""
        feed = await reconstructor.build_feed(limit_per_author=3, max_total=2)

        assert [entry.timestamp for entry in feed] == [100, 95]

    @pytest.mark.asyncio
    async def test_build_feed_should_be_empty_without_authors(
        self, reconstructor: FeedReconstructor
    ) -> None:
        """Test no heads means an empty feed."""
        assert await reconstructor.build_feed() == []

    @pytest.mark.asyncio
    async def test_zero_limits_should_not_fall_back_to_defaults(
        self, reconstructor: FeedReconstructor, ledger: InMemoryLedger, two_author_chains
    ) -> None:
        """Test an explicit zero is honored instead of the settings default."""
        # Arrange
        fetches = ledger.fetch_calls

        # Act
        no_units = await reconstructor.build_feed(limit_per_author=0, max_total=10)
        fetches_after_zero_limit = ledger.fetch_calls
        no_entries = await reconstructor.build_feed(limit_per_author=3, max_total=0)

        # Assert
        assert no_units == []
        assert fetches_after_zero_limit == fetches
        assert no_entries == []

    @pytest.mark.asyncio
    async def test_negative_limits_should_raise(self, reconstructor: FeedReconstructor) -> None:
        """Test negative limits are rejected."""
        with pytest.raises(ValueError):
            await reconstructor.build_feed(limit_per_author=-1)

        with pytest.raises(ValueError):
            await reconstructor.build_feed(max_total=-1)


class TestFeedCache:
    """Test suite for feed caching."""

    @pytest.mark.asyncio
    async def test_cached_feed_should_be_served_within_ttl(
        self,
        reconstructor: FeedReconstructor,
        publisher: PublishOrchestrator,
        signer: LocalSigner,
        cache_clock: ManualClock,
    ) -> None:
        """Test a fresh build is reused until the TTL passes."""
        # Arrange
        await publisher.create_publish_operation(signer, "first")
        first = await reconstructor.build_feed()
        await publisher.create_publish_operation(signer, "second")

        # Act
        cached = await reconstructor.build_feed()
        cache_clock.now = 31.0
        rebuilt = await reconstructor.build_feed()

        # Assert
        assert cached == first
        assert [entry.body for entry in rebuilt] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_use_cache_false_should_rebuild(
        self,
        reconstructor: FeedReconstructor,
        publisher: PublishOrchestrator,
        signer: LocalSigner,
    ) -> None:
        """Test bypassing the cache always walks the chains."""
        await publisher.create_publish_operation(signer, "first")
        await reconstructor.build_feed()
        await publisher.create_publish_operation(signer, "second")

        feed = await reconstructor.build_feed(use_cache=False)

        assert len(feed) == 2

    @pytest.mark.asyncio
    async def test_different_parameters_should_miss_the_cache(
        self, reconstructor: FeedReconstructor, two_author_chains
    ) -> None:
        """Test a cached build only answers the same limits."""
        await reconstructor.build_feed(limit_per_author=1, max_total=10)

        feed = await reconstructor.build_feed(limit_per_author=3, max_total=10)

        assert len(feed) == 5

    @pytest.mark.asyncio
    async def test_feed_stats_should_report_cache_state(
        self,
        reconstructor: FeedReconstructor,
        cache_clock: ManualClock,
        two_author_chains,
    ) -> None:
        """Test stats move from empty to fresh to stale."""
        # Act
        empty = await reconstructor.get_feed_stats()
        await reconstructor.build_feed()
        fresh = await reconstructor.get_feed_stats()
        cache_clock.now = 30.0
        stale = await reconstructor.get_feed_stats()

        # Assert
        assert empty.cache_status == "empty"
        assert fresh.cache_status == "fresh"
        assert fresh.cached_entries == 5
        assert fresh.total_authors == 2
        assert stale.cache_status == "stale"

    @pytest.mark.asyncio
    async def test_clear_cache_should_empty_snapshot(
        self, reconstructor: FeedReconstructor, two_author_chains
    ) -> None:
        """Test cleared cache reports empty."""
        await reconstructor.build_feed()

        reconstructor.clear_cache()

        assert (await reconstructor.get_feed_stats()).cache_status == "empty"

    @pytest.mark.asyncio
    async def test_cached_feed_should_not_be_mutable_by_callers(
        self, reconstructor: FeedReconstructor, two_author_chains
    ) -> None:
        """Test changes to a returned feed never reach the cached snapshot."""
        # Arrange
        feed = await reconstructor.build_feed()

        # Act
        feed.clear()
        cached = await reconstructor.build_feed()

        # Assert
        assert len(cached) == 5
        with pytest.raises(ValidationError):
            cached[0].body = "rewritten"
        assert (await reconstructor.build_feed())[0].body == "alice three"


class TestErrorIsolation:
    """Test suite for per-author failure handling."""

    @pytest.mark.asyncio
    async def test_corrupt_head_should_drop_only_that_author(
        self,
        reconstructor: FeedReconstructor,
        ledger: InMemoryLedger,
        signer: LocalSigner,
        two_author_chains,
    ) -> None:
        """Test an unreadable head removes one author, not the whole feed."""
        # Arrange
        ledger.overwrite(two_author_chains[signer.public_identity][-1], b"\x00garbage")

        # Act
        feed = await reconstructor.build_feed()

        # Assert
        assert [entry.body for entry in feed] == ["bob two", "bob one"]

    @pytest.mark.asyncio
    async def test_mid_chain_corruption_should_keep_newer_entries(
        self,
        reconstructor: FeedReconstructor,
        ledger: InMemoryLedger,
        signer: LocalSigner,
        two_author_chains,
    ) -> None:
        """Test a walk stops at the first bad unit and keeps what it read."""
        await corrupt_payload(ledger, two_author_chains[signer.public_identity][1])

        entries = await reconstructor.get_units_for_author(signer.public_identity)

        assert [entry.body for entry in entries] == ["alice three"]


class TestChainWalker:
    """Test suite for backward chain walks."""

    @pytest.mark.asyncio
    async def test_walk_should_stop_at_author_genesis(
        self,
        reconstructor: FeedReconstructor,
        publisher: PublishOrchestrator,
        ledger: InMemoryLedger,
        registry: ChainHeadRegistry,
        signer: LocalSigner,
    ) -> None:
        """Test the genesis unit ends the walk without an error."""
        # Arrange
        genesis_id = ledger.put(
            encode_document({"p": UNIT_PROTOCOL, "k": "author_genesis", "a": signer.public_identity})
        )
        await registry.record_genesis(signer.public_identity, genesis_id)
        operation = await publisher.create_publish_operation(signer, "anchored note")
        walker = reconstructor.walker(operation.last_unit_id, signer.public_identity)

        # Act
        entries = [entry async for entry in walker]

        # Assert
        assert [entry.previous_unit_id for entry in entries] == [genesis_id]
        assert walker.last_error is None

    @pytest.mark.asyncio
    async def test_walker_should_restart_on_each_iteration(
        self, reconstructor: FeedReconstructor, signer: LocalSigner, two_author_chains
    ) -> None:
        """Test iterating twice yields the same entries."""
        walker = reconstructor.walker(
            two_author_chains[signer.public_identity][-1], signer.public_identity, limit=2
        )

        first = [entry.unit_id async for entry in walker]
        second = [entry.unit_id async for entry in walker]

        assert first == second
        assert len(first) == 2

    @pytest.mark.asyncio
    async def test_walker_should_stop_on_foreign_author(
        self,
        reconstructor: FeedReconstructor,
        signer: LocalSigner,
        other_signer: LocalSigner,
        two_author_chains,
    ) -> None:
        """Test a unit signed for another author ends the walk with an error."""
        walker = reconstructor.walker(
            two_author_chains[other_signer.public_identity][-1], signer.public_identity
        )

        entries = [entry async for entry in walker]

        assert entries == []
        assert isinstance(walker.last_error, UnitDecodeError)

    @pytest.mark.asyncio
    async def test_units_for_unknown_author_should_be_empty(
        self, reconstructor: FeedReconstructor
    ) -> None:
        """Test authors without a head have no units."""
        assert await reconstructor.get_units_for_author("nobody") == []


class TestReconstructDocument:
    """Test suite for FeedReconstructor.reconstruct_document()."""

    @pytest.mark.asyncio
    async def test_reconstruct_should_rebuild_latest_document(
        self,
        reconstructor: FeedReconstructor,
        orchestrator: PublishOrchestrator,
        signer: LocalSigner,
        no_break_document: str,
    ) -> None:
        """Test the head's document and an earlier multi-chunk document both reassemble."""
        # Arrange
        first = await orchestrator.create_publish_operation(signer, no_break_document)
        second = await orchestrator.create_publish_operation(signer, "short note")

        # Act
        latest = await reconstructor.reconstruct_document(signer.public_identity)
        earlier = await reconstructor.reconstruct_document(
            signer.public_identity, first.last_unit_id
        )

        # Assert
        assert latest.text == "short note"
        assert latest.operation_id == second.operation_id
        assert earlier.text == no_break_document
        assert earlier.total_chunks == 4
        assert earlier.unit_ids == first.unit_ids

    @pytest.mark.asyncio
    async def test_reconstruct_should_raise_on_corrupt_unit(
        self,
        reconstructor: FeedReconstructor,
        orchestrator: PublishOrchestrator,
        ledger: InMemoryLedger,
        signer: LocalSigner,
        no_break_document: str,
    ) -> None:
        """Test tampering surfaces as CorruptChunkError."""
        operation = await orchestrator.create_publish_operation(signer, no_break_document)
        await corrupt_payload(ledger, operation.unit_ids[1])

        with pytest.raises(CorruptChunkError):
            await reconstructor.reconstruct_document(signer.public_identity)

    @pytest.mark.asyncio
    async def test_reconstruct_from_middle_unit_should_report_missing_chunks(
        self,
        reconstructor: FeedReconstructor,
        orchestrator: PublishOrchestrator,
        signer: LocalSigner,
        no_break_document: str,
    ) -> None:
        """Test starting below the last unit leaves later chunks missing."""
        operation = await orchestrator.create_publish_operation(signer, no_break_document)

        with pytest.raises(MissingChunkError) as exc_info:
            await reconstructor.reconstruct_document(
                signer.public_identity, operation.unit_ids[1]
            )

        assert exc_info.value.index == 2

    @pytest.mark.asyncio
    async def test_reconstruct_should_return_none_without_chain(
        self, reconstructor: FeedReconstructor
    ) -> None:
        """Test authors without a head have no document."""
        assert await reconstructor.reconstruct_document("nobody") is None
