"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory ledger and key-value store, signers, chunking engine,
publish orchestrator with zero retry delay, deterministic clocks and ledger
failure rules.
Dependencies: pytest, pytest-asyncio
System role: Test infrastructure and fixture management
"""

import json
from typing import Callable

import pytest

from scrollchain.boundary.db.kv_store import InMemoryKeyValueStore
from scrollchain.boundary.ledger.memory_ledger import InMemoryLedger
from scrollchain.boundary.ledger.signer import LocalSigner
from scrollchain.configs.publishing import PublishingSettings
from scrollchain.core.chain.head_registry import ChainHeadRegistry
from scrollchain.core.chunking.engine import ChunkingEngine
from scrollchain.core.publishing.orchestrator import PublishOrchestrator
from scrollchain.models.chunk import ChunkingLimits


class StepClock:
    """Millisecond clock that advances by a fixed step on every call."""

    def __init__(self, start: int = 1_000, step: int = 10) -> None:
        self.value = start - step
        self.step = step

    def __call__(self) -> int:
        self.value += self.step
        return self.value


def _chunk_failure_rule(
    index: int,
    error_factory: Callable[[], Exception],
    times: int | None = None,
) -> Callable[[bytes], Exception | None]:
    """
    Ledger failure rule that fails submissions of one chunk index.

    Args:
        index: Chunk index to fail (read from the unit envelope)
        error_factory: Builds the error raised for each failing submission
        times: Number of failures before the rule stops firing (None = always)
    """
    remaining = {"count": times}

    def rule(payload: bytes) -> Exception | None:
        document = json.loads(payload)
        if document.get("i") != index:
            return None
        if remaining["count"] is not None:
            if remaining["count"] <= 0:
                return None
            remaining["count"] -= 1
        return error_factory()

    return rule


def _published_indices(ledger: InMemoryLedger) -> list[int]:
    """Chunk indices of every unit appended to the ledger, in order."""
    indices = []
    for payload in ledger.submitted_payloads:
        document = json.loads(payload)
        if "i" in document:
            indices.append(document["i"])
    return indices


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Provide empty in-memory ledger."""
    return InMemoryLedger()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Provide empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def registry(store: InMemoryKeyValueStore) -> ChainHeadRegistry:
    """Provide chain head registry over the in-memory store."""
    return ChainHeadRegistry(store)


@pytest.fixture
def limits() -> ChunkingLimits:
    """Provide limits with 250-character windows and the default unit size."""
    return ChunkingLimits(target_chunk_chars=250, max_unit_bytes_after_encoding=566)


@pytest.fixture
def engine(limits: ChunkingLimits) -> ChunkingEngine:
    """Provide chunking engine defaulting to 250-character windows."""
    return ChunkingEngine(default_limits=limits)


@pytest.fixture
def signer() -> LocalSigner:
    """Provide signer for author alice."""
    return LocalSigner("author-alice")


@pytest.fixture
def other_signer() -> LocalSigner:
    """Provide signer for author bob."""
    return LocalSigner("author-bob")


@pytest.fixture
def publishing_settings() -> PublishingSettings:
    """Provide retry policy with three attempts and no delay."""
    return PublishingSettings(max_attempts=3, retry_delay_seconds=0, submit_timeout_seconds=5)


@pytest.fixture
def clock() -> StepClock:
    """Provide deterministic millisecond clock."""
    return StepClock()


@pytest.fixture
def orchestrator(
    ledger: InMemoryLedger,
    registry: ChainHeadRegistry,
    store: InMemoryKeyValueStore,
    engine: ChunkingEngine,
    publishing_settings: PublishingSettings,
    clock: StepClock,
) -> PublishOrchestrator:
    """Provide publish orchestrator wired to the in-memory collaborators."""
    return PublishOrchestrator(
        ledger,
        registry,
        store,
        engine=engine,
        settings=publishing_settings,
        clock=clock,
    )


@pytest.fixture
def no_break_document() -> str:
    """Provide 1000-character document without any natural break."""
    return "abcdefghij" * 100


@pytest.fixture
def prose_document() -> str:
    """Provide multi-paragraph prose spanning several 250-character windows."""
    paragraph = (
        "The lighthouse keeper climbed the stairs each evening. He wound the clock, "
        "trimmed the wick and watched the ships pass. Some nights the fog rolled in "
        "so thick that the beam seemed to stop a few yards from the glass! Did anyone "
        "see it? He never knew, but he kept the light burning all the same."
    )
    return "\n\n".join(f"{i}. {paragraph}" for i in range(6))


@pytest.fixture
def chunk_failure() -> Callable[..., Callable[[bytes], Exception | None]]:
    """Provide factory for ledger rules that fail one chunk index."""
    return _chunk_failure_rule


@pytest.fixture
def published_indices() -> Callable[[InMemoryLedger], list[int]]:
    """Provide helper listing chunk indices appended to a ledger."""
    return _published_indices
