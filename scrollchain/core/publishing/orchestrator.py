"""
Publish orchestrator.

Drives index-ordered submission of a document's chunks to the ledger:
preparing -> publishing -> completed | partial | error | cancelled.

Each unit links back to the one before it. Chunk 0 links to the author's
chain base (current head or genesis unit), chunk i to chunk i-1. Because
of that, a chunk that fails permanently ends the pass and later chunks stay
pending until resume(). The chain head advances only after every chunk of
the operation is confirmed.

Dependencies: asyncio (stdlib), tenacity, scrollchain.core, scrollchain.boundary
System role: Resumable multi-step publishing
"""

import asyncio
import logging
import time
import uuid
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from scrollchain.boundary.db.kv_store import KeyValueStore
from scrollchain.boundary.ledger.base import Ledger, Signer
from scrollchain.configs.publishing import PublishingSettings
from scrollchain.core.chain.head_registry import ChainHeadRegistry
from scrollchain.core.chunking.engine import ChunkingEngine
from scrollchain.core.codec import (
    decode_chunk_unit,
    decode_document,
    encode_chunk_unit,
    envelope_overhead,
    envelope_to_chunk,
)
from scrollchain.core.exceptions import (
    ChunkingError,
    ConcurrentPublishConflictError,
    CorruptChunkError,
    InvalidOperationStateError,
    InvalidSignerError,
    LedgerError,
    LedgerFailedError,
    LedgerRejectedError,
    LedgerTransientError,
    OperationNotFoundError,
    UnitDecodeError,
)
from scrollchain.core.integrity import IntegrityReport, IntegrityVerifier
from scrollchain.core.publishing.status_manager import (
    ProgressCallback,
    PublishStatusManager,
)
from scrollchain.models.chunk import Chunk, ChunkingLimits
from scrollchain.models.operation import (
    RESUMABLE_STAGES,
    ChunkState,
    ChunkStatus,
    PublishManifest,
    PublishOperation,
    PublishStage,
)
from scrollchain.observability.log_utils import short_id

logger = logging.getLogger(__name__)

MANIFEST_PREFIX = "manifest:"

T = TypeVar("T")


def _now_ms() -> int:
    return int(time.time() * 1000)


class PublishOrchestrator:
    """
    Publishes documents as linked unit sequences and tracks their status.

    One in-flight publish per author (enforced with the registry's publish
    lock); operations for different authors run concurrently.
    """

    def __init__(
        self,
        ledger: Ledger,
        registry: ChainHeadRegistry,
        store: KeyValueStore,
        engine: ChunkingEngine | None = None,
        verifier: IntegrityVerifier | None = None,
        settings: PublishingSettings | None = None,
        clock: Callable[[], int] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """
        Initialize orchestrator with collaborators.

        Args:
            ledger: Ledger units are submitted to
            registry: Chain head registry (heads and per-author lock)
            store: Key-value store for operations and manifests
            engine: Chunking engine
            verifier: Integrity verifier
            settings: Retry and timeout policy
            clock: Unit timestamp source, milliseconds since epoch
            sleep: Retry delay coroutine (asyncio.sleep by default)
        """
        self.ledger = ledger
        self.registry = registry
        self.store = store
        self.engine = engine or ChunkingEngine()
        self.verifier = verifier or IntegrityVerifier(self.engine.hasher)
        self.settings = settings or PublishingSettings()
        self.clock = clock or _now_ms
        self.sleep = sleep or asyncio.sleep
        self.status = PublishStatusManager(store)
        self._operations: dict[str, PublishOperation] = {}
        self._signers: dict[str, Signer] = {}
        self._running: set[str] = set()
        self._cancel_requested: set[str] = set()

    async def prepare(
        self,
        signer: Signer,
        document: str,
        limits: ChunkingLimits | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PublishOperation:
        """
        Split and hash a document into a new operation in `preparing`.

        Args:
            signer: Author identity that will sign every unit
            document: Raw document text
            limits: Chunking limits (engine defaults when omitted); the envelope
                overhead for the author is added before splitting
            on_progress: Called with the operation after every status change

        Returns:
            PublishOperation: Operation ready for publish()

        Raises:
            InvalidSignerError: When the signer has no public identity
            ChunkingError: When the document is empty or cannot be chunked
        """
        if not signer.public_identity:
            raise InvalidSignerError("Signer has no public identity")

        chunks = self.engine.split(document, self.unit_limits(signer.public_identity, limits))
        if not chunks:
            raise ChunkingError("Document is empty after normalization")
        for chunk in chunks:
            if not self.verifier.verify_chunk(chunk):
                raise CorruptChunkError(chunk.index, "hash mismatch after chunking")

        operation = PublishOperation(
            operation_id=uuid.uuid4().hex,
            author_id=signer.public_identity,
            chunks=chunks,
            chunk_status={chunk.index: ChunkStatus() for chunk in chunks},
        )
        self._operations[operation.operation_id] = operation
        self._signers[operation.operation_id] = signer
        self.status.register_callback(operation.operation_id, on_progress)
        await self.status.save(operation)

        logger.info(
            f"{__name__}:prepare - Operation prepared",
            extra={
                "operation_id": short_id(operation.operation_id),
                "author_id": short_id(operation.author_id),
                "total_chunks": operation.total_chunks,
            },
        )
        return operation

    async def publish(self, operation_id: str, signer: Signer | None = None) -> PublishOperation:
        """
        Submit a prepared operation's chunks.

        Args:
            operation_id: Operation in `preparing`
            signer: Signer (the one given to prepare() when omitted)

        Returns:
            PublishOperation: Operation in its end-of-pass stage

        Raises:
            OperationNotFoundError: Unknown operation
            InvalidOperationStateError: Operation is not in `preparing`
            ConcurrentPublishConflictError: Author already has a publish in flight
        """
        operation = await self.get_status(operation_id)
        if operation.stage != PublishStage.PREPARING:
            raise InvalidOperationStateError(operation_id, operation.stage.value, "publish")
        signer = self._signer_for(operation, signer)

        async with self.registry.publish_lock(operation.author_id):
            operation.base_unit_id = await self.registry.get_chain_base(operation.author_id)
            await self._run(operation, signer)
        return operation

    async def create_publish_operation(
        self,
        signer: Signer,
        document: str,
        on_progress: ProgressCallback | None = None,
        limits: ChunkingLimits | None = None,
    ) -> PublishOperation:
        """
        Prepare and publish a document in one call.

        The author's publish slot is taken before chunking, so a conflicting
        call fails fast without creating an operation.

        Raises:
            ConcurrentPublishConflictError: Author already has a publish in flight
        """
        async with self.registry.publish_lock(signer.public_identity):
            operation = await self.prepare(signer, document, limits, on_progress)
            operation.base_unit_id = await self.registry.get_chain_base(operation.author_id)
            await self._run(operation, signer)
        return operation

    async def resume(self, operation_id: str, signer: Signer | None = None) -> PublishOperation:
        """
        Re-enter publishing for failed and pending chunks only.

        Published chunks are never re-submitted. If chunk 0 is not yet
        published the operation is rebased onto the current chain base.

        Args:
            operation_id: Operation in `partial` or `error`, or stuck in
                `publishing` with no pass running (e.g. after a crash)
            signer: Signer for the author

        Returns:
            PublishOperation: Operation in its end-of-pass stage

        Raises:
            OperationNotFoundError: Unknown operation
            InvalidOperationStateError: Operation is not resumable
            InvalidSignerError: Signer identity differs from the operation's author
            ConcurrentPublishConflictError: Another publish is in flight, or the
                chain head moved after chunk 0 was published
        """
        operation = await self.get_status(operation_id)
        if not self._is_resumable(operation):
            raise InvalidOperationStateError(operation_id, operation.stage.value, "resume")
        signer = self._signer_for(operation, signer)

        async with self.registry.publish_lock(operation.author_id):
            chain_base = await self.registry.get_chain_base(operation.author_id)
            if operation.status_of(0).state != ChunkState.PUBLISHED:
                operation.base_unit_id = chain_base
            elif chain_base != operation.base_unit_id:
                raise ConcurrentPublishConflictError(
                    operation.author_id,
                    {
                        "operation_id": operation_id,
                        "reason": "chain head moved after the first unit was published",
                    },
                )

            logger.info(
                f"{__name__}:resume - Resuming operation",
                extra={
                    "operation_id": short_id(operation_id),
                    "remaining": len(operation.chunks_needing_work()),
                },
            )
            await self._run(operation, signer)
        return operation

    async def cancel(self, operation_id: str) -> PublishOperation:
        """
        Cancel a publishing operation.

        Cancellation is cooperative: a running pass stops before its next
        submission. Confirmed units stay on the ledger; the chain head is not
        advanced.

        Raises:
            OperationNotFoundError: Unknown operation
            InvalidOperationStateError: Operation is not publishing
        """
        operation = await self.get_status(operation_id)
        if operation.stage != PublishStage.PUBLISHING:
            raise InvalidOperationStateError(operation_id, operation.stage.value, "cancel")

        if operation_id in self._running:
            self._cancel_requested.add(operation_id)
            logger.info(
                f"{__name__}:cancel - Cancellation requested",
                extra={"operation_id": short_id(operation_id)},
            )
        else:
            # no pass is running (e.g. after a restart), cancel directly
            await self.status.transition(operation, PublishStage.CANCELLED)
            self._release(operation_id)
        return operation

    def is_cancel_requested(self, operation_id: str) -> bool:
        return operation_id in self._cancel_requested

    def unit_limits(self, author_id: str, limits: ChunkingLimits | None = None) -> ChunkingLimits:
        """
        Chunking limits that leave room for the author's unit envelope.

        Args:
            author_id: Author whose identity is stamped into every envelope
            limits: Base limits (engine defaults when omitted)

        Returns:
            ChunkingLimits: Copy with `envelope_overhead_bytes` set
        """
        limits = limits or self.engine.default_limits
        overhead = envelope_overhead(
            author_id, hash_chars=len(self.engine.hasher.hash(b""))
        )
        return limits.model_copy(
            update={"envelope_overhead_bytes": max(limits.envelope_overhead_bytes, overhead)}
        )

    async def get_status(self, operation_id: str) -> PublishOperation:
        """
        Get an operation from memory or the key-value store.

        Raises:
            OperationNotFoundError: Unknown operation
        """
        operation = self._operations.get(operation_id)
        if operation is None:
            operation = await self.status.load(operation_id)
            if operation is None:
                raise OperationNotFoundError(operation_id)
            self._operations[operation_id] = operation
        return operation

    async def list_operations(self) -> list[PublishOperation]:
        """Operations known in memory or persisted, oldest first."""
        for operation_id in await self.status.list_stored_ids():
            if operation_id not in self._operations:
                await self.get_status(operation_id)
        return sorted(self._operations.values(), key=lambda op: op.created_at)

    async def get_manifest(self, operation_id: str) -> PublishManifest | None:
        raw = await self.store.get(MANIFEST_PREFIX + operation_id)
        if raw is None:
            return None
        return PublishManifest.model_validate_json(raw)

    async def list_manifests(self, author_id: str | None = None) -> list[PublishManifest]:
        manifests = []
        for key in await self.store.list_keys(MANIFEST_PREFIX):
            raw = await self.store.get(key)
            if raw is None:
                continue
            manifest = PublishManifest.model_validate_json(raw)
            if author_id is None or manifest.author_id == author_id:
                manifests.append(manifest)
        return sorted(manifests, key=lambda m: m.recorded_at)

    async def verify_published(self, operation_id: str) -> IntegrityReport:
        """
        Fetch a completed operation's units back and check them against its manifest.

        Args:
            operation_id: Completed operation

        Returns:
            IntegrityReport: Findings (units that cannot be fetched or decoded count as missing)

        Raises:
            OperationNotFoundError: No manifest recorded for the operation
        """
        manifest = await self.get_manifest(operation_id)
        if manifest is None:
            raise OperationNotFoundError(operation_id, {"reason": "no manifest recorded"})

        chunks: list[Chunk] = []
        for unit_id in manifest.unit_ids:
            payload = await self.ledger.fetch(unit_id)
            if payload is None:
                logger.warning(
                    f"{__name__}:verify_published - Unit not found",
                    extra={"unit_id": short_id(unit_id)},
                )
                continue
            try:
                envelope = decode_chunk_unit(decode_document(payload, unit_id), unit_id)
                chunks.append(envelope_to_chunk(envelope, unit_id))
            except UnitDecodeError as e:
                logger.warning(
                    f"{__name__}:verify_published - Unit could not be decoded",
                    extra={"unit_id": short_id(unit_id), "error": str(e)},
                )
        return self.verifier.compare(manifest, chunks)

    async def _run(self, operation: PublishOperation, signer: Signer) -> None:
        operation_id = operation.operation_id
        self._running.add(operation_id)
        self._cancel_requested.discard(operation_id)
        try:
            if operation.stage != PublishStage.PUBLISHING:
                await self.status.transition(operation, PublishStage.PUBLISHING)
            try:
                token = await self._fetch_token_with_retry(operation)
            except LedgerFailedError as e:
                await self._finish(operation, e.message)
                return
            last_error: str | None = None

            for chunk in operation.chunks_needing_work():
                if operation_id in self._cancel_requested:
                    await self.status.transition(operation, PublishStage.CANCELLED)
                    self._release(operation_id)
                    return

                payload = encode_chunk_unit(
                    chunk,
                    author_id=operation.author_id,
                    operation_id=operation_id,
                    previous_unit_id=operation.link_for(chunk.index),
                    timestamp=self.clock(),
                )
                try:
                    unit_id, token = await self._submit_with_retry(
                        operation, chunk.index, payload, signer, token
                    )
                except InvalidSignerError as e:
                    await self.status.record_failed(operation, chunk.index, e.message)
                    await self.status.transition(operation, PublishStage.ERROR, e.message)
                    return
                except LedgerFailedError as e:
                    last_error = e.message
                    await self.status.record_failed(operation, chunk.index, e.message)
                    # later chunks link to this one, so the pass stops here
                    break

                await self.status.record_published(operation, chunk.index, unit_id)

            await self._finish(operation, last_error)
        except Exception as e:
            await self._abort(operation, e)
            raise
        finally:
            self._running.discard(operation_id)
            self._cancel_requested.discard(operation_id)

    async def _finish(self, operation: PublishOperation, last_error: str | None) -> None:
        if operation.published_count == operation.total_chunks:
            # a cancel that arrives after the final submission is too late
            await self.registry.advance_head(
                operation.author_id, operation.last_unit_id, operation.total_chunks
            )
            await self._record_manifest(operation)
            await self.status.transition(operation, PublishStage.COMPLETED)
            self._release(operation.operation_id)
            logger.info(
                f"{__name__}:_finish - Operation completed",
                extra={
                    "operation_id": short_id(operation.operation_id),
                    "total_chunks": operation.total_chunks,
                },
            )
            return

        summary = (
            f"{operation.total_chunks - operation.published_count} of "
            f"{operation.total_chunks} chunks not published: {last_error}"
        )
        stage = PublishStage.PARTIAL if operation.published_count else PublishStage.ERROR
        await self.status.transition(operation, stage, summary)
        logger.warning(
            f"{__name__}:_finish - Operation incomplete",
            extra={
                "operation_id": short_id(operation.operation_id),
                "stage": stage.value,
                "published": operation.published_count,
                "total_chunks": operation.total_chunks,
            },
        )

    async def _submit_with_retry(
        self,
        operation: PublishOperation,
        index: int,
        payload: bytes,
        signer: Signer,
        token: str | None,
    ) -> tuple[str, str | None]:
        """
        Submit one unit within the retry budget.

        Timeouts and LedgerTransientError are retried with a fixed delay; a
        LedgerRejectedError also refreshes the freshness token first.

        Returns:
            (unit id, freshness token in use after the call)

        Raises:
            InvalidSignerError: Signer unusable (not retried)
            LedgerFailedError: Budget exhausted or permanent ledger rejection
        """
        status = operation.status_of(index)
        attempts = 0

        try:
            async for attempt in self._retrying(operation, index):
                with attempt:
                    attempts += 1
                    status.attempts += 1
                    try:
                        unit_id = await self._with_timeout(self.ledger.submit(payload, signer, token))
                    except LedgerRejectedError:
                        token = await self._with_timeout(self.ledger.current_freshness_token())
                        raise
        except InvalidSignerError:
            raise
        except LedgerError as e:
            raise LedgerFailedError(e.message, attempts, {"index": index}) from e

        return unit_id, token

    async def _fetch_token_with_retry(self, operation: PublishOperation) -> str:
        """
        Freshness token for a pass, under the same retry budget as submissions.

        Raises:
            LedgerFailedError: Budget exhausted or permanent ledger rejection
        """
        attempts = 0
        try:
            async for attempt in self._retrying(operation, None):
                with attempt:
                    attempts += 1
                    token = await self._with_timeout(self.ledger.current_freshness_token())
        except LedgerError as e:
            raise LedgerFailedError(e.message, attempts, {"step": "freshness_token"}) from e
        return token

    def _retrying(self, operation: PublishOperation, index: int | None) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_fixed(self.settings.retry_delay_seconds),
            retry=retry_if_exception_type(LedgerTransientError),
            sleep=self.sleep,
            before_sleep=self._log_retry(operation, index),
            reraise=True,
        )

    async def _with_timeout(self, call: Awaitable[T]) -> T:
        """Await a ledger call, turning a timeout into a retriable error."""
        try:
            return await asyncio.wait_for(call, timeout=self.settings.submit_timeout_seconds)
        except asyncio.TimeoutError as e:
            raise LedgerTransientError(
                "Ledger call timed out",
                {"timeout_seconds": self.settings.submit_timeout_seconds},
            ) from e

    def _log_retry(
        self, operation: PublishOperation, index: int | None
    ) -> Callable[[RetryCallState], None]:
        def log(retry_state: RetryCallState) -> None:
            logger.warning(
                f"{__name__}:_retrying - Ledger call failed, retrying",
                extra={
                    "operation_id": short_id(operation.operation_id),
                    "index": index,
                    "attempt": retry_state.attempt_number,
                    "max_attempts": self.settings.max_attempts,
                    "error": str(retry_state.outcome.exception()),
                },
            )

        return log

    async def _abort(self, operation: PublishOperation, error: Exception) -> None:
        """Leave an operation resumable when a pass ends on an unexpected error."""
        if operation.stage != PublishStage.PUBLISHING:
            return
        stage = PublishStage.PARTIAL if operation.published_count else PublishStage.ERROR
        logger.error(
            f"{__name__}:_abort - Publish pass failed",
            extra={
                "operation_id": short_id(operation.operation_id),
                "stage": stage.value,
                "error_type": type(error).__name__,
            },
            exc_info=error,
        )
        await self.status.transition(operation, stage, f"Publish pass failed: {error}")

    async def _record_manifest(self, operation: PublishOperation) -> None:
        manifest = PublishManifest(
            operation_id=operation.operation_id,
            author_id=operation.author_id,
            total_chunks=operation.total_chunks,
            chunk_hashes=[chunk.hash for chunk in operation.chunks],
            unit_ids=operation.unit_ids,
        )
        await self.store.set(
            MANIFEST_PREFIX + operation.operation_id,
            manifest.model_dump_json().encode("utf-8"),
        )

    def _is_resumable(self, operation: PublishOperation) -> bool:
        if operation.stage in RESUMABLE_STAGES:
            return True
        return (
            operation.stage == PublishStage.PUBLISHING
            and operation.operation_id not in self._running
        )

    def _signer_for(self, operation: PublishOperation, signer: Signer | None) -> Signer:
        signer = signer or self._signers.get(operation.operation_id)
        if signer is None:
            raise InvalidSignerError(
                "No signer available for operation",
                {"operation_id": operation.operation_id},
            )
        if signer.public_identity != operation.author_id:
            raise InvalidSignerError(
                "Signer does not match operation author",
                {"operation_id": operation.operation_id},
            )
        self._signers[operation.operation_id] = signer
        return signer

    def _release(self, operation_id: str) -> None:
        self._signers.pop(operation_id, None)
        self.status.release(operation_id)
