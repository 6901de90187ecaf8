"""
Publish status manager.

Owns stage transitions, per-chunk status recording and progress for publish
operations, persists in-flight operations to the key-value store and
notifies progress listeners.

Progress: 0 while preparing, floor(published / total * 80) + 10 while
publishing (first 10% preparation, last 10% finalization), 100 on
completion.

Dependencies: scrollchain.boundary.db.kv_store, scrollchain.models.operation
System role: Status tracking for the publish orchestrator
"""

import logging
import math
from typing import Callable

from scrollchain.boundary.db.kv_store import KeyValueStore
from scrollchain.core.exceptions import InvalidOperationStateError
from scrollchain.models.operation import (
    ChunkState,
    PublishOperation,
    PublishStage,
    utc_now,
)
from scrollchain.observability.log_utils import short_id

logger = logging.getLogger(__name__)

OPERATION_PREFIX = "operation:"

ProgressCallback = Callable[[PublishOperation], None]

ALLOWED_TRANSITIONS: dict[PublishStage, frozenset[PublishStage]] = {
    PublishStage.PREPARING: frozenset({PublishStage.PUBLISHING, PublishStage.ERROR}),
    PublishStage.PUBLISHING: frozenset(
        {
            PublishStage.COMPLETED,
            PublishStage.PARTIAL,
            PublishStage.ERROR,
            PublishStage.CANCELLED,
        }
    ),
    PublishStage.PARTIAL: frozenset({PublishStage.PUBLISHING}),
    PublishStage.ERROR: frozenset({PublishStage.PUBLISHING}),
    PublishStage.COMPLETED: frozenset(),
    PublishStage.CANCELLED: frozenset(),
}


def compute_progress(operation: PublishOperation) -> int:
    """
    Progress percentage for an operation's current stage.

    Args:
        operation: Operation to measure

    Returns:
        int: Value in [0, 100]
    """
    if operation.stage == PublishStage.PREPARING:
        return 0
    if operation.stage == PublishStage.COMPLETED:
        return 100
    if not operation.total_chunks:
        return 10
    return math.floor(operation.published_count / operation.total_chunks * 80) + 10


class PublishStatusManager:
    """Stage, chunk status and progress bookkeeping for publish operations."""

    def __init__(self, store: KeyValueStore) -> None:
        """
        Initialize status manager.

        Args:
            store: Key-value store for in-flight operation records
        """
        self.store = store
        self._callbacks: dict[str, ProgressCallback] = {}

    def register_callback(self, operation_id: str, callback: ProgressCallback | None) -> None:
        if callback is not None:
            self._callbacks[operation_id] = callback

    def release(self, operation_id: str) -> None:
        self._callbacks.pop(operation_id, None)

    async def transition(
        self,
        operation: PublishOperation,
        stage: PublishStage,
        error: str | None = None,
    ) -> None:
        """
        Move an operation to a new stage.

        Args:
            operation: Operation to update (mutated in place)
            stage: Target stage
            error: Error summary recorded on the operation

        Raises:
            InvalidOperationStateError: When the transition is not allowed
        """
        if stage not in ALLOWED_TRANSITIONS[operation.stage]:
            raise InvalidOperationStateError(
                operation.operation_id, operation.stage.value, f"move to {stage.value}"
            )

        previous = operation.stage
        operation.stage = stage
        operation.error = error
        operation.progress = compute_progress(operation)
        operation.updated_at = utc_now()

        logger.info(
            f"{__name__}:transition - Stage changed",
            extra={
                "operation_id": short_id(operation.operation_id),
                "from_stage": previous.value,
                "to_stage": stage.value,
                "progress": operation.progress,
            },
        )
        await self.save(operation)
        self._notify(operation)

    async def record_published(self, operation: PublishOperation, index: int, unit_id: str) -> None:
        """Mark a chunk confirmed and advance progress."""
        status = operation.status_of(index)
        status.state = ChunkState.PUBLISHED
        status.unit_id = unit_id
        status.error = None
        status.published_at = utc_now()
        await self._chunk_changed(operation)

    async def record_failed(self, operation: PublishOperation, index: int, error: str) -> None:
        """Mark a chunk permanently failed for this pass."""
        status = operation.status_of(index)
        status.state = ChunkState.FAILED
        status.error = error
        await self._chunk_changed(operation)

    async def save(self, operation: PublishOperation) -> None:
        """
        Persist an operation while it can still be resumed.

        Terminal operations are removed from the store.
        """
        key = OPERATION_PREFIX + operation.operation_id
        if operation.is_terminal:
            await self.store.remove(key)
        else:
            await self.store.set(key, operation.model_dump_json().encode("utf-8"))

    async def load(self, operation_id: str) -> PublishOperation | None:
        raw = await self.store.get(OPERATION_PREFIX + operation_id)
        if raw is None:
            return None
        return PublishOperation.model_validate_json(raw)

    async def list_stored_ids(self) -> list[str]:
        keys = await self.store.list_keys(OPERATION_PREFIX)
        return [key[len(OPERATION_PREFIX):] for key in keys]

    async def _chunk_changed(self, operation: PublishOperation) -> None:
        operation.progress = compute_progress(operation)
        operation.updated_at = utc_now()
        await self.save(operation)
        self._notify(operation)

    def _notify(self, operation: PublishOperation) -> None:
        callback = self._callbacks.get(operation.operation_id)
        if callback is None:
            return
        try:
            callback(operation)
        except Exception as e:
            logger.warning(
                f"{__name__}:_notify - Progress callback failed",
                extra={"operation_id": short_id(operation.operation_id), "error": str(e)},
            )
