"""Resumable publishing of chunked documents."""

from scrollchain.core.publishing.orchestrator import PublishOrchestrator
from scrollchain.core.publishing.status_manager import (
    PublishStatusManager,
    compute_progress,
)

__all__ = ["PublishOrchestrator", "PublishStatusManager", "compute_progress"]
