"""Per-author chain head tracking."""

from scrollchain.core.chain.head_registry import ChainHeadRegistry

__all__ = ["ChainHeadRegistry"]
