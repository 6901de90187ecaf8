"""Feed and document reconstruction from author chains."""

from scrollchain.core.feed.cache import FeedCache, FeedSnapshot
from scrollchain.core.feed.reconstructor import FeedReconstructor
from scrollchain.core.feed.walker import ChainWalker, WalkedUnit

__all__ = [
    "ChainWalker",
    "FeedCache",
    "FeedReconstructor",
    "FeedSnapshot",
    "WalkedUnit",
]
