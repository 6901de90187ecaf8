"""API routers."""

from .authors import router as authors_router
from .feed import router as feed_router
from .genesis import router as genesis_router
from .health import router as health_router
from .operations import router as operations_router

__all__ = [
    "authors_router",
    "feed_router",
    "genesis_router",
    "health_router",
    "operations_router",
]
