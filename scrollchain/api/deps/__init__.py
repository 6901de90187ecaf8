"""FastAPI dependencies."""

from scrollchain.api.deps.dependencies import (
    ServiceCache,
    get_scroll_service,
    get_service_cache,
)

__all__ = [
    "ServiceCache",
    "get_scroll_service",
    "get_service_cache",
]
