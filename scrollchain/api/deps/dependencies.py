"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: scrollchain.configs, scrollchain.application
System role: DI container for service injection
"""

import asyncio

from fastapi import Depends

from scrollchain.application.services.scroll_service import (
    ScrollService,
    build_scroll_service,
)
from scrollchain.configs import get_settings


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self) -> None:
        self._scroll_service: ScrollService | None = None
        self._lock = asyncio.Lock()

    async def get_scroll_service(self) -> ScrollService:
        """Get cached scroll service, building it on first use."""
        if self._scroll_service is None:
            async with self._lock:
                if self._scroll_service is None:
                    self._scroll_service = await build_scroll_service(get_settings())
        return self._scroll_service

    def clear(self) -> None:
        """Clear all cached instances."""
        self._scroll_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


async def get_scroll_service(
    cache: ServiceCache = Depends(get_service_cache),
) -> ScrollService:
    """
    Get scroll service instance.

    Args:
        cache: Service cache (injected via Depends)

    Returns:
        ScrollService: Shared scroll service
    """
    return await cache.get_scroll_service()
