"""Application services."""

from scrollchain.application.services.scroll_service import (
    ScrollService,
    build_scroll_service,
)

__all__ = ["ScrollService", "build_scroll_service"]
