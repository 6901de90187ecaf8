"""
Feed API endpoints.

Routes: GET /feed, POST /feed/refresh

Dependencies: scrollchain.application.services, scrollchain.models.api
System role: Feed HTTP API
"""

from fastapi import APIRouter, Depends, Query

from scrollchain.api.deps import get_scroll_service
from scrollchain.application.services.scroll_service import ScrollService
from scrollchain.models.api import FeedResponse

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("", response_model=FeedResponse)
async def get_feed(
    limit_per_author: int | None = Query(default=None, ge=1),
    max_total: int | None = Query(default=None, ge=1),
    use_cache: bool = True,
    service: ScrollService = Depends(get_scroll_service),
) -> FeedResponse:
    """Merged feed across active authors, newest first."""
    entries = await service.build_feed(limit_per_author, max_total, use_cache)
    return FeedResponse(entries=entries, count=len(entries), stats=await service.get_feed_stats())


@router.post("/refresh", response_model=FeedResponse)
async def refresh_feed(
    limit_per_author: int | None = Query(default=None, ge=1),
    max_total: int | None = Query(default=None, ge=1),
    service: ScrollService = Depends(get_scroll_service),
) -> FeedResponse:
    """Rebuild the feed, bypassing the cache."""
    entries = await service.refresh_feed(limit_per_author, max_total)
    return FeedResponse(entries=entries, count=len(entries), stats=await service.get_feed_stats())
