"""
Author chain API endpoints.

Routes: GET /authors/{id}/head, GET /authors/{id}/units, GET /authors/{id}/document

Dependencies: scrollchain.application.services, scrollchain.models
System role: Per-author chain HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from scrollchain.api.deps import get_scroll_service
from scrollchain.api.routers.errors import to_http_exception
from scrollchain.application.services.scroll_service import ScrollService
from scrollchain.core.exceptions import ScrollChainError
from scrollchain.models.api import AuthorUnitsResponse
from scrollchain.models.chain import ChainHead
from scrollchain.models.feed import DocumentView

router = APIRouter(prefix="/authors", tags=["authors"])


@router.get("/{author_id}/head", response_model=ChainHead)
async def get_head(
    author_id: str,
    service: ScrollService = Depends(get_scroll_service),
) -> ChainHead:
    """
    Get an author's chain head.

    Raises:
        HTTPException(404): Author has no chain head
    """
    head = await service.get_head(author_id)
    if head is None:
        raise HTTPException(status_code=404, detail=f"No chain head for author {author_id}")
    return head


@router.get("/{author_id}/units", response_model=AuthorUnitsResponse)
async def get_units(
    author_id: str,
    limit: int | None = Query(default=None, ge=1),
    service: ScrollService = Depends(get_scroll_service),
) -> AuthorUnitsResponse:
    """Units walked back from the author's head, newest first."""
    units = await service.get_units_for_author(author_id, limit)
    return AuthorUnitsResponse(author_id=author_id, units=units, count=len(units))


@router.get("/{author_id}/document", response_model=DocumentView)
async def get_document(
    author_id: str,
    unit_id: str | None = None,
    service: ScrollService = Depends(get_scroll_service),
) -> DocumentView:
    """
    Reassemble the document ending at `unit_id` (default: the head).

    Raises:
        HTTPException(404): Author has no chain
        HTTPException(422): Missing or corrupt units
    """
    try:
        document = await service.reconstruct_document(author_id, unit_id)
    except ScrollChainError as e:
        raise to_http_exception(e)
    if document is None:
        raise HTTPException(status_code=404, detail=f"No chain for author {author_id}")
    return document
