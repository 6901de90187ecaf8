"""
Genesis API endpoints.

Routes: POST /genesis/root, GET /genesis/root, POST /genesis/authors,
GET /genesis/authors/{unit_id}, POST /genesis/verify

Dependencies: scrollchain.application.services, scrollchain.models
System role: Genesis HTTP API
"""

from fastapi import APIRouter, Depends, HTTPException, status

from scrollchain.api.deps import get_scroll_service
from scrollchain.api.routers.errors import to_http_exception
from scrollchain.application.services.scroll_service import ScrollService
from scrollchain.core.exceptions import ScrollChainError
from scrollchain.models.api import (
    AuthorGenesisRequest,
    RootGenesisRequest,
    VerifyGenesisResponse,
)
from scrollchain.models.genesis import GenesisRecord, RootGenesis

router = APIRouter(prefix="/genesis", tags=["genesis"])


@router.post("/root", response_model=RootGenesis)
async def publish_root(
    request: RootGenesisRequest,
    service: ScrollService = Depends(get_scroll_service),
) -> RootGenesis:
    """Publish the platform root (returns the existing root if already published)."""
    try:
        return await service.publish_root(service.signer_for(request.platform_id), request.network)
    except ScrollChainError as e:
        raise to_http_exception(e)


@router.get("/root", response_model=RootGenesis)
async def get_root(service: ScrollService = Depends(get_scroll_service)) -> RootGenesis:
    """
    Get the platform root.

    Raises:
        HTTPException(404): Root not published yet
    """
    root = await service.get_root()
    if root is None:
        raise HTTPException(status_code=404, detail="Platform root genesis not published")
    return root


@router.post("/authors", response_model=GenesisRecord, status_code=status.HTTP_201_CREATED)
async def publish_author_genesis(
    request: AuthorGenesisRequest,
    service: ScrollService = Depends(get_scroll_service),
) -> GenesisRecord:
    """
    Publish an author genesis and anchor the author's chain on it.

    Raises:
        HTTPException(422): Root missing or invalid inputs
    """
    try:
        return await service.publish_author_genesis(
            service.signer_for(request.author_id), request.label
        )
    except ScrollChainError as e:
        raise to_http_exception(e)


@router.get("/authors/{unit_id}", response_model=GenesisRecord)
async def read_author_genesis(
    unit_id: str,
    service: ScrollService = Depends(get_scroll_service),
) -> GenesisRecord:
    """
    Fetch and validate an author genesis unit.

    Raises:
        HTTPException(422): Malformed unit or hash mismatch
    """
    try:
        return await service.read_author_genesis(unit_id)
    except ScrollChainError as e:
        raise to_http_exception(e)


@router.post("/verify", response_model=VerifyGenesisResponse)
async def verify_genesis(
    record: GenesisRecord,
    service: ScrollService = Depends(get_scroll_service),
) -> VerifyGenesisResponse:
    """
    Recompute a genesis record's derived hash.

    Raises:
        HTTPException(422): Empty identity, root id or label
    """
    try:
        derived_hash = service.derive_author_genesis_hash(
            record.author_public_identity, record.root_id, record.label
        )
    except ScrollChainError as e:
        raise to_http_exception(e)
    return VerifyGenesisResponse(valid=derived_hash == record.derived_hash, derived_hash=derived_hash)
