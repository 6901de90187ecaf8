"""
Publish operation API endpoints.

Routes: POST /operations, GET /operations, GET /operations/{id},
POST /operations/{id}/resume, POST /operations/{id}/cancel,
GET /operations/{id}/verify

Dependencies: scrollchain.application.services, scrollchain.models.api
System role: Publishing HTTP API
"""

import logging

from fastapi import APIRouter, Depends, status

from scrollchain.api.deps import get_scroll_service
from scrollchain.api.routers.errors import to_http_exception
from scrollchain.application.services.scroll_service import ScrollService
from scrollchain.core.exceptions import ScrollChainError
from scrollchain.core.integrity import IntegrityReport
from scrollchain.models.api import OperationResponse, PublishRequest, ResumeRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/operations", tags=["operations"])


@router.post("", response_model=OperationResponse, status_code=status.HTTP_201_CREATED)
async def create_operation(
    request: PublishRequest,
    service: ScrollService = Depends(get_scroll_service),
) -> OperationResponse:
    """
    Chunk and publish a document for an author.

    Returns once the publish pass ends. A `partial` or `error` stage in
    the response can be retried with POST /operations/{id}/resume.

    Raises:
        HTTPException(409): Author already has a publish in flight
        HTTPException(422): Document cannot be chunked
    """
    try:
        operation = await service.create_publish_operation(
            service.signer_for(request.author_id), request.document
        )
    except ScrollChainError as e:
        raise to_http_exception(e)
    return OperationResponse.from_operation(operation)


@router.get("", response_model=list[OperationResponse])
async def list_operations(
    service: ScrollService = Depends(get_scroll_service),
) -> list[OperationResponse]:
    """List known operations, oldest first."""
    operations = await service.list_operations()
    return [OperationResponse.from_operation(op) for op in operations]


@router.get("/{operation_id}", response_model=OperationResponse)
async def get_operation(
    operation_id: str,
    service: ScrollService = Depends(get_scroll_service),
) -> OperationResponse:
    """
    Get operation stage, progress and per-chunk status.

    Raises:
        HTTPException(404): Operation not found
    """
    try:
        operation = await service.get_status(operation_id)
    except ScrollChainError as e:
        raise to_http_exception(e)
    return OperationResponse.from_operation(operation)


@router.post("/{operation_id}/resume", response_model=OperationResponse)
async def resume_operation(
    operation_id: str,
    request: ResumeRequest | None = None,
    service: ScrollService = Depends(get_scroll_service),
) -> OperationResponse:
    """
    Retry failed and pending chunks of a partial or failed operation.

    Raises:
        HTTPException(404): Operation not found
        HTTPException(409): Operation not resumable, or chain head moved
    """
    try:
        operation = await service.get_status(operation_id)
        author_id = (request.author_id if request else None) or operation.author_id
        operation = await service.resume(operation_id, service.signer_for(author_id))
    except ScrollChainError as e:
        raise to_http_exception(e)
    return OperationResponse.from_operation(operation)


@router.post("/{operation_id}/cancel", response_model=OperationResponse)
async def cancel_operation(
    operation_id: str,
    service: ScrollService = Depends(get_scroll_service),
) -> OperationResponse:
    """
    Cancel a publishing operation.

    Raises:
        HTTPException(404): Operation not found
        HTTPException(409): Operation is not publishing
    """
    try:
        operation = await service.cancel(operation_id)
    except ScrollChainError as e:
        raise to_http_exception(e)
    return OperationResponse.from_operation(operation)


@router.get("/{operation_id}/verify", response_model=IntegrityReport)
async def verify_operation(
    operation_id: str,
    service: ScrollService = Depends(get_scroll_service),
) -> IntegrityReport:
    """
    Fetch a completed operation's units and compare them with its manifest.

    Raises:
        HTTPException(404): No manifest for the operation
    """
    try:
        return await service.verify_published(operation_id)
    except ScrollChainError as e:
        raise to_http_exception(e)
