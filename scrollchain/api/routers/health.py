"""
Health check API endpoints.

Routes: GET /health, GET /health/chains

Dependencies: scrollchain.application.services
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from scrollchain.api.deps import get_scroll_service
from scrollchain.application.services.scroll_service import ScrollService
from scrollchain.models.chain import ChainStats


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/chains", response_model=ChainStats)
async def chain_stats(service: ScrollService = Depends(get_scroll_service)) -> ChainStats:
    """Registry totals (authors, active authors, units)."""
    return await service.get_chain_stats()
