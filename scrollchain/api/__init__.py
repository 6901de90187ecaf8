"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    authors_router,
    feed_router,
    genesis_router,
    health_router,
    operations_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(operations_router)
api_router.include_router(feed_router)
api_router.include_router(authors_router)
api_router.include_router(genesis_router)

__all__ = ["api_router"]
