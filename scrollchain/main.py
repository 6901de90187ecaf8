"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, scrollchain.api, scrollchain.observability, scrollchain.configs
System role: Application initialization and configuration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrollchain import __version__
from scrollchain.api import api_router
from scrollchain.api.deps import get_service_cache
from scrollchain.configs import get_settings
from scrollchain.observability.logger import configure_logging
from scrollchain.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging and builds the shared scroll service at startup.
    """
    configure_logging(get_settings().log_level)
    logger.info("Application startup: logging configured")

    try:
        await get_service_cache().get_scroll_service()
        logger.info("Application startup complete: scroll service initialized")
    except Exception as e:
        logger.exception(
            "Failed to initialize application resources",
            extra={"error": str(e)},
        )
        raise

    yield

    get_service_cache().clear()
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="Scrollchain API",
        description="Chunked publishing and feed reconstruction over an append-only ledger",
        version=__version__,
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scrollchain.main:app",
        host="localhost",
        port=8082,
        reload=get_settings().debug,
    )
