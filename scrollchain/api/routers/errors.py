"""
Domain error to HTTP mapping.

Dependencies: fastapi, scrollchain.core.exceptions
System role: Shared error translation for routers
"""

import logging

from fastapi import HTTPException

from scrollchain.core.exceptions import (
    ChunkingError,
    ConcurrentPublishConflictError,
    GenesisValidationError,
    InvalidOperationStateError,
    InvalidSignerError,
    LedgerError,
    OperationNotFoundError,
    ScrollChainError,
    UnitDecodeError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: tuple[tuple[type[ScrollChainError], int], ...] = (
    (OperationNotFoundError, 404),
    (InvalidOperationStateError, 409),
    (ConcurrentPublishConflictError, 409),
    (GenesisValidationError, 422),
    (ChunkingError, 422),
    (UnitDecodeError, 422),
    (InvalidSignerError, 400),
    (LedgerError, 502),
)


def to_http_exception(error: ScrollChainError) -> HTTPException:
    """
    Translate a domain error to an HTTPException.

    Args:
        error: Domain error raised by the service

    Returns:
        HTTPException: 404/409/422 for caller errors, 502 for ledger failures, 500 otherwise
    """
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            break
    else:
        status_code = 500

    if status_code >= 500:
        logger.error(
            f"{__name__}:to_http_exception - Request failed",
            extra={"error_type": type(error).__name__, "error": str(error)},
        )
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": error.message, "details": error.details},
    )
