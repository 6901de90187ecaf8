"""
Observability module.

Provides structured logging, correlation ID tracking and request logging.
"""

from scrollchain.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from scrollchain.observability.logger import configure_logging

__all__ = [
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
]
