"""
Database boundary.

SQLAlchemy async persistence behind the key-value store contract.
"""

from scrollchain.boundary.db.base import Base, TimestampMixin
from scrollchain.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from scrollchain.boundary.db.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "create_tables",
    "get_async_engine",
    "get_async_session_factory",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
]
