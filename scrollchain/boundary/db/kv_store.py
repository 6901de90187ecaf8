"""
Key-value store contract and implementations.

Persists chain heads, in-flight publish operations, manifests and the
platform root across restarts. Values are opaque bytes; callers own their
serialization.

Dependencies: sqlalchemy, scrollchain.boundary.db
System role: Persistence capability consumed by the core
"""

import asyncio
import logging
from typing import Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import async_sessionmaker

from scrollchain.boundary.db.CRUD.kv_crud import KeyValueCRUD, kv_crud

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Async byte-valued key-value store."""

    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def list_keys(self, prefix: str = "") -> list[str]: ...


class InMemoryKeyValueStore:
    """Dict-backed store for tests and single-process runs."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        async with self._lock:
            self._data[key] = bytes(value)

    async def remove(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self._data if key.startswith(prefix))


class SqlKeyValueStore:
    """
    Store backed by the `kv_entries` table.

    Each call runs in its own session and commits before returning, so a
    value is durable once set() returns.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        crud: KeyValueCRUD | None = None,
    ) -> None:
        """
        Initialize store.

        Args:
            session_factory: Async session factory bound to the target database
            crud: CRUD helper (module singleton by default)
        """
        self.session_factory = session_factory
        self.crud = crud or kv_crud

    async def get(self, key: str) -> bytes | None:
        async with self.session_factory() as session:
            entry = await self.crud.get_by_pk(session, key)
            return entry.value if entry is not None else None

    async def set(self, key: str, value: bytes) -> None:
        async with self.session_factory() as session:
            try:
                await self.crud.upsert(session, key, bytes(value))
                await session.commit()
            except Exception:
                await session.rollback()
                logger.error(
                    f"{__name__}:set - Failed to write key",
                    extra={"key": key},
                    exc_info=True,
                )
                raise

    async def remove(self, key: str) -> None:
        async with self.session_factory() as session:
            await self.crud.delete_by_pk(session, key)
            await session.commit()

    async def list_keys(self, prefix: str = "") -> list[str]:
        async with self.session_factory() as session:
            return list(await self.crud.list_keys(session, prefix))
