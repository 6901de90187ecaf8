"""
Key-value CRUD operations.

Extends BaseCRUD with upsert and prefix listing for KeyValueModel.

Dependencies: sqlalchemy, scrollchain.boundary.db.models
System role: Persistence operations behind SqlKeyValueStore
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scrollchain.boundary.db.CRUD.base_crud import BaseCRUD
from scrollchain.boundary.db.models.kv_model import KeyValueModel


class KeyValueCRUD(BaseCRUD[KeyValueModel]):
    """CRUD operations for KeyValueModel."""

    def __init__(self) -> None:
        """Initialize KeyValueCRUD with KeyValueModel."""
        super().__init__(KeyValueModel, pk_name="key")

    async def upsert(self, session: AsyncSession, key: str, value: bytes) -> KeyValueModel:
        """
        Insert a key or replace its value.

        Args:
            session: Async database session
            key: Entry key
            value: New value bytes

        Returns:
            KeyValueModel: Stored entry
        """
        entry = await self.get_by_pk(session, key)
        if entry is None:
            return await self.create(session, key=key, value=value)
        entry.value = value
        await session.flush()
        return entry

    async def list_keys(self, session: AsyncSession, prefix: str = "") -> Sequence[str]:
        """
        List keys, optionally restricted to a prefix.

        Args:
            session: Async database session
            prefix: Key prefix filter ("" for all keys)

        Returns:
            Sequence of keys in ascending order
        """
        stmt = select(KeyValueModel.key).order_by(KeyValueModel.key)
        if prefix:
            stmt = stmt.where(KeyValueModel.key.startswith(prefix, autoescape=True))
        result = await session.execute(stmt)
        return result.scalars().all()


kv_crud = KeyValueCRUD()
