"""
Test suite for key-value store implementations.

Runs the same contract checks against the in-memory store and the
SQLAlchemy store on an in-memory aiosqlite database.

System role: Verification of the persistence boundary
"""

from typing import AsyncIterator
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from scrollchain.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from scrollchain.boundary.db.CRUD.kv_crud import KeyValueCRUD
from scrollchain.boundary.db.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqlKeyValueStore,
)
from scrollchain.configs.database import DatabaseSettings


@pytest.fixture
async def sql_store() -> AsyncIterator[SqlKeyValueStore]:
    """Provide SQL-backed store on a fresh in-memory SQLite database."""
    engine = get_async_engine(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
    await create_tables(engine)
    yield SqlKeyValueStore(get_async_session_factory(engine))
    await engine.dispose()


@pytest.fixture(params=["memory", "sql"])
async def kv_store(request: pytest.FixtureRequest, sql_store: SqlKeyValueStore) -> KeyValueStore:
    """Provide each store implementation in turn."""
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return sql_store


class TestKeyValueStoreContract:
    """Test suite shared by every KeyValueStore."""

    @pytest.mark.asyncio
    async def test_store_should_satisfy_protocol(self, kv_store: KeyValueStore) -> None:
        """Test implementations are runtime-checkable stores."""
        assert isinstance(kv_store, KeyValueStore)

    @pytest.mark.asyncio
    async def test_get_should_return_none_for_missing_key(self, kv_store: KeyValueStore) -> None:
        """Test unknown keys read as None."""
        assert await kv_store.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_should_insert_then_replace(self, kv_store: KeyValueStore) -> None:
        """Test set() upserts the value."""
        # Act
        await kv_store.set("chain_head:alice", b"first")
        await kv_store.set("chain_head:alice", b"second")

        # Assert
        assert await kv_store.get("chain_head:alice") == b"second"
        assert await kv_store.list_keys() == ["chain_head:alice"]

    @pytest.mark.asyncio
    async def test_remove_should_delete_and_tolerate_missing(self, kv_store: KeyValueStore) -> None:
        """Test remove() is idempotent."""
        await kv_store.set("operation:1", b"{}")

        await kv_store.remove("operation:1")
        await kv_store.remove("operation:1")

        assert await kv_store.get("operation:1") is None

    @pytest.mark.asyncio
    async def test_list_keys_should_filter_by_prefix(self, kv_store: KeyValueStore) -> None:
        """Test prefix listing is sorted and exact."""
        for key in ["manifest:b", "manifest:a", "operation:a", "chain_head:a"]:
            await kv_store.set(key, b"x")

        assert await kv_store.list_keys("manifest:") == ["manifest:a", "manifest:b"]

    @pytest.mark.asyncio
    async def test_list_keys_should_treat_wildcards_literally(self, kv_store: KeyValueStore) -> None:
        """Test "_" and "%" in a prefix match only themselves."""
        await kv_store.set("chain_head:x", b"1")
        await kv_store.set("chainXhead:x", b"2")
        await kv_store.set("100%:x", b"3")
        await kv_store.set("1000:x", b"4")

        assert await kv_store.list_keys("chain_head:") == ["chain_head:x"]
        assert await kv_store.list_keys("100%") == ["100%:x"]

    @pytest.mark.asyncio
    async def test_binary_values_should_round_trip(self, kv_store: KeyValueStore) -> None:
        """Test arbitrary bytes are stored unchanged."""
        value = bytes(range(256))

        await kv_store.set("blob", value)

        assert await kv_store.get("blob") == value


class TestSqlKeyValueStore:
    """Test suite for SQL-specific behavior."""

    @pytest.mark.asyncio
    async def test_values_should_be_visible_to_new_sessions(self, sql_store: SqlKeyValueStore) -> None:
        """Test set() commits before returning."""
        await sql_store.set("genesis:root", b"root")

        reopened = SqlKeyValueStore(sql_store.session_factory)

        assert await reopened.get("genesis:root") == b"root"

    @pytest.mark.asyncio
    async def test_set_should_propagate_write_errors(self, sql_store: SqlKeyValueStore) -> None:
        """Test failed writes are raised, not swallowed."""
        crud = KeyValueCRUD()
        crud.upsert = AsyncMock(side_effect=RuntimeError("disk full"))
        store = SqlKeyValueStore(sql_store.session_factory, crud=crud)

        with pytest.raises(RuntimeError, match="disk full"):
            await store.set("key", b"value")

        assert await sql_store.get("key") is None


class TestKeyValueCRUD:
    """Test suite for KeyValueCRUD against a mocked session."""

    @pytest.mark.asyncio
    async def test_upsert_should_create_missing_entry(self) -> None:
        """Test a missing key is added and flushed."""
        # Arrange
        crud = KeyValueCRUD()
        session = AsyncMock(spec=AsyncSession)
        crud.get_by_pk = AsyncMock(return_value=None)

        # Act
        entry = await crud.upsert(session, "key", b"value")

        # Assert
        session.add.assert_called_once_with(entry)
        session.flush.assert_awaited_once()
        assert entry.value == b"value"

    @pytest.mark.asyncio
    async def test_get_all_should_page_in_key_order(self, sql_store: SqlKeyValueStore) -> None:
        """Test get_all() orders by primary key and honors limit/offset."""
        # Arrange
        for key in ("c", "a", "b"):
            await sql_store.set(key, key.encode())
        crud = KeyValueCRUD()

        # Act
        async with sql_store.session_factory() as session:
            everything = await crud.get_all(session)
            page = await crud.get_all(session, limit=1, offset=1)

        # Assert
        assert [entry.key for entry in everything] == ["a", "b", "c"]
        assert [entry.key for entry in page] == ["b"]
