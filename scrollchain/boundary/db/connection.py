"""
Database connection management.

Provides async SQLAlchemy engine and session factory for the key-value
store, plus table creation for local SQLite runs.

Dependencies: sqlalchemy, scrollchain.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from scrollchain.boundary.db.base import Base
from scrollchain.configs import DatabaseSettings, get_settings


def get_async_engine(db_config: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    In-memory SQLite URLs get a StaticPool so every session shares the
    same connection (and therefore the same database). Other URLs use the
    driver's default async pool with pre-ping health checks.

    Args:
        db_config: Database settings (application settings when omitted)

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = db_config or get_settings().database
    url = db_config.async_database_url

    if url.startswith("sqlite") and ":memory:" in url:
        return create_async_engine(
            url,
            echo=db_config.echo_sql,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        url,
        echo=db_config.echo_sql,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Returns async_sessionmaker bound to engine with autoflush=False and
    expire_on_commit=False for explicit transaction control.

    Args:
        engine: Engine to bind (a new one from settings when omitted)

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    engine = engine or get_async_engine()
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all registered tables that do not exist yet."""
    # Import models so they register with Base.metadata
    from scrollchain.boundary.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
