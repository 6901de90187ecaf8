"""
Database configuration settings.

Connection parameters for the SQLAlchemy-backed key-value store.
Defaults to a local SQLite file through aiosqlite.

Dependencies: pydantic, scrollchain.configs.base
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from scrollchain.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Key-value store database configuration."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(
        default="sqlite+aiosqlite:///./scrollchain.db",
        description="SQLAlchemy async database URL",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @property
    def async_database_url(self) -> str:
        """
        Normalize the configured URL to an async driver.

        Returns:
            str: SQLAlchemy async-compatible database URL
        """
        url = self.url
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url
