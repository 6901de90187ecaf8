"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from scrollchain.configs.base import BaseSettings
from scrollchain.configs.chunking import ChunkingSettings
from scrollchain.configs.database import DatabaseSettings
from scrollchain.configs.feed import FeedSettings
from scrollchain.configs.genesis import GenesisSettings
from scrollchain.configs.ledger import LedgerSettings
from scrollchain.configs.publishing import PublishingSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    environment: str = Field(
        default="development",
        description="Application environment (development, staging, production)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Aggregated settings
    chunking: ChunkingSettings = ChunkingSettings()
    publishing: PublishingSettings = PublishingSettings()
    feed: FeedSettings = FeedSettings()
    genesis: GenesisSettings = GenesisSettings()
    database: DatabaseSettings = DatabaseSettings()
    ledger: LedgerSettings = LedgerSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from scrollchain.configs import get_settings
        settings = get_settings()
    """
    return Settings()
