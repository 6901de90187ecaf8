"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from scrollchain.configs.chunking import ChunkingSettings
from scrollchain.configs.database import DatabaseSettings
from scrollchain.configs.feed import FeedSettings
from scrollchain.configs.genesis import GenesisSettings
from scrollchain.configs.ledger import LedgerSettings
from scrollchain.configs.publishing import PublishingSettings
from scrollchain.configs.settings import Settings, get_settings

__all__ = [
    "ChunkingSettings",
    "DatabaseSettings",
    "FeedSettings",
    "GenesisSettings",
    "LedgerSettings",
    "PublishingSettings",
    "Settings",
    "get_settings",
]
