"""
Feed configuration settings.

Lookback limits and cache freshness for feed reconstruction.

Dependencies: pydantic, scrollchain.configs.base
System role: Feed reconstructor configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from scrollchain.configs.base import BaseSettings


class FeedSettings(BaseSettings):
    """Defaults for multi-author feed builds."""

    model_config = SettingsConfigDict(env_prefix="FEED_")

    limit_per_author: int = Field(default=3, ge=1, description="Units walked per author")
    max_total: int = Field(default=20, ge=1, description="Maximum entries in one feed")
    cache_ttl_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Age after which a cached feed is rebuilt",
    )
