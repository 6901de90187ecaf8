"""
Base configuration settings.

Shared pydantic-settings behaviour for every scrollchain config class:
`.env` loading, case-insensitive variables and tolerance of unrelated
entries. Concern-specific classes add their own `env_prefix`.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings base reading the process environment and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
