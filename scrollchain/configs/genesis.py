"""
Genesis configuration settings.

Network and protocol identifiers stamped into root and author genesis units.

Dependencies: pydantic, scrollchain.configs.base
System role: Genesis anchor configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from scrollchain.configs.base import BaseSettings


class GenesisSettings(BaseSettings):
    """Platform root genesis parameters."""

    model_config = SettingsConfigDict(env_prefix="GENESIS_")

    network: str = Field(default="devnet", description="Ledger network name")
    version: str = Field(default="1.0.0", description="Genesis record version")
    protocol: str = Field(default="scroll-genesis-v1", description="Genesis protocol tag")
