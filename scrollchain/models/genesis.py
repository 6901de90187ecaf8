"""
Genesis domain models.

Dependencies: pydantic
System role: Platform root and per-author identity anchors
"""

from pydantic import BaseModel, Field


class RootGenesis(BaseModel):
    """Platform-wide root record, created once."""

    root_id: str = Field(description="Unit id of the published root")
    root_hash: str
    network: str
    version: str
    protocol: str
    timestamp: int = Field(description="Creation time, seconds since epoch")


class GenesisRecord(BaseModel):
    """Identity binding of one author to the platform root."""

    root_id: str = Field(description="Unit id of the platform root the author binds to")
    author_genesis_id: str | None = Field(
        default=None, description="Unit id of the published author genesis"
    )
    author_public_identity: str
    label: str
    derived_hash: str
