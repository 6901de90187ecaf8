"""
Unit envelope model.

The compact JSON document written to the ledger for every unit. Short field
aliases keep envelopes within memo-sized payloads.

Dependencies: pydantic
System role: Wire shape shared by publisher, feed walker and genesis anchor
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNIT_PROTOCOL = "scroll-unit-v1"


class UnitKind(str, Enum):
    """Kinds of units on an author's chain."""

    CHUNK = "chunk"
    ROOT_GENESIS = "root_genesis"
    AUTHOR_GENESIS = "author_genesis"


class UnitEnvelope(BaseModel):
    """Envelope around a chunk payload."""

    model_config = ConfigDict(populate_by_name=True)

    protocol: str = Field(default=UNIT_PROTOCOL, alias="p")
    kind: UnitKind = Field(default=UnitKind.CHUNK, alias="k")
    author_id: str = Field(alias="a")
    operation_id: str = Field(alias="o")
    index: int = Field(ge=0, alias="i")
    total_chunks: int = Field(gt=0, alias="n")
    hash: str = Field(alias="h")
    data: str = Field(alias="d", description="base64 of the compressed payload")
    previous_unit_id: str | None = Field(default=None, alias="prev")
    timestamp: int = Field(alias="ts", description="milliseconds since epoch")
