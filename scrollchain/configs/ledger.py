"""
Ledger configuration settings.

Selects how the local ledger keeps confirmed units and which payload size
it accepts.

Dependencies: pydantic, scrollchain.configs.base
System role: Ledger boundary configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from scrollchain.configs.base import BaseSettings


class LedgerSettings(BaseSettings):
    """Local ledger options."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    persist_units: bool = Field(
        default=True,
        description=(
            "Write confirmed units to the database so heads, manifests and the "
            "root stay resolvable across restarts; when false, the whole service "
            "state lives in memory"
        ),
    )
    max_payload_bytes: int | None = Field(
        default=None,
        gt=0,
        description="Reject units above this size (None for no limit)",
    )
