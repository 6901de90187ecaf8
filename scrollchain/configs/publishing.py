"""
Publishing configuration settings.

Retry budget and timeouts for ledger submissions.

Dependencies: pydantic, scrollchain.configs.base
System role: Publish orchestrator configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from scrollchain.configs.base import BaseSettings


class PublishingSettings(BaseSettings):
    """Retry and timeout policy for chunk submission."""

    model_config = SettingsConfigDict(env_prefix="PUBLISH_")

    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Submission attempts per chunk before it is marked failed",
    )
    retry_delay_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Fixed delay between submission attempts",
    )
    submit_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-call wait for submission confirmation",
    )
