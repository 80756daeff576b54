"""Alert configuration.

Defaults and administrative bounds for the surge threshold, plus delivery
timeouts. All settings can be overridden via ``ALERTS_*`` environment
variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AlertConfig(BaseSettings):
    """Configuration for surge alerting."""

    model_config = SettingsConfigDict(
        env_prefix="ALERTS_",
        case_sensitive=False,
        extra="ignore",
    )

    default_threshold: int = Field(
        default=50,
        ge=1,
        description="Threshold (percent) used when no settings row exists",
    )
    min_threshold: int = Field(
        default=10,
        ge=1,
        description="Lowest threshold an operator may configure",
    )
    max_threshold: int = Field(
        default=500,
        ge=1,
        description="Highest threshold an operator may configure",
    )
    webhook_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=60.0,
        description="Timeout for one webhook POST",
    )
