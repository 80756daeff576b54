"""
Pydantic models for API request/response validation.
"""

from typing import Any

from pydantic import BaseModel, Field


class CollectResponse(BaseModel):
    """Response model for a manual collection run."""

    success: bool = Field(default=True)
    message: str = Field(default="Manual collection completed")
    successful: int = Field(..., description="Sources whose task completed")
    failed: int = Field(..., description="Sources whose task failed")


class ErrorResponse(BaseModel):
    """Response model for a failed request."""

    success: bool = Field(default=False)
    error: str = Field(..., description="Error message")


class ComponentHealth(BaseModel):
    """Health status of an infrastructure component."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in milliseconds")
    details: dict[str, Any] | None = Field(default=None)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(
        ...,
        description="Overall service status: healthy, degraded, or unhealthy",
    )
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    adapters: dict[str, str] = Field(
        default_factory=dict,
        description="Adapter state per source type: enabled or the reason it is disabled",
    )
    version: str = Field(..., description="Service version")
