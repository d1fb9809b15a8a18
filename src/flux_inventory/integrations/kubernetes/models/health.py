"""Health classification models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(StrEnum):
    """Dashboard health of a Flux resource."""

    HEALTHY = "healthy"
    PROGRESSING = "progressing"
    FAILED = "failed"
    SUSPENDED = "suspended"
    UNKNOWN = "unknown"


class ResourceStatus(StrEnum):
    """Ready-condition status of a Flux resource."""

    READY = "ready"
    FAILED = "failed"
    SUSPENDED = "suspended"
    UNKNOWN = "unknown"


class ResourceTypeHealthSummary(BaseModel):
    """Health counts for all resources of one type."""

    model_config = ConfigDict(extra="forbid")

    type: str = Field(description="Flux resource kind")
    total: int = Field(default=0, description="Number of resources")
    healthy: int = Field(default=0, description="Resources whose Ready condition is True")
    failed: int = Field(default=0, description="Resources whose Ready condition is False")
    suspended: int = Field(default=0, description="Suspended resources")
    error: bool = Field(default=False, description="Whether listing this type failed")
