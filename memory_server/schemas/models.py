"""
Pydantic models for API request/response schemas.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Health Check Models
# =============================================================================


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(..., description="Overall health status")
    server: str = Field(..., description="MCP server name")
    version: str = Field(..., description="Server version")
    uptime_seconds: float = Field(..., description="Server uptime in seconds")
    timestamp: datetime = Field(
        default_factory=_utc_now, description="Response timestamp"
    )
    message_count: int = Field(0, description="Messages currently stored")
    roles: dict[str, int] = Field(
        default_factory=dict, description="Stored messages per role"
    )
    agents: dict[str, int] = Field(
        default_factory=dict, description="Stored messages per agent"
    )
    components: dict[str, HealthStatus] = Field(
        default_factory=dict, description="Component health statuses"
    )


class ReadyResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(..., description="Whether the server is ready")
    checks: dict[str, bool] = Field(
        default_factory=dict, description="Individual readiness checks"
    )
