"""
Snap2Slides Backend: Endpoint Status Schemas
==============================================

What:  Read-only views of endpoint health for the admin dashboard.
Who:   Produced by EndpointPoolManager.get_status_snapshot(); served by
       GET /api/status and summarized by GET /health.

Security:
    No schema here has a credential field. Status payloads are safe to
    return to any caller.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EndpointStatus(BaseModel):
    """Health of one configured endpoint, as of the moment it was built."""

    id: str = Field(description="Endpoint identifier, e.g. gemini_1")
    type: str = Field(description="Provider type: gemini or perplexity")
    is_healthy: bool = Field(description="Whether the endpoint is in rotation")
    error_count: int = Field(description="Consecutive failures since last recovery")
    last_error: Optional[str] = Field(default=None, description="Text of the last failure")
    last_error_at: Optional[datetime] = Field(default=None, description="When it last failed")
    rate_limit_reset_at: Optional[datetime] = Field(
        default=None,
        description="Informational: when a quota rejection is expected to clear",
    )
    max_retries: int = Field(description="Configured retry policy constant")
    timeout_ms: int = Field(description="Per-call time bound in milliseconds")


class StatusSummary(BaseModel):
    total: int
    active: int
    inactive: int
    gemini: List[EndpointStatus]
    perplexity: List[EndpointStatus]
    details: List[EndpointStatus]


class StatusResponse(BaseModel):
    """Body of GET /api/status."""

    success: bool = True
    timestamp: datetime
    summary: StatusSummary


class StatusActionRequest(BaseModel):
    """Body of POST /api/status. Only the "reset" action is supported."""

    model_config = ConfigDict(populate_by_name=True)

    action: Optional[str] = Field(
        default=None,
        description="Admin action; only 'reset' is supported",
    )
    api_id: Optional[str] = Field(
        default=None,
        alias="apiId",
        description="Endpoint to act on",
    )


class StatusActionResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    """
    Health check response for monitoring and load balancer probes.

    status:
        healthy   → at least one vision endpoint in rotation
        degraded  → no vision endpoint in rotation (uploads get demo content)
    """

    status: Literal["healthy", "degraded"]
    version: str
    uptime_seconds: float
    vision_endpoints: int = Field(description="Configured Gemini endpoints")
    vision_healthy: int = Field(description="Gemini endpoints currently in rotation")
    research_endpoints: int = Field(description="Configured Perplexity endpoints")
    research_healthy: int = Field(description="Perplexity endpoints currently in rotation")
