"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when the source store is reachable."""

    status: str = Field(default="ok", description="Readiness status")
    cache: str = Field(
        default="disabled",
        description="Cache state: 'ok', 'degraded' (configured but unreachable) or 'disabled'",
    )


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when the source store is unreachable (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason (e.g. database unreachable)")
