"""Health check response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service health with the database dependency."""

    status: Literal["healthy", "unhealthy"] = Field(description="Overall status")
    service: str = Field(description="Service name")
    version: str = Field(description="Service version")
    environment: str = Field(description="Deployment environment")
    database: Literal["ok", "unavailable"] = Field(description="Database reachability")
