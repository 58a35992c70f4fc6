"""Pydantic response models for the HTTP API.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose session contents
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str = Field(description="Service status, always 'ok' when reachable")
    timestamp: str = Field(description="Current server time, ISO 8601 UTC")
    version: str = Field(description="GroupBot package version")
    active_sessions: int = Field(description="Number of open menu sessions")
