"""HTTP request/response schemas."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Body of ``POST /api/analyze``."""

    scenario: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
