"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from shared.schemas.api import HealthResponse

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
@router.get("/")
async def health():
    return HealthResponse().model_dump(mode="json")
