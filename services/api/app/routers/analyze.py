"""Scenario analysis endpoint.

``POST /api/analyze`` (also mounted at ``POST /api``) runs input
validation, rate limiting, generation and output validation, and returns
either the analysis result or a flat error body.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from shared.schemas.analysis import dump_analysis_result
from shared.schemas.api import AnalyzeRequest
from shared.schemas.errors import ErrorResponse

from ..context import AppContext
from ..errors import APIError

logger = logging.getLogger(__name__)
router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def client_identifier(request: Request) -> str:
    """Rate-limit key: first X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


@router.post("/api/analyze")
@router.post("/api")
def analyze(
    body: AnalyzeRequest,
    request: Request,
    context: AppContext = Depends(get_context),
):
    """Analyze the framing of a scenario."""
    identifier = client_identifier(request)
    outcome = context.orchestrator.analyze(
        body.scenario, identifier, admit=context.admission,
    )
    if isinstance(outcome, ErrorResponse):
        raise APIError(outcome)
    return dump_analysis_result(outcome)


@router.options("/api/analyze")
@router.options("/api")
async def analyze_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)
