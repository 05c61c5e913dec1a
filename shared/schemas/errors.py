"""Error response schema shared by the orchestrator and the HTTP layer."""

from __future__ import annotations

import math
from typing import Literal, Optional

from pydantic import BaseModel, Field

ErrorCode = Literal[
    "VALIDATION_ERROR",
    "RATE_LIMIT_ERROR",
    "RATE_LIMIT_EXCEEDED",
    "PROCESSING_ERROR",
]


class ErrorResponse(BaseModel):
    """Client-facing error body: ``{error, code, message}``.

    ``status_code`` and ``retry_after`` travel with the error for the HTTP
    layer but are not part of the serialised body.
    """

    error: str
    code: ErrorCode
    message: str
    status_code: int = Field(default=500, exclude=True)
    retry_after: Optional[int] = Field(default=None, exclude=True)

    @classmethod
    def validation(cls, message: str) -> "ErrorResponse":
        return cls(
            error="Validation Error",
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
        )

    @classmethod
    def rate_limited(cls, retry_after_seconds: float) -> "ErrorResponse":
        seconds = max(1, math.ceil(retry_after_seconds))
        minutes = math.ceil(seconds / 60)
        return cls(
            error="Too Many Requests",
            code="RATE_LIMIT_ERROR",
            message=f"Rate limit exceeded. Please try again in {minutes} minute(s).",
            status_code=429,
            retry_after=seconds,
        )

    @classmethod
    def service_unavailable(cls) -> "ErrorResponse":
        return cls(
            error="Service Unavailable",
            code="PROCESSING_ERROR",
            message="Analysis service temporarily unavailable. Please try again.",
            status_code=503,
        )

    @classmethod
    def analysis_failed(cls) -> "ErrorResponse":
        return cls(
            error="Processing Error",
            code="PROCESSING_ERROR",
            message="Analysis could not be completed. Please try again.",
            status_code=500,
        )

    @classmethod
    def unexpected(cls) -> "ErrorResponse":
        return cls(
            error="Internal Server Error",
            code="PROCESSING_ERROR",
            message="An unexpected error occurred. Please try again.",
            status_code=500,
        )
