"""Error rendering for the HTTP layer.

Every error body has the flat shape ``{error, code, message}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.schemas.errors import ErrorResponse

logger = logging.getLogger(__name__)

MISSING_SCENARIO_MESSAGE = 'Request must include a "scenario" field with string value'


class APIError(Exception):
    """Raised by route handlers to return an :class:`ErrorResponse`."""

    def __init__(self, response: ErrorResponse):
        super().__init__(response.message)
        self.response = response


def render_error(response: ErrorResponse) -> JSONResponse:
    headers = {}
    if response.retry_after is not None:
        headers["Retry-After"] = str(response.retry_after)
    return JSONResponse(
        status_code=response.status_code,
        content=response.model_dump(),
        headers=headers,
    )


def register_error_handlers(app: FastAPI, production: bool = False) -> None:
    @app.exception_handler(APIError)
    async def _api_error(request: Request, exc: APIError):
        return render_error(exc.response)

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        logger.info("Malformed request to %s: %d error(s)", request.url.path, len(exc.errors()))
        return render_error(ErrorResponse.validation(MISSING_SCENARIO_MESSAGE))

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        if production:
            logger.error("Unhandled error on %s: %s", request.url.path, exc)
        else:
            logger.exception("Unhandled error on %s", request.url.path)
        return render_error(ErrorResponse.unexpected())
