"""FastAPI application — Frame Audit API.

Serve with ``frame-audit serve`` or
``uvicorn services.api.app.main:create_app --factory``.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import __version__
from src.config.settings import load_settings

from .context import AppContext, build_context
from .errors import register_error_handlers
from .routers import analyze, health

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the application around a process-wide :class:`AppContext`."""
    if context is None:
        context = build_context(load_settings())
    settings = context.settings

    logging.basicConfig(
        level=settings.server.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="Frame Audit API",
        version=__version__,
        description="Framing analysis of natural-language scenarios via a generative backend",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.context = context

    # -----------------------------------------------------------------------
    # CORS
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        max_age=3600,
    )

    register_error_handlers(app, production=settings.server.is_production)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(analyze.router, tags=["analyze"])
    app.include_router(health.router, tags=["health"])

    logger.info("Frame Audit API %s configured", __version__)
    settings.log_summary()
    return app
