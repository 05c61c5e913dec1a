"""Shared fixtures for API integration tests.

Uses FastAPI TestClient (in-memory, no network) so tests run
without a live server or an LLM API key. The demo provider stands in
for the generative backend unless a test injects its own.
"""

from __future__ import annotations

import os
import sys

import pytest

# Ensure project root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture()
def settings():
    from src.config.settings import load_settings

    return load_settings({"DEMO_MODE": "true"})


@pytest.fixture()
def make_client(settings):
    """Build a TestClient around a fresh context; pass ``provider=`` to override."""
    from fastapi.testclient import TestClient

    from services.api.app.context import build_context
    from services.api.app.main import create_app

    def _make(provider=None, raise_server_exceptions=True):
        context = build_context(settings, provider=provider)
        app = create_app(context)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture()
def client(make_client):
    """FastAPI TestClient backed by the demo provider."""
    return make_client()
