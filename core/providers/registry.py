"""LLM provider factory and model catalog.

Central registry of available LLM providers, models, and a factory
function to instantiate the correct provider for a given selection.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import LLMProvider

# ---------------------------------------------------------------------------
# Model catalog: supported provider/model combos
# ---------------------------------------------------------------------------

MODEL_CATALOG: List[Dict[str, Any]] = [
    # --- Google Gemini ---
    {
        "provider": "google",
        "model_id": "gemini-2.5-flash",
        "label": "Gemini 2.5 Flash",
        "tier": "standard",
    },
    {
        "provider": "google",
        "model_id": "gemini-2.5-pro",
        "label": "Gemini 2.5 Pro",
        "tier": "premium",
    },
    {
        "provider": "google",
        "model_id": "gemini-1.5-pro",
        "label": "Gemini 1.5 Pro",
        "tier": "fast",
    },
    # --- Anthropic Claude ---
    {
        "provider": "anthropic",
        "model_id": "claude-sonnet-4-5-20250929",
        "label": "Claude Sonnet 4.5",
        "tier": "standard",
    },
    {
        "provider": "anthropic",
        "model_id": "claude-haiku-4-5-20251001",
        "label": "Claude Haiku 4.5",
        "tier": "fast",
    },
    # --- OpenAI GPT ---
    {
        "provider": "openai",
        "model_id": "gpt-4o",
        "label": "GPT-4o",
        "tier": "standard",
    },
    {
        "provider": "openai",
        "model_id": "gpt-4o-mini",
        "label": "GPT-4o mini",
        "tier": "fast",
    },
    # --- Offline ---
    {
        "provider": "demo",
        "model_id": "demo",
        "label": "Demo (canned analysis)",
        "tier": "standard",
    },
]

SUPPORTED_PROVIDERS = ("google", "anthropic", "openai", "demo")


def get_model_catalog() -> List[Dict[str, Any]]:
    """Return the full model catalog."""
    return MODEL_CATALOG


def get_default_model_for_provider(provider: str) -> Optional[str]:
    """Return the default (standard tier) model_id for a provider."""
    for m in MODEL_CATALOG:
        if m["provider"] == provider and m["tier"] == "standard":
            return m["model_id"]
    for m in MODEL_CATALOG:
        if m["provider"] == provider:
            return m["model_id"]
    return None


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------

def get_provider(
    provider_name: str,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
) -> LLMProvider:
    """Create and return an LLMProvider instance for the given provider/model.

    Parameters
    ----------
    provider_name :
        One of "google", "anthropic", "openai", "demo".
    model :
        Optional model ID override. Passed as default_model to the provider.
    api_key :
        Optional API key. Providers fall back to their own env variables.

    Raises
    ------
    ValueError
        If the provider_name is not recognized.
    """
    kwargs: Dict[str, Any] = {}
    if model:
        kwargs["default_model"] = model
    if api_key:
        kwargs["api_key"] = api_key

    if provider_name == "google":
        from .google_provider import GoogleProvider
        return GoogleProvider(**kwargs)
    elif provider_name == "anthropic":
        from .anthropic_provider import AnthropicProvider
        return AnthropicProvider(**kwargs)
    elif provider_name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider(**kwargs)
    elif provider_name == "demo":
        from .demo_provider import DemoProvider
        return DemoProvider(**kwargs)
    else:
        raise ValueError(
            f"Unknown LLM provider: {provider_name!r}. "
            f"Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
