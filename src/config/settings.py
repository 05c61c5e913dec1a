"""
Frame Audit - Runtime Configuration
====================================

Pydantic v2 models for every tunable value of the service:

  LLM        : LLMSettings        (provider, model, temperature, tokens, timeout, key)
  Rate limit : RateLimitSettings  (window, max requests)
  Input      : InputSettings      (scenario length bounds)
  Server     : ServerSettings     (port, environment, log level, CORS)

``load_settings()`` reads a ``.env`` file (if present) and the process
environment. Invalid values raise ``pydantic.ValidationError`` at startup.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Literal, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from core.providers.registry import SUPPORTED_PROVIDERS, get_default_model_for_provider

logger = logging.getLogger(__name__)

# Provider-specific key variables, checked after LLM_API_KEY.
_API_KEY_VARS: Dict[str, List[str]] = {
    "google": ["GEMINI_API_KEY", "GOOGLE_API_KEY"],
    "anthropic": ["ANTHROPIC_API_KEY"],
    "openai": ["OPENAI_API_KEY"],
    "demo": [],
}

_TRUTHY = {"1", "true", "yes", "on"}


class LLMSettings(BaseModel):
    """Generative backend settings.

    Attributes:
        provider:        google / anthropic / openai / demo.
        model:           Model id; empty means the provider's default.
        temperature:     Sampling temperature. 0.2-0.4 is recommended.
        max_tokens:      Output token cap.
        timeout_seconds: Per-call timeout; expiry counts as a provider failure.
        api_key:         Secret for the selected provider.
    """

    provider: Literal["google", "anthropic", "openai", "demo"] = "google"
    model: str = ""
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8000, gt=0)
    timeout_seconds: float = Field(default=30.0, gt=0)
    api_key: str = Field(default="", repr=False)

    @model_validator(mode="after")
    def _fill_default_model(self) -> "LLMSettings":
        if not self.model:
            self.model = get_default_model_for_provider(self.provider) or ""
        return self

    @field_validator("temperature")
    @classmethod
    def _warn_temperature(cls, v: float) -> float:
        if not 0.2 <= v <= 0.4:
            logger.warning("LLM temperature %.2f is outside the recommended 0.2-0.4 range", v)
        return v

    def masked_key(self) -> str:
        if not self.api_key:
            return "(not set)"
        return self.api_key[:6] + "..."


class RateLimitSettings(BaseModel):
    window_ms: int = Field(default=3_600_000, gt=0)
    max_requests: int = Field(default=10, ge=1)

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000.0


class InputSettings(BaseModel):
    min_length: int = Field(default=1, ge=1)
    max_length: int = Field(default=1500, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "InputSettings":
        if self.min_length > self.max_length:
            raise ValueError(
                f"min_length ({self.min_length}) must not exceed max_length ({self.max_length})"
            )
        return self


class ServerSettings(BaseModel):
    port: int = Field(default=3001, ge=1, le=65535)
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


class AppSettings(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    input: InputSettings = Field(default_factory=InputSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    def log_summary(self) -> None:
        logger.info("LLM provider: %s", self.llm.provider)
        logger.info("Model: %s", self.llm.model)
        logger.info("Temperature: %s", self.llm.temperature)
        logger.info("API key: %s", self.llm.masked_key())
        logger.info(
            "Rate limit: %d requests per %.0f minutes",
            self.rate_limit.max_requests,
            self.rate_limit.window_seconds / 60,
        )


def _first(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Build :class:`AppSettings` from environment variables.

    When *environ* is omitted, a ``.env`` file in the working directory is
    loaded into ``os.environ`` first (existing variables win).
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    env = environ

    provider = (env.get("LLM_PROVIDER") or "google").strip().lower()
    if (env.get("DEMO_MODE") or "").strip().lower() in _TRUTHY:
        provider = "demo"
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"LLM_PROVIDER must be one of {', '.join(SUPPORTED_PROVIDERS)}, got {provider!r}"
        )

    llm: Dict[str, object] = {"provider": provider}
    model = _first(env, "LLM_MODEL", "GEMINI_MODEL") if provider == "google" else env.get("LLM_MODEL")
    if model:
        llm["model"] = model
    for key, var in (
        ("temperature", "LLM_TEMPERATURE"),
        ("max_tokens", "LLM_MAX_TOKENS"),
        ("timeout_seconds", "LLM_TIMEOUT_SECONDS"),
    ):
        if env.get(var):
            llm[key] = env[var]
    api_key = _first(env, "LLM_API_KEY", *_API_KEY_VARS.get(provider, []))
    if api_key:
        llm["api_key"] = api_key

    rate_limit: Dict[str, object] = {}
    if env.get("RATE_LIMIT_WINDOW_MS"):
        rate_limit["window_ms"] = env["RATE_LIMIT_WINDOW_MS"]
    if env.get("RATE_LIMIT_MAX_REQUESTS"):
        rate_limit["max_requests"] = env["RATE_LIMIT_MAX_REQUESTS"]

    input_cfg: Dict[str, object] = {}
    if env.get("INPUT_MIN_LENGTH"):
        input_cfg["min_length"] = env["INPUT_MIN_LENGTH"]
    if env.get("INPUT_MAX_LENGTH"):
        input_cfg["max_length"] = env["INPUT_MAX_LENGTH"]

    server: Dict[str, object] = {}
    if env.get("PORT"):
        server["port"] = env["PORT"]
    if env.get("APP_ENV"):
        server["environment"] = env["APP_ENV"]
    if env.get("LOG_LEVEL"):
        server["log_level"] = env["LOG_LEVEL"].upper()
    if env.get("CORS_ORIGINS"):
        server["cors_origins"] = [o.strip() for o in env["CORS_ORIGINS"].split(",") if o.strip()]

    settings = AppSettings(
        llm=LLMSettings(**llm),
        rate_limit=RateLimitSettings(**rate_limit),
        input=InputSettings(**input_cfg),
        server=ServerSettings(**server),
    )

    if not settings.llm.api_key and settings.llm.provider != "demo":
        logger.warning("No API key set for provider %r. LLM calls will fail.", provider)
    return settings
