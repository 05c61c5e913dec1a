"""LLM Provider interface — abstract base for all generative backends.

Every provider must implement ``generate_json``.
The orchestrator calls providers via dependency injection,
making it trivial to swap Gemini ↔ Claude ↔ OpenAI ↔ demo.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LLMConfig:
    """Immutable configuration for a single LLM call."""

    model: str = ""
    temperature: float = 0.3
    max_tokens: int = 8000
    timeout_seconds: float = 30.0


@dataclass
class LLMResponse:
    """Standardised response from any LLM provider."""

    raw_text: str
    parsed_json: Optional[Dict[str, Any]] = None
    model: str = ""
    provider: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    stop_reason: str = ""
    prompt_hash: str = ""
    result_hash: str = ""


class LLMProvider(abc.ABC):
    """Abstract base class for LLM providers.

    A provider performs exactly one call per ``generate_json`` invocation.
    Retry policy belongs to the caller.
    """

    provider_name: str = "base"
    default_model: str = ""

    @abc.abstractmethod
    def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        """Send a prompt and return a parsed JSON response.

        Parameters
        ----------
        system_prompt : str
            System-level instruction (role, rules, output format).
        user_prompt : str
            User-level content (the scenario to analyze).
        config : LLMConfig, optional
            Override default config for this call.

        Returns
        -------
        LLMResponse
            Contains ``parsed_json`` (dict) and usage metadata.

        Raises
        ------
        LLMError
            On API failure, timeout, or empty / invalid JSON output.
        """
        ...

    def _default_config(self, config: Optional[LLMConfig]) -> LLMConfig:
        return config or LLMConfig(model=self.default_model)

    def _resolve_model(self, cfg: LLMConfig) -> str:
        return cfg.model or self.default_model


class LLMError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(self, message: str, provider: str = "", retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class LLMTimeoutError(LLMError):
    """LLM call exceeded timeout."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message, provider=provider, retryable=True)


class LLMJSONError(LLMError):
    """LLM returned empty output or text that is not a JSON object."""

    def __init__(self, message: str, raw_text: str = "", provider: str = ""):
        super().__init__(message, provider=provider, retryable=True)
        self.raw_text = raw_text


def wrap_sdk_error(exc: Exception, provider: str) -> LLMError:
    """Translate an SDK exception into the provider error hierarchy."""
    if isinstance(exc, LLMError):
        return exc
    name = type(exc).__name__.lower()
    if "timeout" in name or isinstance(exc, TimeoutError):
        return LLMTimeoutError(f"{provider} call timed out: {exc}", provider=provider)
    return LLMError(f"{provider} API error: {exc}", provider=provider, retryable=True)
