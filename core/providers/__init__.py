"""LLM Provider abstraction layer.

Supports multiple generative backends (Google Gemini, Anthropic Claude,
OpenAI, and an offline demo backend) with a unified interface, audit
logging, and output guards.
"""

from .base import LLMConfig, LLMError, LLMJSONError, LLMProvider, LLMResponse, LLMTimeoutError
from .guards import JSONOutputGuard
from .audit import AuditLogger, AuditRecord
from .registry import get_provider, get_default_model_for_provider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "LLMError",
    "LLMJSONError",
    "LLMTimeoutError",
    "JSONOutputGuard",
    "AuditLogger",
    "AuditRecord",
    "get_provider",
    "get_default_model_for_provider",
]
