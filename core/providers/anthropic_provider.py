"""Anthropic Claude provider implementation."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from typing import Any, Dict, Optional

from .base import LLMConfig, LLMError, LLMProvider, LLMResponse, wrap_sdk_error
from .guards import JSONOutputGuard

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """LLM Provider backed by Anthropic Claude API."""

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "claude-sonnet-4-5-20250929",
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self.default_model = default_model
        self.base_url = base_url
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise LLMError("ANTHROPIC_API_KEY is not set", provider=self.provider_name)
            from anthropic import Anthropic

            kwargs: Dict[str, Any] = {"api_key": self.api_key, "max_retries": 0}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._client = Anthropic(**kwargs)
        return self._client

    def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        cfg = self._default_config(config)
        model = self._resolve_model(cfg)

        full_system = system_prompt + JSONOutputGuard.system_prompt_suffix()
        prompt_hash = hashlib.sha256(
            (full_system + user_prompt).encode()
        ).hexdigest()[:16]

        t0 = time.time()
        try:
            response = self.client.messages.create(
                model=model,
                max_tokens=cfg.max_tokens,
                temperature=cfg.temperature,
                system=full_system,
                messages=[{"role": "user", "content": user_prompt}],
                timeout=cfg.timeout_seconds,
            )
        except Exception as e:
            raise wrap_sdk_error(e, self.provider_name) from e

        latency_ms = int((time.time() - t0) * 1000)
        raw_text = response.content[0].text if response.content else ""
        stop_reason = getattr(response, "stop_reason", "unknown")
        if stop_reason == "max_tokens":
            logger.warning("Anthropic response truncated at max_tokens=%d", cfg.max_tokens)

        usage = getattr(response, "usage", None)
        parsed = JSONOutputGuard.enforce(raw_text)

        result_hash = hashlib.sha256(
            json.dumps(parsed, sort_keys=True).encode()
        ).hexdigest()[:16]

        return LLMResponse(
            raw_text=raw_text,
            parsed_json=parsed,
            model=model,
            provider=self.provider_name,
            input_tokens=getattr(usage, "input_tokens", 0) if usage else 0,
            output_tokens=getattr(usage, "output_tokens", 0) if usage else 0,
            latency_ms=latency_ms,
            stop_reason=stop_reason,
            prompt_hash=prompt_hash,
            result_hash=result_hash,
        )
