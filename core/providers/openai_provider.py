"""OpenAI provider implementation.

Implements the same LLMProvider interface as GoogleProvider, using the
chat completions endpoint in JSON-object mode.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from typing import Optional

from .base import LLMConfig, LLMError, LLMProvider, LLMResponse, wrap_sdk_error
from .guards import JSONOutputGuard

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM Provider backed by OpenAI API."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gpt-4o",
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        self.default_model = default_model
        self._client = None

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise LLMError("OPENAI_API_KEY is not set", provider=self.provider_name)
            from openai import OpenAI

            self._client = OpenAI(api_key=self.api_key, max_retries=0)
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

        msgs = [
            {"role": "system", "content": full_system},
            {"role": "user", "content": user_prompt},
        ]

        t0 = time.time()
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=msgs,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
                response_format={"type": "json_object"},
                timeout=cfg.timeout_seconds,
            )
        except Exception as e:
            raise wrap_sdk_error(e, self.provider_name) from e

        latency_ms = int((time.time() - t0) * 1000)
        raw_text = response.choices[0].message.content or ""
        stop_reason = response.choices[0].finish_reason or ""
        parsed = JSONOutputGuard.enforce(raw_text)

        result_hash = hashlib.sha256(
            json.dumps(parsed, sort_keys=True).encode()
        ).hexdigest()[:16]

        return LLMResponse(
            raw_text=raw_text,
            parsed_json=parsed,
            model=model,
            provider=self.provider_name,
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
            latency_ms=latency_ms,
            stop_reason=stop_reason,
            prompt_hash=prompt_hash,
            result_hash=result_hash,
        )
