"""Google Gemini provider implementation.

Gemini is the default backend. System and user prompts are sent as a
single content block, which is how the model is driven in practice.
"""

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


class GoogleProvider(LLMProvider):
    """LLM Provider backed by Google Gemini API."""

    provider_name = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gemini-2.5-flash",
    ):
        self.api_key = (
            api_key
            or os.environ.get("GEMINI_API_KEY", "")
            or os.environ.get("GOOGLE_API_KEY", "")
        )
        self.default_model = default_model
        self._models: Dict[str, Any] = {}

    def _model(self, model_id: str):
        if model_id not in self._models:
            if not self.api_key:
                raise LLMError("GEMINI_API_KEY is not set", provider=self.provider_name)
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._models[model_id] = genai.GenerativeModel(model_id)
        return self._models[model_id]

    def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        cfg = self._default_config(config)
        model_id = self._resolve_model(cfg)

        full_system = system_prompt + JSONOutputGuard.system_prompt_suffix()
        prompt_hash = hashlib.sha256(
            (full_system + user_prompt).encode()
        ).hexdigest()[:16]

        gen_config = {
            "temperature": cfg.temperature,
            "max_output_tokens": cfg.max_tokens,
        }
        content = f"{full_system}\n\n{user_prompt}"

        t0 = time.time()
        try:
            response = self._model(model_id).generate_content(
                content,
                generation_config=gen_config,
                request_options={"timeout": cfg.timeout_seconds},
            )
            raw_text = response.text or ""
        except Exception as e:
            raise wrap_sdk_error(e, self.provider_name) from e

        latency_ms = int((time.time() - t0) * 1000)
        usage = getattr(response, "usage_metadata", None)
        parsed = JSONOutputGuard.enforce(raw_text)

        result_hash = hashlib.sha256(
            json.dumps(parsed, sort_keys=True).encode()
        ).hexdigest()[:16]

        return LLMResponse(
            raw_text=raw_text,
            parsed_json=parsed,
            model=model_id,
            provider=self.provider_name,
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            latency_ms=latency_ms,
            stop_reason="stop",
            prompt_hash=prompt_hash,
            result_hash=result_hash,
        )
