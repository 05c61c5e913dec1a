"""Output guards for LLM responses.

The generative backend is asked for a bare JSON object, but models still
wrap output in markdown fences or prepend chatter. The guard strips that
noise and enforces that what remains is a JSON object.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from .base import LLMJSONError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class JSONOutputGuard:
    """Ensure LLM output is a valid JSON object."""

    @staticmethod
    def system_prompt_suffix() -> str:
        return (
            "\n\nOUTPUT FORMAT: Return only the JSON object. "
            "Do not wrap it in markdown code fences. "
            "No explanations or comments. The first character must be {."
        )

    @staticmethod
    def enforce(raw_text: str) -> Dict[str, Any]:
        """Parse raw LLM text into a JSON dict."""
        if raw_text is None or not raw_text.strip():
            raise LLMJSONError("LLM returned empty response", raw_text=raw_text or "")

        text = JSONOutputGuard.strip_fences(raw_text)

        brace_pos = text.find("{")
        if brace_pos < 0:
            raise LLMJSONError(
                "LLM response does not contain a JSON object",
                raw_text=raw_text,
            )
        text = text[brace_pos:]

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = JSONOutputGuard._try_extract(raw_text)

        if not isinstance(parsed, dict):
            raise LLMJSONError(
                f"LLM response is JSON but not an object ({type(parsed).__name__})",
                raw_text=raw_text,
            )
        return parsed

    @staticmethod
    def strip_fences(raw_text: str) -> str:
        """Remove a surrounding ```json ... ``` or ``` ... ``` wrapper."""
        text = raw_text.strip()
        if text.startswith("```"):
            first_nl = text.find("\n")
            if first_nl > 0:
                text = text[first_nl + 1:]
            else:
                text = text[3:]
            if text.rstrip().endswith("```"):
                text = text.rstrip()[:-3].rstrip()
        return text

    @staticmethod
    def _try_extract(text: str) -> Any:
        """Last-resort extraction: fenced block anywhere, then outermost braces."""
        match = _FENCE_RE.search(text)
        if match:
            try:
                return json.loads(match.group(1))
            except json.JSONDecodeError:
                pass

        match = re.search(r"\{.*\}", text, re.DOTALL)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                pass

        logger.warning("Could not extract JSON from LLM output (%d chars)", len(text))
        raise LLMJSONError(
            f"Failed to parse LLM response as JSON. First 200 chars: {text[:200]}",
            raw_text=text,
        )
