"""Tests for core.providers -- registry, demo and SDK-backed providers, audit log."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from core.providers.audit import AuditLogger
from core.providers.base import (
    LLMConfig,
    LLMError,
    LLMJSONError,
    LLMResponse,
    LLMTimeoutError,
    wrap_sdk_error,
)
from core.providers.demo_provider import DEMO_ANALYSIS, DemoProvider
from core.providers.registry import (
    SUPPORTED_PROVIDERS,
    get_default_model_for_provider,
    get_model_catalog,
    get_provider,
)


# ===================================================================
# Registry
# ===================================================================

class TestRegistry:
    def test_default_models(self):
        assert get_default_model_for_provider("google") == "gemini-2.5-flash"
        assert get_default_model_for_provider("openai") == "gpt-4o"
        assert get_default_model_for_provider("demo") == "demo"
        assert get_default_model_for_provider("nope") is None

    def test_every_supported_provider_in_catalog(self):
        providers = {m["provider"] for m in get_model_catalog()}
        assert providers == set(SUPPORTED_PROVIDERS)

    @pytest.mark.parametrize("name", SUPPORTED_PROVIDERS)
    def test_factory_builds_each_provider(self, name):
        provider = get_provider(name, api_key="test-key")
        assert provider.provider_name == name

    def test_model_override(self):
        provider = get_provider("google", model="gemini-2.5-pro", api_key="k")
        assert provider.default_model == "gemini-2.5-pro"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            get_provider("mystery")


# ===================================================================
# Demo provider
# ===================================================================

class TestDemoProvider:
    def test_returns_canned_analysis(self):
        response = DemoProvider().generate_json("system", "user")
        assert response.parsed_json == DEMO_ANALYSIS
        assert response.provider == "demo"
        assert response.prompt_hash

    def test_result_is_a_copy(self):
        provider = DemoProvider()
        first = provider.generate_json("s", "u").parsed_json
        first["frameAudit"]["framingVerdict"] = "WELL_FRAMED"
        second = provider.generate_json("s", "u").parsed_json
        assert second["frameAudit"]["framingVerdict"] == "PARTIALLY_FLAWED"


# ===================================================================
# SDK-backed providers (client mocked, no network)
# ===================================================================

class TestGoogleProvider:
    def _provider(self, generate):
        provider = get_provider("google", api_key="k")
        model = MagicMock()
        model.generate_content = generate
        provider._models["gemini-2.5-flash"] = model
        return provider

    def test_parses_fenced_output(self):
        generate = MagicMock(return_value=SimpleNamespace(
            text='```json\n{"refusalReason": "x"}\n```', usage_metadata=None,
        ))
        provider = self._provider(generate)
        response = provider.generate_json(
            "sys", "user", config=LLMConfig(model="gemini-2.5-flash", temperature=0.3,
                                            max_tokens=100, timeout_seconds=5),
        )
        assert response.parsed_json == {"refusalReason": "x"}
        _, kwargs = generate.call_args
        assert kwargs["generation_config"] == {"temperature": 0.3, "max_output_tokens": 100}
        assert kwargs["request_options"] == {"timeout": 5}

    def test_timeout_is_wrapped(self):
        provider = self._provider(MagicMock(side_effect=TimeoutError("deadline")))
        with pytest.raises(LLMTimeoutError):
            provider.generate_json("sys", "user")

    def test_empty_output(self):
        provider = self._provider(MagicMock(return_value=SimpleNamespace(
            text="", usage_metadata=None,
        )))
        with pytest.raises(LLMJSONError):
            provider.generate_json("sys", "user")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        with pytest.raises(LLMError, match="GEMINI_API_KEY"):
            get_provider("google").generate_json("sys", "user")


class TestOpenAIProvider:
    def test_request_shape(self):
        provider = get_provider("openai", api_key="k")
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(
                message=SimpleNamespace(content='{"a": 1}'), finish_reason="stop",
            )],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
        )
        provider._client = client

        response = provider.generate_json("sys", "user", config=LLMConfig(model="gpt-4o"))
        assert response.parsed_json == {"a": 1}
        assert response.input_tokens == 12
        _, kwargs = client.chat.completions.create.call_args
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["timeout"] == 30.0


class TestAnthropicProvider:
    def test_sdk_error_is_wrapped(self):
        provider = get_provider("anthropic", api_key="k")
        client = MagicMock()
        client.messages.create.side_effect = RuntimeError("overloaded")
        provider._client = client
        with pytest.raises(LLMError, match="overloaded") as exc_info:
            provider.generate_json("sys", "user")
        assert exc_info.value.provider == "anthropic"


class TestWrapSdkError:
    def test_timeout_by_name(self):
        class ReadTimeout(Exception):
            pass

        assert isinstance(wrap_sdk_error(ReadTimeout("slow"), "openai"), LLMTimeoutError)

    def test_generic_error(self):
        err = wrap_sdk_error(ValueError("bad"), "google")
        assert type(err) is LLMError
        assert err.retryable

    def test_llm_error_passes_through(self):
        original = LLMJSONError("empty")
        assert wrap_sdk_error(original, "google") is original


# ===================================================================
# Audit log
# ===================================================================

class TestAuditLogger:
    def _response(self, **kw):
        defaults = dict(raw_text="{}", parsed_json={}, model="m", provider="p",
                        input_tokens=10, output_tokens=5, latency_ms=20)
        defaults.update(kw)
        return LLMResponse(**defaults)

    def test_summary(self):
        audit = AuditLogger()
        audit.log_failure("p", "m", error="timeout", identifier="a", attempt=1, latency_ms=30)
        audit.log(self._response(), identifier="a", attempt=2)
        summary = audit.summary()
        assert summary["total_calls"] == 2
        assert summary["total_input_tokens"] == 10
        assert summary["total_latency_ms"] == 50
        assert summary["errors"] == 1
        assert summary["retries"] == 1

    def test_record_cap(self):
        audit = AuditLogger(max_records=3)
        for i in range(5):
            audit.log(self._response(), attempt=i + 1)
        assert [r.attempt for r in audit.records] == [3, 4, 5]

    def test_to_dict(self):
        record = AuditLogger().log(self._response(), identifier="1.2.3.4")
        data = record.to_dict()
        assert data["identifier"] == "1.2.3.4"
        assert data["token_usage"] == {"input": 10, "output": 5}
        assert data["error"] is None
