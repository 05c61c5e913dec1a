"""Analysis Orchestrator -- runs one scenario through the pipeline.

Pipeline:
    1. Input validation            (InputValidator)
    2. Admission                   (caller-supplied hook, e.g. the rate limiter)
    3. Generation                  (LLMProvider, at most one retry)
    4. Output validation           (ResponseValidator, then typed parse)
    5. Metadata                    (analyzedAt, processingTime)

Expected failures are returned as :class:`ErrorResponse` values, never
raised. Only retryable provider errors are retried; an output that parses but
breaks the contract is final. Validator messages are logged and never
returned to the caller.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from core.providers.audit import AuditLogger
from core.providers.base import LLMConfig, LLMError, LLMJSONError, LLMProvider
from core.providers.guards import JSONOutputGuard
from core.rate_limiter import RateLimiter
from shared.schemas.analysis import (
    AnalysisMetadata,
    AnalysisResult,
    is_refusal_payload,
    parse_analysis_result,
)
from shared.schemas.errors import ErrorResponse
from src.validation.input_validator import InputValidator
from src.validation.response_validator import (
    ResponseValidator,
    has_image_or_diagram_content,
    summarize_errors,
)

from .prompt_builder import build_prompts

logger = logging.getLogger(__name__)

AdmissionCheck = Callable[[str], Optional[ErrorResponse]]


def _pydantic_messages(error: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()
    ]


def rate_limit_admission(limiter: RateLimiter) -> AdmissionCheck:
    """Admission hook that checks, then records, a request for an identifier."""

    def admit(identifier: str) -> Optional[ErrorResponse]:
        if not limiter.check_limit(identifier):
            retry_after = limiter.get_time_until_reset(identifier)
            logger.warning(
                "Rate limit exceeded for %s (retry in %.0fs)", identifier, retry_after,
            )
            return ErrorResponse.rate_limited(retry_after)
        limiter.record_request(identifier)
        return None

    return admit


class AnalysisOrchestrator:
    """Composes validation, generation and output checks for one request.

    Parameters
    ----------
    provider : LLMProvider
        Generative backend.
    input_validator, response_validator : optional
        Defaults use the standard bounds and contract.
    llm_config : LLMConfig, optional
        Model, temperature, token cap and timeout for each call.
    audit : AuditLogger, optional
        Receives one record per generation attempt.
    max_retries : int
        Extra generation attempts after a provider failure.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        input_validator: Optional[InputValidator] = None,
        response_validator: Optional[ResponseValidator] = None,
        llm_config: Optional[LLMConfig] = None,
        audit: Optional[AuditLogger] = None,
        max_retries: int = 1,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.provider = provider
        self.input_validator = input_validator or InputValidator()
        self.response_validator = response_validator or ResponseValidator()
        self.llm_config = llm_config or LLMConfig(model=provider.default_model)
        self.audit = audit or AuditLogger()
        self.max_retries = max_retries
        self._clock = clock
        self._now = now

    def analyze(
        self,
        scenario: Optional[str],
        identifier: str = "unknown",
        admit: Optional[AdmissionCheck] = None,
    ) -> Union[AnalysisResult, ErrorResponse]:
        started = self._clock()

        check = self.input_validator.validate(scenario)
        if not check.is_valid:
            logger.info("Rejected scenario from %s: %s", identifier, check.kind)
            return check.error

        if admit is not None:
            denied = admit(identifier)
            if denied is not None:
                return denied

        text = scenario.strip()
        logger.info("Processing scenario from %s (%d chars)", identifier, len(text))

        system_prompt, user_prompt = build_prompts(text)
        try:
            payload = self._generate(system_prompt, user_prompt, identifier)
        except LLMError as e:
            logger.error("LLM analysis failed for %s after retry: %s", identifier, e)
            return ErrorResponse.service_unavailable()

        # Timing metadata is ours; drop whatever the model put there.
        payload.pop("metadata", None)

        report = self.response_validator.validate(payload)
        if not report.is_valid:
            logger.error(
                "LLM response validation failed for %s: %s",
                identifier, summarize_errors(report.errors),
            )
            return ErrorResponse.analysis_failed()

        if not is_refusal_payload(payload) and has_image_or_diagram_content(payload["systemMap"]):
            logger.warning("System map for %s contains image or diagram content", identifier)

        try:
            result = parse_analysis_result(payload)
        except ValidationError as e:
            logger.error(
                "LLM response failed schema parsing for %s: %s",
                identifier, summarize_errors(_pydantic_messages(e)),
            )
            return ErrorResponse.analysis_failed()

        processing_ms = max(0, int((self._clock() - started) * 1000))
        result.metadata = AnalysisMetadata(
            analyzed_at=self._now(),
            processing_time=processing_ms,
        )
        logger.info(
            "Completed %s for %s in %dms", result.kind, identifier, processing_ms,
        )
        return result

    def _generate(self, system_prompt: str, user_prompt: str, identifier: str) -> Dict[str, Any]:
        """Call the provider, retrying once on a retryable provider error."""
        attempts = self.max_retries + 1
        cfg = self.llm_config
        last_error: Optional[LLMError] = None

        for attempt in range(1, attempts + 1):
            t0 = self._clock()
            try:
                response = self.provider.generate_json(system_prompt, user_prompt, config=cfg)
                payload = response.parsed_json
                if payload is None:
                    payload = JSONOutputGuard.enforce(response.raw_text)
                elif not isinstance(payload, dict):
                    raise LLMJSONError(
                        "LLM response is JSON but not an object",
                        provider=self.provider.provider_name,
                    )
            except LLMError as e:
                last_error = e
                self.audit.log_failure(
                    self.provider.provider_name,
                    cfg.model,
                    error=str(e),
                    identifier=identifier,
                    attempt=attempt,
                    latency_ms=int((self._clock() - t0) * 1000),
                )
                if not e.retryable:
                    logger.error("LLM call failed with a non-retryable error: %s", e)
                    break
                if attempt < attempts:
                    logger.warning(
                        "LLM call failed (attempt %d/%d), retrying: %s", attempt, attempts, e,
                    )
                continue

            self.audit.log(
                response,
                identifier=identifier,
                attempt=attempt,
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
            )
            return dict(payload)

        raise LLMError(
            f"LLM analysis failed: {last_error}",
            provider=self.provider.provider_name,
        )
