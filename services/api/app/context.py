"""Process-wide application context.

Built once at startup and attached to ``app.state.context``. Holds the
only shared mutable state of the service: the rate limiter.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from core.providers.audit import AuditLogger
from core.providers.base import LLMConfig, LLMProvider
from core.providers.registry import get_provider
from core.rate_limiter import RateLimiter
from src.analysis.orchestrator import AdmissionCheck, AnalysisOrchestrator, rate_limit_admission
from src.config.settings import AppSettings
from src.validation.input_validator import InputValidator


@dataclass
class AppContext:
    settings: AppSettings
    orchestrator: AnalysisOrchestrator
    rate_limiter: RateLimiter
    admission: AdmissionCheck = field(init=False)

    def __post_init__(self) -> None:
        self.admission = rate_limit_admission(self.rate_limiter)

    @property
    def audit(self) -> AuditLogger:
        return self.orchestrator.audit


def build_context(
    settings: AppSettings,
    provider: Optional[LLMProvider] = None,
    clock: Callable[[], float] = time.monotonic,
) -> AppContext:
    """Wire provider, validators, orchestrator and limiter from *settings*."""
    llm = settings.llm
    if provider is None:
        provider = get_provider(llm.provider, model=llm.model, api_key=llm.api_key or None)

    orchestrator = AnalysisOrchestrator(
        provider,
        input_validator=InputValidator(settings.input.min_length, settings.input.max_length),
        llm_config=LLMConfig(
            model=llm.model or provider.default_model,
            temperature=llm.temperature,
            max_tokens=llm.max_tokens,
            timeout_seconds=llm.timeout_seconds,
        ),
        audit=AuditLogger(),
    )
    limiter = RateLimiter(
        window_seconds=settings.rate_limit.window_seconds,
        max_requests=settings.rate_limit.max_requests,
        clock=clock,
    )
    return AppContext(settings=settings, orchestrator=orchestrator, rate_limiter=limiter)
