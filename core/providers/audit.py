"""LLM audit logging — tracks every generation attempt for cost monitoring and debugging.

Records are kept in-memory for the lifetime of the process; nothing is
persisted.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import LLMResponse

logger = logging.getLogger(__name__)


@dataclass
class AuditRecord:
    """Single LLM call audit entry."""

    identifier: str = ""
    attempt: int = 1
    provider: str = ""
    model: str = ""
    prompt_hash: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    temperature: float = 0.3
    max_tokens: int = 8000
    result_hash: str = ""
    timestamp: float = field(default_factory=time.time)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "attempt": self.attempt,
            "provider": self.provider,
            "model": self.model,
            "prompt_hash": self.prompt_hash,
            "token_usage": {
                "input": self.input_tokens,
                "output": self.output_tokens,
            },
            "latency_ms": self.latency_ms,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "result_hash": self.result_hash,
            "timestamp": self.timestamp,
            "error": self.error,
        }


class AuditLogger:
    """Collects LLM audit records.

    Usage::

        audit = AuditLogger()
        # ... after LLM call ...
        audit.log(response, identifier="203.0.113.7", attempt=1)
        # ... or after a failed call ...
        audit.log_failure("google", "gemini-2.5-flash", error="timeout")

        print(audit.summary())
    """

    def __init__(self, max_records: int = 1000):
        self._records: List[AuditRecord] = []
        self._max_records = max_records
        self._lock = threading.Lock()

    def log(
        self,
        response: LLMResponse,
        *,
        identifier: str = "",
        attempt: int = 1,
        temperature: float = 0.3,
        max_tokens: int = 8000,
    ) -> AuditRecord:
        """Record a successful LLM call."""
        record = AuditRecord(
            identifier=identifier,
            attempt=attempt,
            provider=response.provider,
            model=response.model,
            prompt_hash=response.prompt_hash,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            latency_ms=response.latency_ms,
            temperature=temperature,
            max_tokens=max_tokens,
            result_hash=response.result_hash,
        )
        self._append(record)
        logger.info(
            "LLM audit: provider=%s model=%s tokens=%d+%d latency=%dms attempt=%d",
            record.provider,
            record.model,
            record.input_tokens,
            record.output_tokens,
            record.latency_ms,
            record.attempt,
        )
        return record

    def log_failure(
        self,
        provider: str,
        model: str,
        *,
        error: str,
        identifier: str = "",
        attempt: int = 1,
        latency_ms: int = 0,
    ) -> AuditRecord:
        """Record a failed LLM call."""
        record = AuditRecord(
            identifier=identifier,
            attempt=attempt,
            provider=provider,
            model=model,
            latency_ms=latency_ms,
            error=error,
        )
        self._append(record)
        logger.warning(
            "LLM audit: provider=%s model=%s attempt=%d failed: %s",
            provider, model, attempt, error,
        )
        return record

    def _append(self, record: AuditRecord) -> None:
        with self._lock:
            self._records.append(record)
            if len(self._records) > self._max_records:
                del self._records[: len(self._records) - self._max_records]

    def summary(self) -> Dict[str, Any]:
        """Return aggregate stats for all recorded calls."""
        records = self.records
        return {
            "total_calls": len(records),
            "total_input_tokens": sum(r.input_tokens for r in records),
            "total_output_tokens": sum(r.output_tokens for r in records),
            "total_latency_ms": sum(r.latency_ms for r in records),
            "errors": sum(1 for r in records if r.error),
            "retries": sum(1 for r in records if r.attempt > 1),
        }

    @property
    def records(self) -> List[AuditRecord]:
        with self._lock:
            return list(self._records)
