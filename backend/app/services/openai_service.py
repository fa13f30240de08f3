"""
Centralized OpenAI Service with Circuit Breaker and Retry Logic

Every language-model call goes through OpenAIService.chat_completion, which
adds:
- a shared circuit breaker so a failing provider is skipped quickly
- exponential backoff with jitter for transient errors
- Sentry reporting of final failures

Usage:
    from app.services.openai_service import get_openai_service, AIServiceError

    try:
        text = get_openai_service().chat_completion(
            messages=[{"role": "user", "content": "Hello"}],
            max_tokens=100
        )
    except AIServiceError:
        # serve fallback content
        pass
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import sentry_sdk

from app.utils.api_retry import CircuitBreaker, CircuitState, RetryConfig, retry_with_backoff
from app.utils.openai_client import get_openai_client, is_openai_configured

logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")


class AIServiceError(Exception):
    """Base exception for language-model failures. Callers fall back on it."""
    pass


class AINotConfiguredError(AIServiceError):
    """Raised when OPENAI_API_KEY is not set."""
    pass


class CircuitBreakerOpenError(AIServiceError):
    """Raised when the circuit breaker is open and requests are being rejected."""
    pass


class OpenAIService:
    """Wrapper for chat completions with retry and circuit breaker protection."""

    def __init__(self, config: Optional[RetryConfig] = None, model: Optional[str] = None):
        self.config = config or RetryConfig(
            max_retries=2,
            initial_delay=1.0,
            max_delay=10.0,
            retry_on_status_codes=(429, 500, 502, 503, 504, 520, 521, 522, 523, 524),
            failure_threshold=5,
            recovery_timeout=120.0
        )
        self.model = model or DEFAULT_MODEL
        self.circuit_breaker = CircuitBreaker(self.config)
        self.metrics: Dict[str, int] = {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "rejected_calls": 0,
        }

    @property
    def is_configured(self) -> bool:
        return is_openai_configured()

    def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        **kwargs
    ) -> str:
        """
        Run a chat completion and return the stripped text of the first choice.

        Raises:
            AINotConfiguredError: No API key
            CircuitBreakerOpenError: Provider recently failing
            AIServiceError: All retries exhausted or empty response
        """
        model = model or self.model

        if not self.is_configured:
            raise AINotConfiguredError("OpenAI API key not configured")

        if not self.circuit_breaker.can_execute():
            self.metrics["rejected_calls"] += 1
            logger.warning(
                f"Circuit breaker OPEN - rejecting OpenAI request. "
                f"Failures: {self.circuit_breaker.failure_count}"
            )
            raise CircuitBreakerOpenError(
                "OpenAI service temporarily unavailable due to repeated failures"
            )

        @retry_with_backoff(config=self.config, circuit_breaker=self.circuit_breaker)
        def _make_call():
            return get_openai_client().chat.completions.create(
                model=model,
                messages=messages,
                **kwargs
            )

        self.metrics["total_calls"] += 1
        start_time = datetime.utcnow()
        try:
            response = _make_call()
        except Exception as e:
            self.metrics["failed_calls"] += 1
            sentry_sdk.capture_exception(e)
            logger.error(
                f"OpenAI call failed after retries: {str(e)}. "
                f"Circuit state: {self.circuit_breaker.state.value}"
            )
            raise AIServiceError(str(e)) from e

        latency_ms = (datetime.utcnow() - start_time).total_seconds() * 1000
        logger.debug(f"OpenAI call succeeded in {latency_ms:.0f}ms")

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            self.metrics["failed_calls"] += 1
            raise AIServiceError("OpenAI returned an empty response")

        self.metrics["successful_calls"] += 1
        return content.strip()

    def get_status(self) -> Dict[str, Any]:
        """Circuit breaker state and call counters for the admin statistics view."""
        circuit = self.circuit_breaker
        return {
            "configured": self.is_configured,
            "model": self.model,
            "circuit_breaker": {
                "state": circuit.state.value,
                "failure_count": circuit.failure_count,
                "last_failure_time": (
                    circuit.last_failure_time.isoformat()
                    if circuit.last_failure_time else None
                ),
            },
            "metrics": dict(self.metrics),
        }

    def is_healthy(self) -> bool:
        return self.circuit_breaker.state != CircuitState.OPEN


_openai_service: Optional[OpenAIService] = None


def get_openai_service() -> OpenAIService:
    """Get or create the process-wide service (one circuit breaker per process)."""
    global _openai_service
    if _openai_service is None:
        _openai_service = OpenAIService()
    return _openai_service
