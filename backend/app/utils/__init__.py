"""
Quiz Learner Utilities Package

Contains:
- api_retry: Exponential backoff and circuit breaker for API calls
- openai_client: Lazy-initialized OpenAI client
"""

from app.utils.api_retry import (
    retry_with_backoff,
    RetryConfig,
    CircuitBreaker,
    CircuitState,
)
from app.utils.openai_client import get_openai_client, is_openai_configured

__all__ = [
    "retry_with_backoff",
    "RetryConfig",
    "CircuitBreaker",
    "CircuitState",
    "get_openai_client",
    "is_openai_configured",
]
