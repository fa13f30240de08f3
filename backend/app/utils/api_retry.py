"""
API Retry Utility with Exponential Backoff

Retry and circuit-breaker primitives for calls to the language-model API.

Features:
- Exponential backoff with jitter
- Retry-After header support for HTTP 429
- Circuit breaker shared across calls so a failing provider is skipped
  quickly and callers fall back to canned content
"""

import random
import time
import logging
from dataclasses import dataclass
from datetime import datetime
from functools import wraps
from typing import Callable, Optional, Type, Tuple
from enum import Enum

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2

    # Backoff timing (in seconds)
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter_factor: float = 0.5

    retry_on_status_codes: Tuple[int, ...] = (429, 500, 502, 503, 504)
    retry_on_exceptions: Tuple[Type[Exception], ...] = (
        ConnectionError,
        TimeoutError,
    )

    rate_limit_header: str = "Retry-After"
    respect_retry_after: bool = True

    # Circuit breaker
    failure_threshold: int = 5
    recovery_timeout: float = 60.0
    half_open_successes: int = 2


class CircuitState(Enum):
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests
    HALF_OPEN = "half_open"  # Probing for recovery


# ============================================================================
# CIRCUIT BREAKER
# ============================================================================

class CircuitBreaker:
    """Stops sending requests to a provider after repeated failures."""

    def __init__(self, config: RetryConfig):
        self.config = config
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[datetime] = None

    def can_execute(self) -> bool:
        if self.state == CircuitState.CLOSED:
            return True

        if self.state == CircuitState.OPEN:
            if self.last_failure_time:
                elapsed = (datetime.utcnow() - self.last_failure_time).total_seconds()
                if elapsed >= self.config.recovery_timeout:
                    self.state = CircuitState.HALF_OPEN
                    self.success_count = 0
                    logger.info("Circuit breaker entering HALF_OPEN state")
                    return True
            return False

        return True

    def record_success(self):
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.config.half_open_successes:
                self.state = CircuitState.CLOSED
                self.failure_count = 0
                logger.info("Circuit breaker CLOSED - service recovered")
        else:
            self.failure_count = max(0, self.failure_count - 1)

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = datetime.utcnow()

        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.OPEN
            logger.warning("Circuit breaker OPEN - service still failing")
        elif self.failure_count >= self.config.failure_threshold:
            self.state = CircuitState.OPEN
            logger.warning(f"Circuit breaker OPEN after {self.failure_count} failures")

    def reset(self):
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0


# ============================================================================
# RETRY DECORATOR
# ============================================================================

def calculate_delay(
    attempt: int,
    config: RetryConfig,
    retry_after: Optional[float] = None
) -> float:
    """
    Delay before the next retry: exponential backoff plus jitter, capped at
    max_delay. A server-specified Retry-After wins when present.
    """
    if retry_after and config.respect_retry_after:
        jitter = random.uniform(0, config.jitter_factor * retry_after)
        return min(retry_after + jitter, config.max_delay)

    base_delay = config.initial_delay * (config.exponential_base ** attempt)
    jitter = random.uniform(0, config.jitter_factor * base_delay)
    return min(base_delay + jitter, config.max_delay)


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    circuit_breaker: Optional[CircuitBreaker] = None
):
    """
    Decorator for retrying a synchronous call with exponential backoff.

    Args:
        config: Retry configuration (uses defaults if None)
        circuit_breaker: Breaker to report outcomes to; shared between calls

    Usage:
        @retry_with_backoff(RetryConfig(max_retries=3))
        def call_api():
            ...
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(config.max_retries + 1):
                try:
                    result = func(*args, **kwargs)
                    if circuit_breaker:
                        circuit_breaker.record_success()
                    return result

                except Exception as e:
                    last_exception = e
                    should_retry, retry_after = _should_retry(e, config)

                    if circuit_breaker:
                        circuit_breaker.record_failure()

                    if not should_retry or attempt >= config.max_retries:
                        logger.error(f"Request failed after {attempt + 1} attempts: {str(e)}")
                        raise

                    if circuit_breaker and not circuit_breaker.can_execute():
                        logger.warning("Circuit opened during retries, giving up")
                        raise

                    delay = calculate_delay(attempt, config, retry_after)
                    logger.warning(
                        f"Attempt {attempt + 1}/{config.max_retries + 1} failed: {str(e)}. "
                        f"Retrying in {delay:.2f}s..."
                    )

                    time.sleep(delay)

            raise last_exception

        return wrapper

    return decorator


def _parse_retry_after(response, config: RetryConfig) -> Optional[float]:
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    value = headers.get(config.rate_limit_header)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _should_retry(exception: Exception, config: RetryConfig) -> Tuple[bool, Optional[float]]:
    """
    Determine if an exception should trigger a retry.

    Returns:
        (should_retry, retry_after_seconds)
    """
    # openai.APIStatusError and httpx.HTTPStatusError both expose the status
    status_code = getattr(exception, "status_code", None)
    response = getattr(exception, "response", None)
    if status_code is None and response is not None:
        status_code = getattr(response, "status_code", None)

    if status_code is not None:
        if status_code in config.retry_on_status_codes:
            return True, _parse_retry_after(response, config)
        return False, None

    if isinstance(exception, config.retry_on_exceptions):
        return True, None

    error_msg = str(exception).lower()
    retryable_patterns = [
        "rate limit",
        "too many requests",
        "timeout",
        "timed out",
        "connection",
        "temporarily unavailable",
        "service unavailable",
    ]
    if any(pattern in error_msg for pattern in retryable_patterns):
        return True, None

    return False, None
