"""
Lazy-initialized OpenAI client so the app starts (in fallback-only mode)
when OPENAI_API_KEY is not set.
"""

import os
from typing import Optional
import httpx
from openai import OpenAI

_client: Optional[OpenAI] = None

# Explanations are requested while a student waits on the quiz review page
DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


def is_openai_configured() -> bool:
    return bool(os.getenv("OPENAI_API_KEY"))


def get_openai_client() -> OpenAI:
    """
    Get a lazily-initialized OpenAI client with timeout configuration.

    Returns:
        OpenAI: The OpenAI client instance

    Raises:
        ValueError: If OPENAI_API_KEY is not set
    """
    global _client

    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "AI features will use fallback responses."
            )
        # Retries are handled by app.utils.api_retry
        _client = OpenAI(api_key=api_key, timeout=DEFAULT_TIMEOUT, max_retries=0)

    return _client
