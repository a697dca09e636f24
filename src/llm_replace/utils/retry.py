"""Retry decorators and utilities using tenacity."""

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from llm_replace.exceptions import (
    ProviderRateLimitError,
    ProviderTimeoutError,
)

# Retry decorator for LLM and embedding calls
llm_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(
        (ProviderRateLimitError, ProviderTimeoutError, ConnectionError)
    ),
    reraise=True,
)
"""Retry decorator for LLM and embedding calls.

Retries up to 3 times with exponential backoff (1s, 2s, 4s)
for rate limits, timeouts, and connection errors.

Usage:
    @llm_retry
    def embed(texts: list[str]) -> list[list[float]]:
        return provider.embed(texts).embeddings
"""
