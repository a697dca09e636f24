"""Mock provider for testing."""

import hashlib
import math
import re
import time
from typing import Any

from llm_replace.config.schema import ProviderType
from llm_replace.providers.base import EmbeddingResponse, LLMProvider, LLMResponse
from llm_replace.providers.registry import ProviderRegistry

_TOKEN_RE = re.compile(r"[A-Za-z0-9]+")


class MockProvider(LLMProvider):
    """Mock provider for testing.

    Responses are deterministic. Embeddings are hashed bag-of-words
    vectors, so texts sharing words have a positive cosine similarity
    and unrelated texts score near zero.
    """

    def __init__(
        self,
        model: str = "mock-model",
        responses: dict[str, str] | None = None,
        embedding_dimensions: int = 128,
        latency_ms: int = 0,
    ) -> None:
        """Initialize mock provider.

        Args:
            model: Model name to report.
            responses: Dict mapping prompt substrings to responses.
            embedding_dimensions: Dimension of fake embeddings.
            latency_ms: Simulated latency in milliseconds.
        """
        super().__init__(ProviderType.MOCK, model)
        self._responses = responses or {}
        self._embedding_dimensions = embedding_dimensions
        self._latency_ms = latency_ms
        self._call_history: list[dict[str, Any]] = []

    @property
    def supports_embeddings(self) -> bool:
        return True

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Get history of all calls made to this provider."""
        return self._call_history

    @property
    def call_count(self) -> int:
        """Get the number of calls made to this provider."""
        return len(self._call_history)

    def _generate_response(self, prompt: str) -> str:
        for key, response in self._responses.items():
            if key.lower() in prompt.lower():
                return response

        prompt_hash = hashlib.sha256(prompt.encode()).hexdigest()[:8]
        return f"Mock response for prompt (hash: {prompt_hash}): {prompt[:50]}..."

    def _record_call(self, method: str, prompt: str, **kwargs: Any) -> None:
        self._call_history.append({"method": method, "prompt": prompt, "kwargs": kwargs})

    def invoke(self, prompt: str, **kwargs: Any) -> LLMResponse:
        """Synchronously invoke the mock LLM."""
        self._record_call("invoke", prompt, **kwargs)

        if self._latency_ms > 0:
            time.sleep(self._latency_ms / 1000)

        content = self._generate_response(prompt)

        return LLMResponse(
            content=content,
            model=self.model_name,
            provider=self.provider_type,
            tokens_used=len(prompt.split()) + len(content.split()),
            finish_reason="stop",
        )

    def _embed_text(self, text: str) -> list[float]:
        vector = [0.0] * self._embedding_dimensions
        for token in _TOKEN_RE.findall(text.lower()):
            digest = hashlib.sha256(token.encode()).digest()
            vector[int.from_bytes(digest[:4], "big") % self._embedding_dimensions] += 1.0
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0.0:
            return vector
        return [v / norm for v in vector]

    def _embed_impl(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        """Generate deterministic hashed bag-of-words embeddings."""
        self._record_call("embed", str(texts), **kwargs)

        return EmbeddingResponse(
            embeddings=[self._embed_text(text) for text in texts],
            model=self.model_name,
            provider=self.provider_type,
            dimensions=self._embedding_dimensions,
            tokens_used=sum(len(t.split()) for t in texts),
        )


@ProviderRegistry.register(ProviderType.MOCK)
def create_mock_provider(
    model: str = "mock-model",
    responses: dict[str, str] | None = None,
    embedding_dimensions: int = 128,
    latency_ms: int = 0,
    **kwargs: Any,
) -> MockProvider:
    """Factory function to create a mock provider."""
    return MockProvider(
        model=model,
        responses=responses,
        embedding_dimensions=embedding_dimensions,
        latency_ms=latency_ms,
    )
