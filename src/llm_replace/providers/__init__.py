"""LLM and embedding provider layer.

Usage:
    from llm_replace.providers import ProviderRegistry, ProviderType

    provider = ProviderRegistry.get(ProviderType.MOCK)
    vectors = provider.embed(["def parse_config", "class Loader"]).embeddings
"""

# Import providers to register them. The LangChain integrations are
# imported lazily inside each provider, so these imports always succeed.
from llm_replace.providers import ollama, openai  # noqa: F401
from llm_replace.providers.base import (
    EmbeddingResponse,
    LLMProvider,
    LLMResponse,
)
from llm_replace.providers.mock import MockProvider
from llm_replace.providers.registry import ProviderRegistry
from llm_replace.config.schema import ProviderType

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "EmbeddingResponse",
    "ProviderType",
    "ProviderRegistry",
    "MockProvider",
]
