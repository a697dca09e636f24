"""Base provider class and response types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from llm_replace.config.schema import ProviderType


@dataclass
class LLMResponse:
    """Standardized response from any chat provider."""

    content: str
    model: str
    provider: ProviderType
    tokens_used: int | None = None
    finish_reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class EmbeddingResponse:
    """Response containing vector embeddings."""

    embeddings: list[list[float]]
    model: str
    provider: ProviderType
    dimensions: int
    tokens_used: int | None = None


class LLMProvider(ABC):
    """Abstract base class for LLM and embedding providers.

    The vector index only needs ``embed``; query enhancement and intent
    classification use ``invoke`` when a provider is configured.
    """

    def __init__(self, provider_type: ProviderType, model_name: str) -> None:
        self._provider_type = provider_type
        self._model_name = model_name

    @property
    def provider_type(self) -> ProviderType:
        """Get the provider type."""
        return self._provider_type

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._model_name

    @property
    def embedding_model_name(self) -> str:
        """Name of the model used for embeddings (defaults to the chat model)."""
        return self._model_name

    @property
    @abstractmethod
    def supports_embeddings(self) -> bool:
        """Whether this provider supports generating embeddings."""
        ...

    @abstractmethod
    def invoke(self, prompt: str, **kwargs: Any) -> LLMResponse:
        """Synchronously invoke the LLM.

        Args:
            prompt: The prompt to send to the LLM.
            **kwargs: Additional provider-specific arguments.

        Returns:
            LLMResponse with the generated content.

        Raises:
            ProviderError: If the invocation fails.
        """
        ...

    def embed(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        """Generate embeddings for texts.

        Args:
            texts: List of texts to embed.
            **kwargs: Additional provider-specific arguments.

        Returns:
            EmbeddingResponse with one vector per input text.

        Raises:
            ProviderError: If embedding fails.
            NotImplementedError: If provider doesn't support embeddings.
        """
        if not self.supports_embeddings:
            raise NotImplementedError(
                f"Provider {self.provider_type} does not support embeddings"
            )
        return self._embed_impl(texts, **kwargs)

    def _embed_impl(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        """Implementation of embedding generation."""
        raise NotImplementedError("Subclass must implement _embed_impl")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={ProviderType(self.provider_type).value}, model={self.model_name})"


def response_from_message(
    message: Any, model: str, provider: ProviderType
) -> LLMResponse:
    """Convert a LangChain chat message into an LLMResponse."""
    tokens_used = None
    usage = getattr(message, "usage_metadata", None)
    if usage:
        tokens_used = usage.get("total_tokens")

    return LLMResponse(
        content=str(message.content),
        model=model,
        provider=provider,
        tokens_used=tokens_used,
        finish_reason=(getattr(message, "response_metadata", None) or {}).get(
            "finish_reason"
        ),
    )
