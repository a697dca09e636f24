"""OpenAI provider implementation using LangChain."""

import os
from typing import Any

from llm_replace.config.schema import ProviderType
from llm_replace.exceptions import (
    ProviderAuthError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from llm_replace.providers.base import (
    EmbeddingResponse,
    LLMProvider,
    LLMResponse,
    response_from_message,
)
from llm_replace.providers.registry import ProviderRegistry


class OpenAIProvider(LLMProvider):
    """OpenAI provider using LangChain integration.

    Requires langchain-openai package:
        pip install llm-replace[openai]
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str | None = None,
        embedding_model: str = "text-embedding-3-small",
        timeout: float = 60.0,
        **kwargs: Any,
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            model: Chat model name (e.g., "gpt-4o-mini").
            api_key: OpenAI API key (uses OPENAI_API_KEY env var if None).
            embedding_model: Embedding model name.
            timeout: Request timeout in seconds.
            **kwargs: Additional arguments passed to ChatOpenAI.

        Raises:
            ProviderAuthError: If no API key is available.
        """
        super().__init__(ProviderType.OPENAI, model)
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._embedding_model = embedding_model
        self._timeout = timeout
        self._extra_kwargs = kwargs

        if not self._api_key:
            raise ProviderAuthError(
                "OpenAI API key not provided. "
                "Set OPENAI_API_KEY environment variable or pass api_key parameter."
            )

        self._chat_model: Any = None
        self._embeddings_model: Any = None

    @property
    def embedding_model_name(self) -> str:
        return self._embedding_model

    @property
    def supports_embeddings(self) -> bool:
        return True

    def _get_chat_model(self) -> Any:
        if self._chat_model is None:
            try:
                from langchain_openai import ChatOpenAI
            except ImportError as e:
                raise ProviderNotAvailableError(
                    "langchain-openai not installed. "
                    "Install with: pip install llm-replace[openai]"
                ) from e

            self._chat_model = ChatOpenAI(
                model=self.model_name,
                api_key=self._api_key,
                timeout=self._timeout,
                **self._extra_kwargs,
            )
        return self._chat_model

    def _get_embeddings_model(self) -> Any:
        if self._embeddings_model is None:
            try:
                from langchain_openai import OpenAIEmbeddings
            except ImportError as e:
                raise ProviderNotAvailableError(
                    "langchain-openai not installed. "
                    "Install with: pip install llm-replace[openai]"
                ) from e

            self._embeddings_model = OpenAIEmbeddings(
                model=self._embedding_model,
                api_key=self._api_key,
            )
        return self._embeddings_model

    def _handle_error(self, e: Exception) -> None:
        """Convert exceptions to appropriate provider errors."""
        if isinstance(e, ProviderError):
            raise e

        error_str = str(e).lower()

        if "authentication" in error_str or "invalid api key" in error_str:
            raise ProviderAuthError(
                "OpenAI authentication failed. Check your API key."
            ) from e

        if "rate limit" in error_str or "429" in error_str:
            raise ProviderRateLimitError(
                "OpenAI rate limit exceeded. Try again later."
            ) from e

        if "timeout" in error_str:
            raise ProviderTimeoutError(
                f"OpenAI request timed out after {self._timeout}s"
            ) from e

        raise ProviderError(f"OpenAI error: {e}") from e

    def invoke(self, prompt: str, **kwargs: Any) -> LLMResponse:
        """Synchronously invoke OpenAI."""
        try:
            message = self._get_chat_model().invoke(prompt, **kwargs)
            return response_from_message(message, self.model_name, self.provider_type)
        except Exception as e:
            self._handle_error(e)
            raise

    def _embed_impl(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        """Generate embeddings using OpenAI."""
        try:
            vectors = self._get_embeddings_model().embed_documents(texts)
            return EmbeddingResponse(
                embeddings=vectors,
                model=self._embedding_model,
                provider=self.provider_type,
                dimensions=len(vectors[0]) if vectors else 0,
            )
        except Exception as e:
            self._handle_error(e)
            raise


@ProviderRegistry.register(ProviderType.OPENAI)
def create_openai_provider(
    model: str = "gpt-4o-mini",
    api_key: str | None = None,
    embedding_model: str = "text-embedding-3-small",
    timeout: float = 60.0,
    **kwargs: Any,
) -> OpenAIProvider:
    """Factory function to create an OpenAI provider."""
    return OpenAIProvider(
        model=model,
        api_key=api_key,
        embedding_model=embedding_model,
        timeout=timeout,
        **kwargs,
    )
