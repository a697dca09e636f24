"""Ollama provider implementation using LangChain."""

from typing import Any

from llm_replace.config.schema import ProviderType
from llm_replace.exceptions import (
    ProviderError,
    ProviderNotAvailableError,
    ProviderTimeoutError,
)
from llm_replace.providers.base import (
    EmbeddingResponse,
    LLMProvider,
    LLMResponse,
    response_from_message,
)
from llm_replace.providers.registry import ProviderRegistry


class OllamaProvider(LLMProvider):
    """Ollama provider using LangChain integration.

    Requires langchain-ollama package:
        pip install llm-replace[ollama]
    """

    def __init__(
        self,
        model: str = "llama3",
        embedding_model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        **kwargs: Any,
    ) -> None:
        """Initialize Ollama provider.

        Args:
            model: Chat model name (e.g., "llama3", "codellama").
            embedding_model: Model used for embeddings.
            base_url: Ollama server URL.
            timeout: Request timeout in seconds.
            **kwargs: Additional arguments passed to ChatOllama.
        """
        super().__init__(ProviderType.OLLAMA, model)
        self._embedding_model = embedding_model
        self._base_url = base_url
        self._timeout = timeout
        self._extra_kwargs = kwargs

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
                from langchain_ollama import ChatOllama
            except ImportError as e:
                raise ProviderNotAvailableError(
                    "langchain-ollama not installed. "
                    "Install with: pip install llm-replace[ollama]"
                ) from e

            self._chat_model = ChatOllama(
                model=self.model_name,
                base_url=self._base_url,
                **self._extra_kwargs,
            )
        return self._chat_model

    def _get_embeddings_model(self) -> Any:
        if self._embeddings_model is None:
            try:
                from langchain_ollama import OllamaEmbeddings
            except ImportError as e:
                raise ProviderNotAvailableError(
                    "langchain-ollama not installed. "
                    "Install with: pip install llm-replace[ollama]"
                ) from e

            self._embeddings_model = OllamaEmbeddings(
                model=self._embedding_model,
                base_url=self._base_url,
            )
        return self._embeddings_model

    def _handle_error(self, e: Exception) -> None:
        """Convert exceptions to appropriate provider errors."""
        if isinstance(e, ProviderError):
            raise e

        error_str = str(e).lower()

        if "connection" in error_str or "refused" in error_str:
            raise ProviderNotAvailableError(
                f"Cannot connect to Ollama at {self._base_url}. "
                "Make sure Ollama is running: ollama serve"
            ) from e

        if "timeout" in error_str:
            raise ProviderTimeoutError(
                f"Request to Ollama timed out after {self._timeout}s"
            ) from e

        raise ProviderError(f"Ollama error: {e}") from e

    def invoke(self, prompt: str, **kwargs: Any) -> LLMResponse:
        """Synchronously invoke Ollama."""
        try:
            message = self._get_chat_model().invoke(prompt, **kwargs)
            return response_from_message(message, self.model_name, self.provider_type)
        except Exception as e:
            self._handle_error(e)
            raise

    def _embed_impl(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        """Generate embeddings using Ollama."""
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


@ProviderRegistry.register(ProviderType.OLLAMA)
def create_ollama_provider(
    model: str = "llama3",
    embedding_model: str = "nomic-embed-text",
    base_url: str = "http://localhost:11434",
    timeout: float = 120.0,
    **kwargs: Any,
) -> OllamaProvider:
    """Factory function to create an Ollama provider."""
    return OllamaProvider(
        model=model,
        embedding_model=embedding_model,
        base_url=base_url,
        timeout=timeout,
        **kwargs,
    )
