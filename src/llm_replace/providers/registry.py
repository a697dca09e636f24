"""Provider registry for creating and caching provider instances."""

from collections.abc import Callable
from typing import Any

from llm_replace.config.schema import LLMReplaceConfig, ProviderType
from llm_replace.exceptions import ProviderError, ProviderNotAvailableError
from llm_replace.providers.base import LLMProvider

# Type for provider factory functions
ProviderFactory = Callable[..., LLMProvider]


class ProviderRegistry:
    """Factory for creating and caching provider instances.

    Usage:
        @ProviderRegistry.register(ProviderType.OLLAMA)
        def create_ollama(model: str = "llama3", **kwargs) -> OllamaProvider:
            return OllamaProvider(model=model, **kwargs)

        provider = ProviderRegistry.get(ProviderType.OLLAMA, model="llama3")
    """

    _factories: dict[ProviderType, ProviderFactory] = {}
    _instances: dict[str, LLMProvider] = {}

    @classmethod
    def register(
        cls, provider_type: ProviderType
    ) -> Callable[[ProviderFactory], ProviderFactory]:
        """Decorator to register a provider factory.

        Args:
            provider_type: The type of provider this factory creates.

        Returns:
            Decorator function.
        """

        def decorator(factory: ProviderFactory) -> ProviderFactory:
            cls._factories[provider_type] = factory
            return factory

        return decorator

    @classmethod
    def get(
        cls,
        provider_type: ProviderType | str,
        model: str | None = None,
        *,
        use_cache: bool = True,
        **kwargs: Any,
    ) -> LLMProvider:
        """Get or create a provider instance.

        Args:
            provider_type: Type of provider to get.
            model: Model name (uses provider default if None).
            use_cache: Whether to cache/reuse instances.
            **kwargs: Additional arguments for the provider factory.

        Returns:
            Provider instance.

        Raises:
            ProviderNotAvailableError: If provider type is not registered.
            ProviderError: If provider creation fails.
        """
        provider_type = ProviderType(provider_type)
        factory = cls._factories.get(provider_type)
        if factory is None:
            available = [p.value for p in cls._factories]
            raise ProviderNotAvailableError(
                f"Provider '{provider_type.value}' is not registered. "
                f"Available providers: {available}"
            )

        cache_key = cls._build_cache_key(provider_type, model, **kwargs)
        if use_cache and cache_key in cls._instances:
            return cls._instances[cache_key]

        try:
            if model is not None:
                instance = factory(model=model, **kwargs)
            else:
                instance = factory(**kwargs)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(
                f"Failed to create provider '{provider_type.value}': {e}"
            ) from e

        if use_cache:
            cls._instances[cache_key] = instance

        return instance

    @classmethod
    def from_config(
        cls, config: LLMReplaceConfig, provider_type: ProviderType | str | None = None
    ) -> LLMProvider:
        """Create the configured provider with its section's settings.

        Args:
            config: Loaded configuration.
            provider_type: Override for ``config.default_provider``.

        Returns:
            Provider instance.
        """
        ptype = ProviderType(provider_type or config.default_provider)
        if ptype == ProviderType.OLLAMA:
            ollama = config.providers.ollama
            return cls.get(
                ptype,
                model=ollama.default_model,
                embedding_model=ollama.embedding_model,
                base_url=ollama.base_url,
                timeout=ollama.timeout,
            )
        if ptype == ProviderType.OPENAI:
            openai = config.providers.openai
            return cls.get(
                ptype,
                model=openai.default_model,
                embedding_model=openai.embedding_model,
                api_key=openai.api_key,
                timeout=openai.timeout,
            )
        return cls.get(ptype)

    @classmethod
    def _build_cache_key(
        cls,
        provider_type: ProviderType,
        model: str | None,
        **kwargs: Any,
    ) -> str:
        """Build a cache key for provider instances."""
        kwargs_str = ",".join(f"{k}={v}" for k, v in sorted(kwargs.items()))
        return f"{provider_type.value}:{model or 'default'}:{kwargs_str}"

    @classmethod
    def list_available(cls) -> list[ProviderType]:
        """List all registered provider types."""
        return list(cls._factories.keys())

    @classmethod
    def is_registered(cls, provider_type: ProviderType) -> bool:
        """Check if a provider type is registered."""
        return provider_type in cls._factories

    @classmethod
    def clear_cache(cls) -> None:
        """Clear all cached provider instances."""
        cls._instances.clear()
