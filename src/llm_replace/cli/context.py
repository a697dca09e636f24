"""Context factory for creating CommandContext from CLI options."""

import logging
from pathlib import Path
from typing import Any

from llm_replace.cli.options import FormatChoice, get_output_format, get_provider_type
from llm_replace.commands.base import CommandContext
from llm_replace.config import get_config
from llm_replace.config.defaults import get_index_path
from llm_replace.config.schema import LLMReplaceConfig, ProviderType
from llm_replace.exceptions import ProviderError
from llm_replace.output import get_formatter
from llm_replace.output.base import OutputFormatter
from llm_replace.providers.base import LLMProvider
from llm_replace.providers.registry import ProviderRegistry
from llm_replace.search.corpus import FileSystemCorpus
from llm_replace.service import SearchReplaceService
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


def create_provider(
    provider_type: ProviderType,
    model: str | None = None,
    config: LLMReplaceConfig | None = None,
) -> LLMProvider | None:
    """Create an LLM provider from configuration.

    Returns:
        The provider, or None if it cannot be created.
    """
    if config is None:
        config = get_config()

    kwargs: dict[str, Any] = {}
    default_model: str | None = None
    if provider_type == ProviderType.OLLAMA:
        ollama_config = config.providers.ollama
        default_model = ollama_config.default_model
        kwargs["embedding_model"] = ollama_config.embedding_model
        kwargs["base_url"] = ollama_config.base_url
        kwargs["timeout"] = ollama_config.timeout
    elif provider_type == ProviderType.OPENAI:
        openai_config = config.providers.openai
        default_model = openai_config.default_model
        kwargs["embedding_model"] = openai_config.embedding_model
        if openai_config.api_key:
            kwargs["api_key"] = openai_config.api_key

    try:
        return ProviderRegistry.get(provider_type, model=model or default_model, **kwargs)
    except ProviderError as e:
        log_with_context(
            logger, logging.WARNING, "Provider unavailable",
            provider=provider_type.value, error=str(e),
        )
        return None


def create_formatter(
    format_choice: FormatChoice | None = None,
    verbose: bool = False,
    config: LLMReplaceConfig | None = None,
) -> OutputFormatter:
    """Create an output formatter from configuration."""
    if config is None:
        config = get_config()

    output_format = get_output_format(format_choice, config.output.default_format)
    if output_format.value == "rich":
        return get_formatter(output_format, verbose=verbose, color=config.output.color)
    return get_formatter(output_format, verbose=verbose)


def create_context(
    *,
    provider: str | None = None,
    model: str | None = None,
    format_choice: FormatChoice | None = None,
    verbose: bool = False,
    working_dir: Path | None = None,
    use_provider: bool = False,
    config: LLMReplaceConfig | None = None,
) -> CommandContext:
    """Create a CommandContext from CLI options.

    Args:
        provider: Provider name override (ollama, openai, mock).
        model: Model name override.
        format_choice: Output format override.
        verbose: Whether to enable verbose output.
        working_dir: Corpus root (default: current directory).
        use_provider: Whether the command needs an LLM provider
            (semantic matching, indexing, enrichment).
        config: Configuration to use. If None, uses global config.

    Returns:
        Fully configured CommandContext.

    Raises:
        InvalidScopeError: If the working directory is not a directory.
    """
    if config is None:
        config = get_config()

    root = (working_dir or Path.cwd()).resolve()
    llm_provider: LLMProvider | None = None
    if use_provider:
        # Each root gets its own persistent index unless one is configured
        config = config.model_copy(deep=True)
        config.index.path = get_index_path(root, config.index.path)
        provider_type = get_provider_type(provider, str(config.default_provider))
        llm_provider = create_provider(provider_type, model, config)

    corpus = FileSystemCorpus(root, max_file_size=config.search.max_file_size)
    service = SearchReplaceService(corpus, config, provider=llm_provider)

    return CommandContext(
        service=service,
        formatter=create_formatter(format_choice, verbose, config),
        config=config,
        verbose=verbose,
        working_dir=root,
    )
