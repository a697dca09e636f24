"""Configuration loading from TOML files and environment variables."""

import contextlib
import os
import tomllib
from pathlib import Path

from pydantic import ValidationError

from llm_replace.config.defaults import (
    DEFAULT_CONFIG_TOML,
    ENV_DEFAULT_MODEL,
    ENV_DEFAULT_PROVIDER,
    ENV_LOG_LEVEL,
    ENV_MAX_WORKERS,
    ENV_OLLAMA_HOST,
    ENV_OPENAI_API_KEY,
    ensure_directories,
    get_config_path,
)
from llm_replace.config.schema import LLMReplaceConfig, ProviderType
from llm_replace.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError

# Global config instance (singleton, CLI convenience only)
_config: LLMReplaceConfig | None = None


def load_config(
    config_path: Path | None = None,
    *,
    create_if_missing: bool = True,
) -> LLMReplaceConfig:
    """Load configuration from TOML file and environment variables.

    Args:
        config_path: Path to config file. If None, uses default.
        create_if_missing: Create default config if file doesn't exist.

    Returns:
        Loaded and validated configuration.

    Raises:
        ConfigNotFoundError: If an explicit config path does not exist.
        ConfigError: If configuration cannot be loaded.
        ConfigValidationError: If configuration is invalid.
    """
    path = config_path or get_config_path()

    if not path.exists():
        if config_path is not None:
            raise ConfigNotFoundError(f"Config file not found: {path}")
        if create_if_missing:
            try:
                ensure_directories()
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(DEFAULT_CONFIG_TOML)
            except OSError:
                # Read-only home; fall back to defaults
                return _apply_env_overrides(LLMReplaceConfig())
        else:
            return _apply_env_overrides(LLMReplaceConfig())

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    try:
        config = LLMReplaceConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration: {e}") from e

    return _apply_env_overrides(config)


def _apply_env_overrides(config: LLMReplaceConfig) -> LLMReplaceConfig:
    """Apply environment variable overrides to configuration."""
    provider_env = os.environ.get(ENV_DEFAULT_PROVIDER)
    if provider_env:
        with contextlib.suppress(ValueError):
            config.default_provider = ProviderType(provider_env.lower()).value

    # Model override (applied to default provider)
    model_env = os.environ.get(ENV_DEFAULT_MODEL)
    if model_env:
        if config.default_provider == ProviderType.OLLAMA.value:
            config.providers.ollama.default_model = model_env
        elif config.default_provider == ProviderType.OPENAI.value:
            config.providers.openai.default_model = model_env

    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        config.logging.level = log_level.upper()

    max_workers = os.environ.get(ENV_MAX_WORKERS)
    if max_workers:
        with contextlib.suppress(ValueError):
            workers = int(max_workers)
            if workers > 0:
                config.search.max_workers = workers
                config.replace.max_workers = workers

    openai_key = os.environ.get(ENV_OPENAI_API_KEY)
    if openai_key and not config.providers.openai.api_key:
        config.providers.openai.api_key = openai_key

    ollama_host = os.environ.get(ENV_OLLAMA_HOST)
    if ollama_host:
        config.providers.ollama.base_url = ollama_host

    return config


def get_config() -> LLMReplaceConfig:
    """Get the current configuration (singleton).

    Loads config on first access, caches for subsequent calls.

    Returns:
        Current configuration.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Path | None = None) -> LLMReplaceConfig:
    """Reload configuration from disk.

    Args:
        config_path: Path to config file. If None, uses default.

    Returns:
        Reloaded configuration.
    """
    global _config
    _config = load_config(config_path)
    return _config


def reset_config() -> None:
    """Reset the configuration singleton (mainly for testing)."""
    global _config
    _config = None
