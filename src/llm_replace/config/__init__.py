"""Configuration management."""

from llm_replace.config.loader import get_config, load_config, reset_config
from llm_replace.config.schema import LLMReplaceConfig

__all__ = ["LLMReplaceConfig", "get_config", "load_config", "reset_config"]
