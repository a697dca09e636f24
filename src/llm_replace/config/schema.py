"""Pydantic models for llm-replace configuration."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ProviderType(str, Enum):
    """Supported LLM/embedding providers."""

    OLLAMA = "ollama"
    OPENAI = "openai"
    MOCK = "mock"


class OutputFormat(str, Enum):
    """Supported output formats."""

    RICH = "rich"
    PLAIN = "plain"
    JSON = "json"


class OllamaConfig(BaseModel):
    """Ollama provider configuration."""

    enabled: bool = True
    default_model: str = "llama3"
    embedding_model: str = "nomic-embed-text"
    base_url: str = "http://localhost:11434"
    timeout: float = 120.0


class OpenAIConfig(BaseModel):
    """OpenAI provider configuration."""

    enabled: bool = False
    default_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    api_key: str | None = None  # Use OPENAI_API_KEY env var
    timeout: float = 60.0


class ProvidersConfig(BaseModel):
    """Configuration for all providers."""

    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)


class SearchConfig(BaseModel):
    """Search engine configuration."""

    max_results: int = Field(default=100, ge=1)
    timeout_seconds: float | None = 30.0
    max_workers: int = Field(default=8, ge=1)
    context_lines: int = Field(default=0, ge=0)
    fuzzy_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    semantic_min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    semantic_top_k: int = Field(default=50, ge=1)
    regex_step_budget: int = Field(default=1_000_000_000, ge=1)
    regex_reference_length: int = Field(default=1_000, ge=1)
    matcher_priority: list[str] = Field(
        default_factory=lambda: ["exact", "regex", "fuzzy", "semantic"]
    )
    enhanced_strategies: list[str] = Field(
        default_factory=lambda: ["exact", "fuzzy", "semantic"]
    )
    max_file_size: int = 1_048_576  # 1 MB


class ReplaceConfig(BaseModel):
    """Replace pipeline configuration."""

    max_workers: int = Field(default=4, ge=1)
    max_replacements: int = Field(default=1000, ge=1)
    backup: bool = False
    backup_dir: Path | None = None  # Default: ~/.cache/llm-replace/backups
    ms_per_file: float = 5.0
    ms_per_match: float = 0.5


class RiskConfig(BaseModel):
    """Thresholds used to classify how disruptive a replace is."""

    high_matches_per_file: int = 20
    high_empty_replacement_files: int = 5
    medium_total_matches: int = 50
    low_max_files: int = 10
    low_max_matches_per_file: int = 1
    sensitive_paths: list[str] = Field(
        default_factory=lambda: [
            "pyproject.toml",
            "setup.py",
            "setup.cfg",
            "package.json",
            "package-lock.json",
            "*.lock",
            "Dockerfile",
            "Makefile",
            ".github/*",
            "*.ini",
            "*.cfg",
            ".env*",
        ]
    )


class IndexConfig(BaseModel):
    """Vector index configuration."""

    path: Path | None = None  # None: in-memory DuckDB
    chunk_size: int = Field(default=500, ge=1)
    chunk_overlap: int = Field(default=50, ge=0)
    batch_size: int = Field(default=32, ge=1)
    auto_index: bool = True  # Index the scope before each semantic search


class OutputConfig(BaseModel):
    """Output configuration."""

    default_format: OutputFormat = OutputFormat.RICH
    color: bool = True
    diff_context_lines: int = 3


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    file: Path | None = None  # Default: no file logging
    json_format: bool = False


class LLMReplaceConfig(BaseModel):
    """Root configuration for llm-replace."""

    model_config = ConfigDict(use_enum_values=True)

    default_provider: ProviderType = ProviderType.OLLAMA
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    replace: ReplaceConfig = Field(default_factory=ReplaceConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
