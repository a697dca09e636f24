"""Default configuration values and paths."""

import hashlib
import os
from pathlib import Path
from typing import Final

# Default directories
DEFAULT_CONFIG_DIR: Final[Path] = Path.home() / ".config" / "llm-replace"
DEFAULT_CACHE_DIR: Final[Path] = Path.home() / ".cache" / "llm-replace"

# Default file paths
DEFAULT_CONFIG_FILE: Final[Path] = DEFAULT_CONFIG_DIR / "config.toml"
DEFAULT_BACKUP_DIR: Final[Path] = DEFAULT_CACHE_DIR / "backups"
DEFAULT_INDEX_DIR: Final[Path] = DEFAULT_CACHE_DIR / "index"
DEFAULT_LOG_FILE: Final[Path] = DEFAULT_CACHE_DIR / "llm-replace.log"

# Environment variable names
ENV_CONFIG_PATH: Final[str] = "LLMREPLACE_CONFIG"
ENV_LOG_LEVEL: Final[str] = "LLMREPLACE_LOG_LEVEL"
ENV_DEFAULT_PROVIDER: Final[str] = "LLMREPLACE_PROVIDER"
ENV_DEFAULT_MODEL: Final[str] = "LLMREPLACE_MODEL"
ENV_MAX_WORKERS: Final[str] = "LLMREPLACE_MAX_WORKERS"

# Provider environment variables
ENV_OPENAI_API_KEY: Final[str] = "OPENAI_API_KEY"
ENV_OLLAMA_HOST: Final[str] = "OLLAMA_HOST"

# Default config content (TOML)
DEFAULT_CONFIG_TOML: Final[str] = """\
# llm-replace configuration

default_provider = "ollama"

[providers.ollama]
enabled = true
default_model = "llama3"
embedding_model = "nomic-embed-text"
base_url = "http://localhost:11434"
timeout = 120.0

[providers.openai]
enabled = false
default_model = "gpt-4o-mini"
embedding_model = "text-embedding-3-small"
# api_key = ""  # Use OPENAI_API_KEY env var

[search]
max_results = 100
timeout_seconds = 30.0
max_workers = 8
fuzzy_threshold = 0.8
semantic_min_score = 0.5
regex_step_budget = 1000000000
matcher_priority = ["exact", "regex", "fuzzy", "semantic"]
enhanced_strategies = ["exact", "fuzzy", "semantic"]

[replace]
max_workers = 4
max_replacements = 1000
backup = false

[risk]
high_matches_per_file = 20
high_empty_replacement_files = 5
medium_total_matches = 50
low_max_files = 10

[index]
chunk_size = 500
chunk_overlap = 50
auto_index = true

[output]
default_format = "rich"
color = true

[logging]
level = "WARNING"
json_format = false
"""


def ensure_directories() -> None:
    """Ensure all default directories exist."""
    DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    DEFAULT_CACHE_DIR.mkdir(parents=True, exist_ok=True)


def get_config_path() -> Path:
    """Get the configuration file path."""
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def get_backup_dir(configured: Path | None = None) -> Path:
    """Get the directory where replace backups are stored."""
    return configured or DEFAULT_BACKUP_DIR


def get_index_path(root: Path, configured: Path | None = None) -> Path:
    """Get the vector index database for a corpus root.

    Each root gets its own database under the cache directory unless a
    path is configured.
    """
    if configured:
        return configured
    digest = hashlib.sha256(str(root.resolve()).encode("utf-8")).hexdigest()[:16]
    return DEFAULT_INDEX_DIR / f"{digest}.duckdb"
