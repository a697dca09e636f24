"""Pytest fixtures for llm-replace tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from llm_replace.config import reset_config
from llm_replace.config.schema import LLMReplaceConfig
from llm_replace.providers import MockProvider, ProviderRegistry
from llm_replace.search.corpus import FileSystemCorpus, InMemoryCorpus
from llm_replace.service import SearchReplaceService


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_files(temp_dir: Path) -> Path:
    """Create a small project tree for testing."""
    root = temp_dir / "project"
    root.mkdir()
    (root / "README.md").write_text("# Demo\n\nCall old_name to start.\n")
    (root / "main.py").write_text(
        "from app import old_name\n"
        "\n"
        "def main():\n"
        "    # old_name is deprecated\n"
        "    print(old_name())\n"
    )
    src = root / "src"
    src.mkdir()
    (src / "app.py").write_text(
        "def old_name():\n"
        '    return "old_name"\n'
    )
    (src / "util.js").write_text("const total = getTotal(items);\n")
    return root


@pytest.fixture
def memory_corpus() -> InMemoryCorpus:
    """In-memory corpus used by most engine tests."""
    return InMemoryCorpus(
        {
            "a.py": "foo bar foo\n",
            "b.py": "def foo():\n    return 'foo'  # foo\n",
            "docs/guide.md": "Use foo to bar.\n",
        }
    )


@pytest.fixture
def test_config(temp_dir: Path) -> LLMReplaceConfig:
    """Configuration that keeps backups inside the temp directory."""
    config = LLMReplaceConfig()
    config.replace.backup_dir = temp_dir / "backups"
    return config


@pytest.fixture
def mock_provider() -> MockProvider:
    """Deterministic provider with hashed bag-of-words embeddings."""
    return MockProvider()


@pytest.fixture
def service(sample_files: Path, test_config: LLMReplaceConfig) -> SearchReplaceService:
    """Service over the sample project without any LLM provider."""
    return SearchReplaceService(FileSystemCorpus(sample_files), test_config)


@pytest.fixture(autouse=True)
def reset_config_fixture(
    temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point configuration at a temp file and reset singletons between tests."""
    config_dir = temp_dir / ".llmreplace"
    config_dir.mkdir()
    config_path = config_dir / "config.toml"
    config_path.write_text(
        f"""
default_provider = "mock"

[replace]
backup_dir = "{(temp_dir / 'backups').as_posix()}"

[index]
path = "{(temp_dir / 'index.duckdb').as_posix()}"

[output]
default_format = "plain"
"""
    )
    monkeypatch.setenv("LLMREPLACE_CONFIG", str(config_path))
    for name in ("LLMREPLACE_PROVIDER", "LLMREPLACE_MODEL", "LLMREPLACE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    ProviderRegistry.clear_cache()
    yield
    reset_config()
    ProviderRegistry.clear_cache()


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Create a standalone test config file."""
    config_path = temp_dir / "custom.toml"
    config_path.write_text(
        """
default_provider = "openai"

[providers.openai]
default_model = "gpt-4o"

[search]
max_results = 25
fuzzy_threshold = 0.7

[output]
default_format = "json"
"""
    )
    return config_path
