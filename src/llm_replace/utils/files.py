"""File operations utilities."""

import fnmatch
from collections.abc import Iterable, Iterator
from pathlib import Path

# Binary file extensions to skip
BINARY_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".zip", ".tar", ".gz", ".bz2", ".xz", ".7z", ".rar",
        ".exe", ".dll", ".so", ".dylib", ".bin", ".dat",
        ".mp3", ".mp4", ".wav", ".avi", ".mov", ".mkv", ".webm",
        ".pyc", ".pyo", ".class", ".o", ".a", ".obj", ".lib",
        ".db", ".sqlite", ".sqlite3", ".duckdb",
        ".pickle", ".pkl", ".npy", ".npz",
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
    }
)

# Common hidden/ignored directories
IGNORED_DIRS = frozenset(
    {
        ".git", ".svn", ".hg", ".bzr",
        "node_modules", "bower_components",
        "__pycache__", ".pytest_cache", ".mypy_cache", ".ruff_cache",
        "venv", ".venv", "env",
        ".idea", ".vscode",
        "dist", "build",
        ".tox", ".nox",
        "coverage", "htmlcov",
    }
)

# Programming language detection by extension
LANGUAGE_MAP = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".sql": "sql",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".ini": "ini",
    ".cfg": "ini",
    ".xml": "xml",
    ".md": "markdown",
    ".rst": "restructuredtext",
    ".txt": "text",
    ".r": "r",
    ".pl": "perl",
    ".pm": "perl",
}


def is_binary_file(path: Path) -> bool:
    """Check if a file is likely binary based on extension.

    Args:
        path: Path to file.

    Returns:
        True if file appears to be binary.
    """
    return path.suffix.lower() in BINARY_EXTENSIONS


def is_hidden(path: Path) -> bool:
    """Check if a file or directory is hidden (starts with '.')."""
    return path.name.startswith(".")


def should_ignore_dir(name: str) -> bool:
    """Check if a directory should be ignored during traversal."""
    return name in IGNORED_DIRS or name.endswith(".egg-info") or name.startswith(".")


def detect_language(path: str | Path) -> str | None:
    """Detect programming language from file extension.

    Args:
        path: Path to file.

    Returns:
        Language name or None if unknown.
    """
    return LANGUAGE_MAP.get(Path(path).suffix.lower())


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Normalize an extension filter ('py', '.PY' -> '.py')."""
    return frozenset(
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions
        if ext
    )


def matches_any(relative_path: str, patterns: Iterable[str]) -> bool:
    """Check a posix relative path against glob patterns.

    A pattern matches if it matches the whole path or any single
    path component (so 'tests' excludes every file under a tests/ dir).

    Args:
        relative_path: Path relative to the corpus root, '/' separated.
        patterns: Glob patterns (fnmatch syntax).

    Returns:
        True if any pattern matches.
    """
    parts = relative_path.split("/")
    for pattern in patterns:
        if fnmatch.fnmatch(relative_path, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
    return False


def read_text(path: Path, max_bytes: int | None = None) -> str:
    """Read a text file strictly as UTF-8.

    Unlike a lossy read, decoding errors propagate so callers can
    report the file as unreadable instead of matching mangled text.

    Args:
        path: Path to file.
        max_bytes: Refuse files larger than this many bytes.

    Returns:
        File content.

    Raises:
        OSError: If the file cannot be read or is too large.
        UnicodeDecodeError: If the file is not valid UTF-8.
        ValueError: If the file contains NUL bytes (binary content).
    """
    if max_bytes is not None and path.stat().st_size > max_bytes:
        raise OSError(f"File exceeds {max_bytes} bytes: {path}")
    # newline="" keeps \r\n intact so offsets match the bytes on disk
    with open(path, encoding="utf-8", newline="") as f:
        content = f.read()
    if "\x00" in content:
        raise ValueError(f"Binary content in {path}")
    return content


def iter_files(
    directory: Path,
    *,
    include_hidden: bool = False,
    skip_binary: bool = True,
    extensions: set[str] | frozenset[str] | None = None,
    max_depth: int | None = None,
) -> Iterator[Path]:
    """Iterate over files in a directory in sorted order.

    Args:
        directory: Root directory to search.
        include_hidden: Include hidden files/directories.
        skip_binary: Skip binary files.
        extensions: Only include files with these extensions.
        max_depth: Maximum directory depth (None for unlimited).

    Yields:
        Path objects for matching files.
    """

    def _walk(path: Path, depth: int) -> Iterator[Path]:
        if max_depth is not None and depth > max_depth:
            return

        try:
            entries = sorted(path.iterdir(), key=lambda p: p.name)
        except PermissionError:
            return

        for entry in entries:
            if not include_hidden and is_hidden(entry):
                continue

            if entry.is_dir():
                if should_ignore_dir(entry.name):
                    continue
                yield from _walk(entry, depth + 1)

            elif entry.is_file():
                if skip_binary and is_binary_file(entry):
                    continue

                if extensions and entry.suffix.lower() not in extensions:
                    continue

                yield entry

    yield from _walk(directory, 0)
