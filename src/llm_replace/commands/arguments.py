"""Translate command arguments into scopes and search options."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from llm_replace.exceptions import InvalidArgumentError, PathNotFoundError
from llm_replace.search.models import SearchOptions, SearchScope


def build_scope(root: Path, paths: Sequence[str] | None = None) -> SearchScope:
    """Scope for files or directories named on the command line.

    Args:
        root: Corpus root; relative paths are resolved against it.
        paths: Files or directories. Empty means the whole workspace.

    Raises:
        PathNotFoundError: If a path does not exist.
        InvalidArgumentError: If files and directories are mixed.
    """
    if not paths:
        return SearchScope.workspace()

    files: list[str] = []
    directories: list[str] = []
    for path in paths:
        target = root / path
        if target.is_file():
            files.append(path)
        elif target.is_dir():
            directories.append(path)
        else:
            raise PathNotFoundError(f"Path does not exist: {path}")

    if files and directories:
        raise InvalidArgumentError("Pass either files or directories, not both")
    if files:
        return SearchScope.for_files(*files)
    return SearchScope.project(*directories)


def build_options(**kwargs: Any) -> SearchOptions:
    """SearchOptions from command kwargs; missing or None values keep defaults."""
    fields = {
        "case_sensitive": bool,
        "whole_word": bool,
        "include_comments": bool,
        "include_strings": bool,
        "include_code": bool,
        "max_results": int,
        "timeout": float,
        "fuzzy_threshold": float,
        "semantic_top_k": int,
        "context_lines": int,
    }
    values: dict[str, Any] = {
        name: cast(kwargs[name]) for name, cast in fields.items() if kwargs.get(name) is not None
    }
    if kwargs.get("file_types"):
        values["file_types"] = tuple(kwargs["file_types"])
    if kwargs.get("exclude"):
        values["exclude_patterns"] = tuple(kwargs["exclude"])

    if "max_results" in values and values["max_results"] < 1:
        raise InvalidArgumentError("max_results must be at least 1")
    if "fuzzy_threshold" in values and not 0.0 <= values["fuzzy_threshold"] <= 1.0:
        raise InvalidArgumentError("fuzzy_threshold must be between 0 and 1")
    return SearchOptions(**values)
