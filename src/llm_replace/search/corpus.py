"""Corpus abstraction: where searchable files come from and go to."""

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from llm_replace.exceptions import InvalidScopeError
from llm_replace.search.models import ScopeKind, SearchOptions, SearchScope
from llm_replace.utils.files import (
    iter_files,
    matches_any,
    normalize_extensions,
    read_text,
)
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


class Corpus(ABC):
    """Files under search, addressed by posix paths relative to a root.

    Matching only reads. The replace executor is the only writer.
    """

    @abstractmethod
    def list_files(self, scope: SearchScope) -> list[str]:
        """List files covered by a scope, sorted.

        Raises:
            InvalidScopeError: If the scope names files or directories
                that do not exist or lie outside the corpus.
        """
        ...

    @abstractmethod
    def read_file(self, path: str) -> str:
        """Read a file's decoded text.

        Raises:
            OSError, UnicodeDecodeError, ValueError: If the file cannot be
                read as text. Callers turn these into per-file warnings.
        """
        ...

    @abstractmethod
    def write_file(self, path: str, text: str) -> None:
        """Replace a file's content as a whole."""
        ...

    def select_files(self, scope: SearchScope, options: SearchOptions) -> list[str]:
        """List scope files after applying file-type and exclude filters."""
        files = self.list_files(scope)
        extensions = normalize_extensions(options.file_types)
        if extensions:
            files = [f for f in files if PurePosixPath(f).suffix.lower() in extensions]
        if options.exclude_patterns:
            files = [f for f in files if not matches_any(f, options.exclude_patterns)]
        return files


class FileSystemCorpus(Corpus):
    """Corpus backed by a directory tree."""

    def __init__(self, root: Path | str, max_file_size: int | None = None) -> None:
        self.root = Path(root).resolve()
        self.max_file_size = max_file_size
        if not self.root.is_dir():
            raise InvalidScopeError(f"Corpus root is not a directory: {self.root}")

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        if not resolved.is_relative_to(self.root):
            raise InvalidScopeError(f"Path escapes corpus root: {path}")
        return resolved

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def list_files(self, scope: SearchScope) -> list[str]:
        kind = ScopeKind(scope.kind)

        if kind in (ScopeKind.FILE, ScopeKind.SELECTION):
            files = list(scope.files)
            if kind == ScopeKind.SELECTION:
                if scope.selection is None:
                    raise InvalidScopeError("Selection scope requires a selection")
                files = [scope.selection.file]
            if not files:
                raise InvalidScopeError("File scope requires at least one file")
            result = []
            for name in files:
                resolved = self._resolve(name)
                if not resolved.is_file():
                    raise InvalidScopeError(f"File not found: {name}")
                result.append(self._relative(resolved))
            return sorted(set(result))

        directories = [self._resolve(d) for d in scope.directories] or [self.root]
        seen: set[str] = set()
        for directory in directories:
            if not directory.is_dir():
                raise InvalidScopeError(
                    f"Directory not found: {self._relative(directory)}"
                )
            for file_path in iter_files(directory):
                seen.add(self._relative(file_path))
        return sorted(seen)

    def read_file(self, path: str) -> str:
        return read_text(self._resolve(path), max_bytes=self.max_file_size)

    def write_file(self, path: str, text: str) -> None:
        """Write atomically through a temp file in the same directory."""
        target = self._resolve(path)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            if target.exists():
                shutil.copymode(target, tmp_name)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        log_with_context(logger, logging.DEBUG, "Wrote file", file=path)


class InMemoryCorpus(Corpus):
    """Corpus held in a dict of ``{path: text}``."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = dict(files or {})

    def list_files(self, scope: SearchScope) -> list[str]:
        kind = ScopeKind(scope.kind)

        if kind in (ScopeKind.FILE, ScopeKind.SELECTION):
            if kind == ScopeKind.SELECTION:
                if scope.selection is None:
                    raise InvalidScopeError("Selection scope requires a selection")
                names = [scope.selection.file]
            else:
                names = list(scope.files)
            if not names:
                raise InvalidScopeError("File scope requires at least one file")
            missing = [n for n in names if n not in self.files]
            if missing:
                raise InvalidScopeError(f"File not found: {missing[0]}")
            return sorted(set(names))

        if not scope.directories:
            return sorted(self.files)

        prefixes = [d.strip("/") + "/" for d in scope.directories]
        for prefix in prefixes:
            if not any(f.startswith(prefix) for f in self.files):
                raise InvalidScopeError(f"Directory not found: {prefix.rstrip('/')}")
        return sorted(f for f in self.files if any(f.startswith(p) for p in prefixes))

    def read_file(self, path: str) -> str:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write_file(self, path: str, text: str) -> None:
        self.files[path] = text
