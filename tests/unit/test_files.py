"""Tests for file utilities."""

from pathlib import Path

import pytest

from llm_replace.utils.files import (
    detect_language,
    iter_files,
    matches_any,
    normalize_extensions,
    read_text,
)


class TestIterFiles:
    """Tests for directory traversal."""

    def test_sorted_and_filtered(self, temp_dir: Path) -> None:
        """Test hidden, ignored and binary entries are skipped."""
        (temp_dir / "b.py").write_text("b")
        (temp_dir / "a.txt").write_text("a")
        (temp_dir / ".hidden").write_text("h")
        (temp_dir / "image.png").write_bytes(b"\x89PNG")
        (temp_dir / "node_modules").mkdir()
        (temp_dir / "node_modules" / "x.js").write_text("x")
        (temp_dir / "pkg").mkdir()
        (temp_dir / "pkg" / "c.py").write_text("c")

        names = [p.relative_to(temp_dir).as_posix() for p in iter_files(temp_dir)]
        assert names == ["a.txt", "b.py", "pkg/c.py"]

    def test_extensions_and_depth(self, temp_dir: Path) -> None:
        (temp_dir / "a.py").write_text("a")
        (temp_dir / "b.md").write_text("b")
        (temp_dir / "sub").mkdir()
        (temp_dir / "sub" / "c.py").write_text("c")

        found = list(iter_files(temp_dir, extensions={".py"}, max_depth=0))
        assert [p.name for p in found] == ["a.py"]


class TestReadText:
    """Tests for strict text reads."""

    def test_crlf_preserved(self, temp_dir: Path) -> None:
        path = temp_dir / "crlf.txt"
        path.write_bytes(b"one\r\ntwo\r\n")
        assert read_text(path) == "one\r\ntwo\r\n"

    def test_invalid_utf8(self, temp_dir: Path) -> None:
        path = temp_dir / "latin1.txt"
        path.write_bytes(b"caf\xe9\n")
        with pytest.raises(UnicodeDecodeError):
            read_text(path)

    def test_nul_bytes(self, temp_dir: Path) -> None:
        path = temp_dir / "blob.txt"
        path.write_bytes(b"abc\x00def")
        with pytest.raises(ValueError):
            read_text(path)

    def test_size_limit(self, temp_dir: Path) -> None:
        path = temp_dir / "big.txt"
        path.write_text("x" * 100)
        with pytest.raises(OSError):
            read_text(path, max_bytes=10)


class TestPatterns:
    """Tests for glob and extension helpers."""

    def test_matches_any(self) -> None:
        assert matches_any("tests/unit/test_a.py", ["tests"])
        assert matches_any("src/app.min.js", ["*.min.js"])
        assert matches_any(".github/workflows/ci.yml", [".github/*"])
        assert not matches_any("src/app.py", ["*.js", "docs"])

    def test_normalize_extensions(self) -> None:
        assert normalize_extensions(["py", ".MD", ""]) == frozenset({".py", ".md"})

    def test_detect_language(self) -> None:
        assert detect_language("a/b.py") == "python"
        assert detect_language("x.tsx") == "typescript"
        assert detect_language("README") is None
