"""Unit tests for source addressing, region classification, and the regex guard."""

import re

import pytest

from llm_replace.exceptions import InvalidPatternError, PatternTooComplexError
from llm_replace.search.models import Region
from llm_replace.search.regex_guard import (
    DEFAULT_STEP_BUDGET,
    check_complexity,
    estimate_steps,
)
from llm_replace.search.scanner import LEX_RULES, SourceText, classify_regions


class TestSourceText:
    """Tests for offset to line/column conversion."""

    def test_position(self) -> None:
        """Test 1-based lines and columns."""
        source = SourceText("a.txt", "ab\ncd\n")
        assert source.position(0) == (1, 1)
        assert source.position(3) == (2, 1)
        assert source.position(4) == (2, 2)

    def test_span_end_is_exclusive(self) -> None:
        """Test a span's end addresses the position after the last character."""
        source = SourceText("a.txt", "hello\nworld")
        span = source.span(6, 11)
        assert (span.start_line, span.start_col) == (2, 1)
        assert (span.end_line, span.end_col) == (2, 6)
        assert span.length == 5

    def test_crlf_offsets(self) -> None:
        """Test CRLF text keeps offsets aligned with the raw characters."""
        source = SourceText("a.txt", "one\r\ntwo\r\n")
        assert source.position(5) == (2, 1)
        assert source.line_text(1) == "one"
        assert source.line_text(2) == "two"

    def test_line_count(self) -> None:
        """Test the line count includes a trailing empty line."""
        assert SourceText("a.txt", "a\nb").line_count == 2
        assert SourceText("a.txt", "a\nb\n").line_count == 3


class TestRegions:
    """Tests for comment and string detection."""

    def test_python_regions(self) -> None:
        """Test comments, strings and docstrings in Python."""
        text = 'x = "a # b"  # note\n"""doc\nstring"""\n'
        source = SourceText("m.py", text)

        assert source.region_at(0) == Region.CODE
        assert source.region_at(text.index("a #")) == Region.STRING
        assert source.region_at(text.index("note")) == Region.COMMENT
        assert source.region_at(text.index("string")) == Region.STRING

    def test_c_family_block_comment(self) -> None:
        """Test block comments span lines."""
        text = "int a; /* one\ntwo */ int b;"
        source = SourceText("x.c", text)
        assert source.region_at(text.index("two")) == Region.COMMENT
        assert source.region_at(text.index("int b")) == Region.CODE

    def test_escaped_quote(self) -> None:
        """Test escaped quotes do not end a string."""
        regions = classify_regions(r'"a\"b" c', LEX_RULES["javascript"])
        assert regions == [(0, 6, Region.STRING)]

    def test_unknown_language_is_all_code(self) -> None:
        """Test files without lexical rules are treated as code."""
        source = SourceText("notes.unknown", "# not a comment")
        assert source.regions == []
        assert source.region_at(2) == Region.CODE


class TestRegexGuard:
    """Tests for the static backtracking estimate."""

    def test_literal_is_linear(self) -> None:
        """Test a literal costs about one step per character."""
        assert estimate_steps("hello", 0, 1000) == 1000

    def test_single_repeat_is_within_budget(self) -> None:
        """Test a single unbounded repeat passes the default budget."""
        assert check_complexity(r"\w+", re.MULTILINE) <= 1_000_000

    def test_nested_repeat_is_exponential(self) -> None:
        """Test nested unbounded repeats are rejected."""
        with pytest.raises(PatternTooComplexError):
            check_complexity(r"(a+)+b")

    def test_adjacent_overlapping_repeats(self) -> None:
        """Test overlapping adjacent repeats are polynomial."""
        assert estimate_steps(r"\d+\d+", 0, 1000) == 1000.0**3

    @pytest.mark.parametrize(
        "pattern", [r"\w+\s*\w+", r".*\w+", r"(\w+)\s*=\s*(\w+)", r"\s*(\w+)\s*$"]
    )
    def test_common_patterns_pass_default_budget(self, pattern: str) -> None:
        assert check_complexity(pattern, re.MULTILINE) <= DEFAULT_STEP_BUDGET

    def test_three_overlapping_repeats_rejected(self) -> None:
        with pytest.raises(PatternTooComplexError):
            check_complexity(r"\d+\d+\d+")

    def test_disjoint_adjacent_repeats_are_cheap(self) -> None:
        """Test repeats over disjoint sets do not compound."""
        assert estimate_steps(r"[a-z]+[0-9]+", 0, 1000) == 1000.0**2

    def test_possessive_repeat_not_counted(self) -> None:
        """Test possessive repeats never backtrack."""
        assert estimate_steps(r"(?:a+)++b", 0, 1000) == 1000

    def test_invalid_pattern(self) -> None:
        """Test unparsable patterns raise InvalidPatternError."""
        with pytest.raises(InvalidPatternError):
            estimate_steps("(", 0, 1000)
