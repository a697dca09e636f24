"""Line/column addressing and lexical region classification for source text."""

import re
from bisect import bisect_right
from dataclasses import dataclass
from functools import cached_property

from llm_replace.search.models import MatchSpan, Region
from llm_replace.utils.files import detect_language


@dataclass(frozen=True)
class LexRules:
    """Comment and string delimiters for one language family."""

    line_comments: tuple[str, ...] = ()
    block_comments: tuple[tuple[str, str], ...] = ()
    quotes: tuple[str, ...] = ()
    multiline_quotes: tuple[str, ...] = ()
    triple_quotes: bool = False


_PYTHON = LexRules(line_comments=("#",), quotes=('"', "'"), triple_quotes=True)
_HASH = LexRules(line_comments=("#",), quotes=('"', "'"))
_C_FAMILY = LexRules(
    line_comments=("//",), block_comments=(("/*", "*/"),), quotes=('"', "'")
)
_JS = LexRules(
    line_comments=("//",),
    block_comments=(("/*", "*/"),),
    quotes=('"', "'"),
    multiline_quotes=("`",),
)
_RUST = LexRules(line_comments=("//",), block_comments=(("/*", "*/"),), quotes=('"',))
_PHP = LexRules(
    line_comments=("//", "#"), block_comments=(("/*", "*/"),), quotes=('"', "'")
)
_SQL = LexRules(line_comments=("--",), block_comments=(("/*", "*/"),), quotes=("'", '"'))
_CSS = LexRules(block_comments=(("/*", "*/"),), quotes=('"', "'"))
_SCSS = LexRules(line_comments=("//",), block_comments=(("/*", "*/"),), quotes=('"', "'"))
_MARKUP = LexRules(block_comments=(("<!--", "-->"),))
_INI = LexRules(line_comments=("#", ";"))

LEX_RULES: dict[str, LexRules] = {
    "python": _PYTHON,
    "shell": _HASH,
    "ruby": _HASH,
    "perl": _HASH,
    "r": _HASH,
    "yaml": _HASH,
    "toml": _HASH,
    "ini": _INI,
    "javascript": _JS,
    "typescript": _JS,
    "go": _JS,
    "java": _C_FAMILY,
    "c": _C_FAMILY,
    "cpp": _C_FAMILY,
    "csharp": _C_FAMILY,
    "swift": _C_FAMILY,
    "kotlin": _C_FAMILY,
    "scala": _C_FAMILY,
    "rust": _RUST,
    "php": _PHP,
    "sql": _SQL,
    "css": _CSS,
    "scss": _SCSS,
    "less": _SCSS,
    "html": _MARKUP,
    "xml": _MARKUP,
}


def _string_end(text: str, pos: int, quote: str, multiline: bool) -> int:
    """Return the offset just past a string literal starting before ``pos``.

    Unterminated single-line strings end at the newline.
    """
    n = len(text)
    i = pos
    while i < n:
        c = text[i]
        if c == "\\":
            i += 2
            continue
        if c == quote:
            return i + 1
        if c == "\n" and not multiline:
            return i
        i += 1
    return n


def classify_regions(text: str, rules: LexRules) -> list[tuple[int, int, Region]]:
    """Find comment and string regions in ``text``.

    Args:
        text: Source text.
        rules: Delimiters for the text's language.

    Returns:
        Non-overlapping ``(start, end, region)`` triples in offset order.
        Everything outside them is code.
    """
    kinds: dict[str, str] = {}
    closers: dict[str, str] = {}
    if rules.triple_quotes:
        kinds['"""'] = "triple"
        kinds["'''"] = "triple"
    for opener, closer in rules.block_comments:
        kinds[opener] = "block"
        closers[opener] = closer
    for prefix in rules.line_comments:
        kinds[prefix] = "line"
    for quote in rules.quotes:
        kinds[quote] = "quote"
    for quote in rules.multiline_quotes:
        kinds[quote] = "multiline"

    if not kinds:
        return []

    # Longest tokens first so '"""' wins over '"' and '/*' over '/'
    pattern = re.compile(
        "|".join(re.escape(t) for t in sorted(kinds, key=len, reverse=True))
    )

    regions: list[tuple[int, int, Region]] = []
    pos = 0
    n = len(text)
    while pos < n:
        m = pattern.search(text, pos)
        if m is None:
            break
        token = m.group()
        start = m.start()
        kind = kinds[token]

        if kind == "line":
            end = text.find("\n", start)
            end = n if end == -1 else end
            region = Region.COMMENT
        elif kind == "block":
            closer = closers[token]
            idx = text.find(closer, m.end())
            end = n if idx == -1 else idx + len(closer)
            region = Region.COMMENT
        elif kind == "triple":
            idx = text.find(token, m.end())
            end = n if idx == -1 else idx + len(token)
            region = Region.STRING
        else:
            end = _string_end(text, m.end(), token, multiline=kind == "multiline")
            region = Region.STRING

        regions.append((start, end, region))
        pos = max(end, start + 1)

    return regions


class SourceText:
    """One file's decoded text with offset to line/column addressing."""

    def __init__(self, path: str, text: str) -> None:
        self.path = path
        self.text = text
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    @property
    def language(self) -> str | None:
        return detect_language(self.path)

    def position(self, offset: int) -> tuple[int, int]:
        """Convert an offset to a 1-based ``(line, column)``."""
        line_index = bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1

    def line_offset(self, line: int) -> int:
        """Offset of the first character of a 1-based line."""
        return self._line_starts[line - 1]

    def span(self, start: int, end: int) -> MatchSpan:
        """Build a MatchSpan for ``text[start:end]``."""
        start_line, start_col = self.position(start)
        end_line, end_col = self.position(end)
        return MatchSpan(
            file=self.path,
            start_offset=start,
            end_offset=end,
            start_line=start_line,
            start_col=start_col,
            end_line=end_line,
            end_col=end_col,
        )

    def line_text(self, line: int) -> str:
        """Text of a 1-based line without its line terminator."""
        start = self._line_starts[line - 1]
        end = self._line_starts[line] if line < len(self._line_starts) else len(self.text)
        return self.text[start:end].rstrip("\r\n")

    def context(self, span: MatchSpan, lines: int) -> tuple[str, ...]:
        """Lines around a span, including the span's own lines."""
        first = max(1, span.start_line - lines)
        last = min(self.line_count, span.end_line + lines)
        return tuple(self.line_text(n) for n in range(first, last + 1))

    @cached_property
    def regions(self) -> list[tuple[int, int, Region]]:
        """Comment and string regions (empty for unknown languages)."""
        rules = LEX_RULES.get(self.language or "")
        if rules is None:
            return []
        return classify_regions(self.text, rules)

    @cached_property
    def _region_starts(self) -> list[int]:
        return [start for start, _, _ in self.regions]

    def region_at(self, offset: int) -> Region:
        """Region containing ``offset``."""
        index = bisect_right(self._region_starts, offset) - 1
        if index >= 0:
            start, end, region = self.regions[index]
            if start <= offset < end:
                return region
        return Region.CODE
