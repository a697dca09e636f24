"""Literal text matching."""

import re
from collections.abc import Iterator

from llm_replace.search.base import LexicalMatcher, RawMatch, compile_pattern, word_bounded
from llm_replace.search.models import MatchMode, SearchQuery


def literal_pattern(text: str, *, case_sensitive: bool, whole_word: bool) -> re.Pattern[str]:
    """Compile a literal search string honoring case and whole-word options."""
    pattern = re.escape(text)
    if whole_word:
        pattern = word_bounded(pattern)
    return compile_pattern(pattern, 0 if case_sensitive else re.IGNORECASE)


class ExactMatcher(LexicalMatcher):
    """Literal matches; relevance and confidence are always 1.0.

    An empty query matches nothing.
    """

    strategy = MatchMode.EXACT

    def find(self, query: SearchQuery, text: str) -> Iterator[RawMatch]:
        if not query.text:
            return
        pattern = literal_pattern(
            query.text,
            case_sensitive=query.options.case_sensitive,
            whole_word=query.options.whole_word,
        )
        for m in pattern.finditer(text):
            yield RawMatch(start=m.start(), end=m.end())
