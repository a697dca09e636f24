"""Fuzzy matching of word windows using rapidfuzz.

The query is split into word tokens; every run of the same number of
consecutive tokens on a line is scored against it with ``fuzz.ratio``.
"""

import re
from collections.abc import Iterator

from rapidfuzz import fuzz

from llm_replace.search.base import LexicalMatcher, RawMatch
from llm_replace.search.models import MatchMode, SearchQuery

_TOKEN_RE = re.compile(r"\w+")


class FuzzyMatcher(LexicalMatcher):
    """Approximate matches scored 0-1 (rapidfuzz similarity / 100)."""

    strategy = MatchMode.FUZZY

    def __init__(self, threshold: float = 0.8) -> None:
        """Initialize fuzzy matcher.

        Args:
            threshold: Minimum similarity (0-1) used when the query's
                options do not set ``fuzzy_threshold``.
        """
        self.threshold = threshold

    def find(self, query: SearchQuery, text: str) -> Iterator[RawMatch]:
        width = len(_TOKEN_RE.findall(query.text))
        if width == 0:
            return

        case_sensitive = query.options.case_sensitive
        needle = query.text if case_sensitive else query.text.lower()
        threshold = query.options.fuzzy_threshold
        if threshold is None:
            threshold = self.threshold
        cutoff = threshold * 100

        line_start = 0
        for line in text.splitlines(keepends=True):
            tokens = [
                (m.start() + line_start, m.end() + line_start)
                for m in _TOKEN_RE.finditer(line)
            ]
            yield from self._best_windows(text, tokens, width, needle, case_sensitive, cutoff)
            line_start += len(line)

    def _best_windows(
        self,
        text: str,
        tokens: list[tuple[int, int]],
        width: int,
        needle: str,
        case_sensitive: bool,
        cutoff: float,
    ) -> Iterator[RawMatch]:
        """Score every window on one line and keep the best non-overlapping ones."""
        candidates: list[tuple[float, int, int]] = []
        for i in range(len(tokens) - width + 1):
            start = tokens[i][0]
            end = tokens[i + width - 1][1]
            window = text[start:end]
            if not case_sensitive:
                window = window.lower()
            score = fuzz.ratio(needle, window, score_cutoff=cutoff)
            if score and score >= cutoff:
                candidates.append((score, start, end))

        if not candidates:
            return

        # Highest score first, then earliest
        candidates.sort(key=lambda c: (-c[0], c[1]))
        accepted: list[tuple[float, int, int]] = []
        for score, start, end in candidates:
            if all(end <= s or start >= e for _, s, e in accepted):
                accepted.append((score, start, end))

        for score, start, end in sorted(accepted, key=lambda c: c[1]):
            relevance = round(score / 100, 4)
            yield RawMatch(start=start, end=end, relevance=relevance, confidence=relevance)
