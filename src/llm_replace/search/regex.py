"""Regular expression matching with a backtracking guard."""

import re
from collections.abc import Iterator

from llm_replace.exceptions import InvalidPatternError
from llm_replace.search.base import LexicalMatcher, RawMatch, compile_pattern, word_bounded
from llm_replace.search.models import Capture, MatchMode, SearchQuery
from llm_replace.search.regex_guard import DEFAULT_STEP_BUDGET, check_complexity


class RegexMatcher(LexicalMatcher):
    """Regex matches with groups kept for ``$1``-style substitution.

    Patterns are compiled with ``re.MULTILINE`` so ``^``/``$`` anchor at
    line boundaries. Zero-width matches are skipped.
    """

    strategy = MatchMode.REGEX

    def __init__(
        self, step_budget: int = DEFAULT_STEP_BUDGET, reference_length: int = 1000
    ) -> None:
        self.step_budget = step_budget
        self.reference_length = reference_length

    def compile(self, query: SearchQuery) -> re.Pattern[str]:
        """Compile the query's pattern.

        Raises:
            InvalidPatternError: If the pattern is not a valid regex.
            PatternTooComplexError: If its backtracking estimate is over budget.
        """
        flags = re.MULTILINE
        if not query.options.case_sensitive:
            flags |= re.IGNORECASE

        pattern = query.text
        if not pattern:
            raise InvalidPatternError("Empty regex pattern")
        try:
            compile_pattern(pattern, flags)
        except re.error as e:
            raise InvalidPatternError(f"Invalid regex {pattern!r}: {e}") from e

        check_complexity(
            pattern,
            flags,
            step_budget=self.step_budget,
            input_length=self.reference_length,
        )

        if query.options.whole_word:
            pattern = word_bounded(pattern)
        return compile_pattern(pattern, flags)

    def validate(self, query: SearchQuery) -> None:
        self.compile(query)

    def find(self, query: SearchQuery, text: str) -> Iterator[RawMatch]:
        pattern = self.compile(query)
        names = {index: name for name, index in pattern.groupindex.items()}

        for m in pattern.finditer(text):
            if m.start() == m.end():
                continue
            captures = tuple(
                Capture(
                    group=i,
                    text=m.group(i),
                    start=m.start(i),
                    end=m.end(i),
                    name=names.get(i),
                )
                for i in range(1, pattern.groups + 1)
                if m.start(i) != -1
            )
            yield RawMatch(
                start=m.start(),
                end=m.end(),
                groups=m.groups(),
                named_groups=m.groupdict(),
                captures=captures,
            )
