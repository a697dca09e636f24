"""Matcher interface and shared per-file matching logic."""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import lru_cache
from typing import ClassVar

from llm_replace.search.corpus import Corpus
from llm_replace.search.models import (
    Capture,
    FileWarning,
    MatchMode,
    MatchOutcome,
    ScopeKind,
    SearchQuery,
    SearchResult,
)
from llm_replace.search.scanner import SourceText

# Errors a single unreadable file may raise; they never fail a search
FILE_ERRORS = (OSError, UnicodeDecodeError, ValueError)


@lru_cache(maxsize=256)
def compile_pattern(pattern: str, flags: int = 0) -> re.Pattern[str]:
    """Compile and cache a regular expression."""
    return re.compile(pattern, flags)


def word_bounded(pattern: str) -> str:
    """Wrap a pattern so it only matches between non-word characters."""
    return rf"(?<!\w)(?:{pattern})(?!\w)"


@dataclass
class RawMatch:
    """A match location before it is turned into a SearchResult."""

    start: int
    end: int
    relevance: float = 1.0
    confidence: float = 1.0
    groups: tuple[str | None, ...] = ()
    named_groups: dict[str, str | None] = field(default_factory=dict)
    captures: tuple[Capture, ...] = ()


class Matcher(ABC):
    """A search strategy.

    Implementations are deterministic for identical corpus content,
    side-effect free, and never fail a whole search because of one file.
    """

    strategy: ClassVar[MatchMode]

    def validate(self, query: SearchQuery) -> None:
        """Raise input errors for a query before any file is read."""

    @abstractmethod
    def match(self, query: SearchQuery, corpus: Corpus) -> MatchOutcome:
        """Run the query against every file in its scope."""
        ...


class LexicalMatcher(Matcher):
    """Matcher that works on one file's text at a time.

    Subclasses implement ``find``; region, selection and context handling
    is shared here.
    """

    @abstractmethod
    def find(self, query: SearchQuery, text: str) -> Iterator[RawMatch]:
        """Yield raw matches in ``text`` in offset order."""
        ...

    def match_source(self, query: SearchQuery, source: SourceText) -> list[SearchResult]:
        """Match one file and build its results."""
        options = query.options
        bounds: tuple[int, int] | None = None
        selection = query.scope.selection
        if ScopeKind(query.scope.kind) == ScopeKind.SELECTION and selection is not None:
            if selection.file != source.path:
                return []
            bounds = (selection.start_offset, selection.end_offset)

        results: list[SearchResult] = []
        for raw in self.find(query, source.text):
            if bounds is not None and not (bounds[0] <= raw.start and raw.end <= bounds[1]):
                continue
            region = source.region_at(raw.start)
            if not options.allows(region):
                continue
            span = source.span(raw.start, raw.end)
            results.append(
                SearchResult(
                    file=source.path,
                    span=span,
                    matched_text=source.text[raw.start : raw.end],
                    relevance=raw.relevance,
                    confidence=raw.confidence,
                    strategy=self.strategy,
                    groups=raw.groups,
                    named_groups=raw.named_groups,
                    captures=raw.captures,
                    context=source.context(span, options.context_lines)
                    if options.context_lines
                    else (),
                    region=region,
                )
            )
        return results

    def match(self, query: SearchQuery, corpus: Corpus) -> MatchOutcome:
        self.validate(query)
        outcome = MatchOutcome()
        for path in corpus.select_files(query.scope, query.options):
            try:
                source = SourceText(path, corpus.read_file(path))
            except FILE_ERRORS as e:
                outcome.warnings.append(FileWarning(path, str(e)))
                continue
            outcome.results.extend(self.match_source(query, source))
        return outcome
