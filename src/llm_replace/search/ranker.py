"""Merging, de-duplication, ordering, and truncation of results."""

from bisect import bisect_left, insort
from collections.abc import Iterable, Sequence

from llm_replace.search.models import MatchMode, SearchResult

DEFAULT_PRIORITY: tuple[MatchMode, ...] = (
    MatchMode.EXACT,
    MatchMode.REGEX,
    MatchMode.FUZZY,
    MatchMode.SEMANTIC,
)


class Ranker:
    """Ranks a complete result set.

    Overlapping spans in the same file are one logical match: the result
    with higher relevance wins, then the one from the higher-priority
    matcher, then the earliest start. Survivors are ordered by relevance,
    confidence, file and start offset, and only then truncated.
    """

    def __init__(self, priority: Sequence[MatchMode | str] = DEFAULT_PRIORITY) -> None:
        self.priority = [MatchMode(p) for p in priority]

    def _priority_rank(self, strategy: MatchMode) -> int:
        try:
            return self.priority.index(MatchMode(strategy))
        except ValueError:
            return len(self.priority)

    def dedupe(self, results: Iterable[SearchResult]) -> list[SearchResult]:
        """Drop results whose span overlaps a preferred result in the same file."""
        preferred = sorted(
            results,
            key=lambda r: (
                -r.relevance,
                self._priority_rank(r.strategy),
                r.span.start_offset,
                r.file,
                r.span.end_offset,
            ),
        )

        # Per file: kept (start, end) intervals, sorted and non-overlapping
        kept: dict[str, list[tuple[int, int]]] = {}
        survivors: list[SearchResult] = []
        for result in preferred:
            intervals = kept.setdefault(result.file, [])
            start, end = result.span.start_offset, result.span.end_offset
            index = bisect_left(intervals, (start, end))
            if index > 0 and intervals[index - 1][1] > start:
                continue
            if index < len(intervals) and (
                intervals[index][0] < end or intervals[index][0] == start
            ):
                continue
            insort(intervals, (start, end))
            survivors.append(result)
        return survivors

    @staticmethod
    def sort(results: Iterable[SearchResult]) -> list[SearchResult]:
        """Order by relevance desc, confidence desc, then file and offset asc."""
        return sorted(
            results,
            key=lambda r: (-r.relevance, -r.confidence, r.file, r.span.start_offset),
        )

    def rank(
        self, results: Iterable[SearchResult], max_results: int | None = None
    ) -> tuple[list[SearchResult], bool]:
        """Dedupe, sort, then truncate.

        Returns:
            The ranked results and whether truncation dropped any.
        """
        ranked = self.sort(self.dedupe(results))
        if max_results is not None and len(ranked) > max_results:
            return ranked[:max_results], True
        return ranked, False
