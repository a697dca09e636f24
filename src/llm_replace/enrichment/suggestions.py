"""Result explanations, semantic suggestions, and result-set metrics."""

import re
from collections import Counter

from llm_replace.enrichment.models import IntentType, SearchIntent, SemanticMetrics
from llm_replace.search.models import MatchMode, Region, SearchResult, Suggestion, SuggestionType

_MARKER_RE = re.compile(r"\b(TODO|FIXME|XXX|HACK)\b")

# Normalisers for the result-set metrics
COMPLEXITY_SCALE = 100
COVERAGE_SCALE = 50
REPEAT_THRESHOLD = 3
LOW_QUALITY = 0.5


def explain_result(result: SearchResult, query: str) -> str:
    """One-line reason a result was returned."""
    text = result.matched_text.strip().splitlines()[0] if result.matched_text.strip() else ""
    if len(text) > 60:
        text = text[:57] + "..."
    base = f'Found "{text}" in {result.file} at line {result.span.start_line}'

    strategy = MatchMode(result.strategy)
    if strategy == MatchMode.SEMANTIC:
        return f"{base} (semantic similarity {result.relevance:.2f} to {query!r})"
    if strategy == MatchMode.FUZZY:
        return f"{base} (fuzzy score {result.relevance:.2f})"
    if strategy == MatchMode.REGEX:
        return f"{base} (regex match)"
    return f"{base} (exact match)"


def compute_metrics(results: list[SearchResult]) -> SemanticMetrics:
    """Normalized complexity, coverage and quality of a result set."""
    if not results:
        return SemanticMetrics()
    quality = sum(r.confidence for r in results) / len(results)
    return SemanticMetrics(
        complexity=round(min(1.0, len(results) / COMPLEXITY_SCALE), 4),
        coverage=round(min(1.0, len(results) / COVERAGE_SCALE), 4),
        quality=round(quality, 4),
    )


class SuggestionGenerator:
    """Heuristic follow-up suggestions for results and whole reports."""

    def for_result(self, result: SearchResult) -> tuple[Suggestion, ...]:
        suggestions: list[Suggestion] = []
        context = "\n".join(result.context) or result.matched_text
        marker = _MARKER_RE.search(context)
        if marker:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.FIX,
                    text=f"Resolve the {marker.group(1)} near line {result.span.start_line}",
                    description="The match sits next to an open work marker.",
                    confidence=0.6,
                    impact="medium",
                    effort="medium",
                )
            )
        if result.region == Region.COMMENT:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.ENHANCEMENT,
                    text="Exclude comments to focus on code",
                    description="This match is inside a comment.",
                    confidence=0.4,
                )
            )
        return tuple(suggestions)

    def for_report(
        self, query: str, intent: SearchIntent, results: list[SearchResult]
    ) -> list[Suggestion]:
        suggestions: list[Suggestion] = []
        intent_type = IntentType(intent.type)

        if not results:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.ENHANCEMENT,
                    text="Broaden the query or try fuzzy matching",
                    description=f"No results for {query!r}.",
                    confidence=0.7,
                )
            )
            return suggestions

        files = {r.file for r in results}
        repeats = [
            text
            for text, count in Counter(r.matched_text.strip() for r in results).most_common()
            if text and count >= REPEAT_THRESHOLD
        ]

        if intent_type == IntentType.REFACTOR and len(files) > 1:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.REPLACEMENT,
                    text=f"Preview a bulk replace across {len(files)} files",
                    description="Use the replace workflow with a dry run first.",
                    confidence=0.8,
                    impact="high",
                    effort="low",
                    automated=True,
                )
            )
        if repeats:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.REFACTOR,
                    text=f"Extract the repeated code {repeats[0][:40]!r}",
                    description="The same text matches in several places.",
                    confidence=0.6,
                    impact="medium",
                    effort="medium",
                )
            )
        if intent_type == IntentType.OPTIMIZE:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.OPTIMIZATION,
                    text="Profile the matching code paths before changing them",
                    description="Performance intent detected.",
                    confidence=0.5,
                    impact="medium",
                    effort="medium",
                )
            )
        if intent_type == IntentType.DEBUG:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.FIX,
                    text=f"Inspect the top match in {results[0].file}",
                    description="Results are ranked by relevance to the failure description.",
                    confidence=0.5,
                    impact="high",
                    effort="medium",
                )
            )

        metrics = compute_metrics(results)
        if metrics.quality < LOW_QUALITY:
            suggestions.append(
                Suggestion(
                    type=SuggestionType.ENHANCEMENT,
                    text="Refine the query; most matches are weak",
                    description=f"Average confidence is {metrics.quality:.2f}.",
                    confidence=0.6,
                )
            )
        return suggestions
