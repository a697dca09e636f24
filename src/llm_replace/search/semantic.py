"""Semantic matching against a vector similarity backend.

The matcher only consumes the backend contract (``embed`` and
``nearest_neighbors``); ``llm_replace.search.index.VectorIndex`` is the
bundled DuckDB implementation.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from llm_replace.search.base import FILE_ERRORS, Matcher
from llm_replace.search.corpus import Corpus
from llm_replace.search.models import (
    FileWarning,
    MatchMode,
    MatchOutcome,
    ScopeKind,
    SearchQuery,
    SearchResult,
    SemanticStatus,
)
from llm_replace.search.scanner import SourceText
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


@dataclass(frozen=True)
class Neighbor:
    """One nearest-neighbor hit from a semantic backend."""

    file: str
    start_offset: int
    end_offset: int
    score: float
    certainty: float | None = None


class SemanticBackend(ABC):
    """Similarity index consumed by the semantic matcher."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a query text.

        Raises:
            SemanticBackendUnavailable: If the backend cannot serve requests.
        """
        ...

    @abstractmethod
    def nearest_neighbors(self, vector: list[float], k: int) -> list[Neighbor]:
        """Return up to ``k`` indexed spans most similar to ``vector``."""
        ...


def cosine_similarity(vec1: list[float], vec2: list[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Returns:
        Similarity in [-1, 1]; 0.0 for empty, mismatched, or zero vectors.
    """
    if not vec1 or not vec2 or len(vec1) != len(vec2):
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec1, vec2, strict=True))
    norm1 = math.sqrt(sum(a * a for a in vec1))
    norm2 = math.sqrt(sum(b * b for b in vec2))

    if norm1 == 0 or norm2 == 0:
        return 0.0

    return dot_product / (norm1 * norm2)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class SemanticMatcher(Matcher):
    """Matches spans whose embeddings are close to the query's.

    Backend failures never escape: the outcome is empty with
    ``backend_status=unavailable``.
    """

    strategy = MatchMode.SEMANTIC

    def __init__(
        self,
        backend: SemanticBackend | None,
        min_score: float = 0.5,
        top_k: int = 50,
    ) -> None:
        """Initialize semantic matcher.

        Args:
            backend: Similarity backend (None means unavailable).
            min_score: Minimum relevance (0-1) to include.
            top_k: Neighbors requested when the query does not set
                ``semantic_top_k``.
        """
        self.backend = backend
        self.min_score = min_score
        self.top_k = top_k

    def match(self, query: SearchQuery, corpus: Corpus) -> MatchOutcome:
        if self.backend is None:
            return MatchOutcome(backend_status=SemanticStatus.UNAVAILABLE)

        files = set(corpus.select_files(query.scope, query.options))
        k = query.options.semantic_top_k or self.top_k

        try:
            vector = self.backend.embed(query.text)
            neighbors = self.backend.nearest_neighbors(vector, k)
        except Exception as e:
            # Any backend fault degrades to "no semantic results"
            log_with_context(
                logger,
                logging.WARNING,
                "Semantic backend unavailable",
                query_id=query.id,
                error=str(e),
            )
            return MatchOutcome(backend_status=SemanticStatus.UNAVAILABLE)

        outcome = MatchOutcome(backend_status=SemanticStatus.OK)
        sources: dict[str, SourceText | None] = {}

        for neighbor in neighbors:
            if neighbor.file not in files:
                continue
            relevance = _clamp(neighbor.score)
            if relevance < self.min_score:
                continue

            if neighbor.file not in sources:
                try:
                    sources[neighbor.file] = SourceText(
                        neighbor.file, corpus.read_file(neighbor.file)
                    )
                except FILE_ERRORS as e:
                    sources[neighbor.file] = None
                    outcome.warnings.append(FileWarning(neighbor.file, str(e)))
            source = sources[neighbor.file]
            if source is None:
                continue

            result = self._build_result(query, source, neighbor, relevance)
            if result is not None:
                outcome.results.append(result)

        return outcome

    def _build_result(
        self,
        query: SearchQuery,
        source: SourceText,
        neighbor: Neighbor,
        relevance: float,
    ) -> SearchResult | None:
        # Offsets may be stale if the file changed after indexing
        start = max(0, min(neighbor.start_offset, len(source.text)))
        end = max(start, min(neighbor.end_offset, len(source.text)))
        if start == end:
            return None

        selection = query.scope.selection
        if ScopeKind(query.scope.kind) == ScopeKind.SELECTION and selection is not None:
            start = max(start, selection.start_offset)
            end = min(end, selection.end_offset)
            if start >= end:
                return None

        region = source.region_at(start)
        if not query.options.allows(region):
            return None

        span = source.span(start, end)
        certainty = neighbor.certainty
        return SearchResult(
            file=source.path,
            span=span,
            matched_text=source.text[start:end],
            relevance=round(relevance, 4),
            confidence=round(_clamp(certainty) if certainty is not None else relevance, 4),
            strategy=self.strategy,
            context=source.context(span, query.options.context_lines)
            if query.options.context_lines
            else (),
            region=region,
        )
