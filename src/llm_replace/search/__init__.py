"""Multi-strategy search.

This package provides:
- Exact, regex, fuzzy (rapidfuzz) and semantic matchers behind one interface
- A ranker that dedupes overlapping spans across matchers
- A concurrent search engine with timeout and cancellation
- A DuckDB-backed chunk embedding index for semantic search
"""

from llm_replace.search.corpus import Corpus, FileSystemCorpus, InMemoryCorpus
from llm_replace.search.engine import SearchEngine
from llm_replace.search.models import (
    Capture,
    FileWarning,
    MatchMode,
    MatchSpan,
    Region,
    ScopeKind,
    SearchOptions,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SearchScope,
    SemanticStatus,
    Suggestion,
    SuggestionType,
)
from llm_replace.search.ranker import Ranker
from llm_replace.search.semantic import Neighbor, SemanticBackend

__all__ = [
    "Capture",
    "Corpus",
    "FileSystemCorpus",
    "FileWarning",
    "InMemoryCorpus",
    "MatchMode",
    "MatchSpan",
    "Neighbor",
    "Ranker",
    "Region",
    "ScopeKind",
    "SearchEngine",
    "SearchOptions",
    "SearchQuery",
    "SearchResponse",
    "SearchResult",
    "SearchScope",
    "SemanticBackend",
    "SemanticStatus",
    "Suggestion",
    "SuggestionType",
]
