"""Data model for semantic reports and query enhancements."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from llm_replace.search.models import (
    SearchResult,
    SemanticStatus,
    Suggestion,
    SuggestionType,
)


class IntentType(str, Enum):
    """What a user is trying to accomplish with a query."""

    FIND = "find"
    REFACTOR = "refactor"
    OPTIMIZE = "optimize"
    DEBUG = "debug"
    UNDERSTAND = "understand"
    LEARN = "learn"


class EnhancementType(str, Enum):
    """Kinds of query enhancement suggestions."""

    EXPAND = "expand"
    REFINE = "refine"
    OPTIMIZE = "optimize"
    CLARIFY = "clarify"
    ALTERNATIVE = "alternative"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _suggestion_dict(s: Suggestion) -> dict[str, Any]:
    return {**asdict(s), "type": SuggestionType(s.type).value}


@dataclass(frozen=True)
class SearchIntent:
    """Classified intent of a query."""

    type: IntentType
    description: str
    confidence: float
    actions: tuple[str, ...] = ()


@dataclass(frozen=True)
class SemanticMetrics:
    """Coarse quality indicators for a result set, each in [0, 1]."""

    complexity: float = 0.0
    coverage: float = 0.0
    quality: float = 0.0


@dataclass(frozen=True)
class ExplainedResult:
    """A search result with a human-readable reason it was returned."""

    result: SearchResult
    explanation: str
    related: tuple[str, ...] = ()


@dataclass
class SemanticReport:
    """Output of ``semantic_search``: intent, explained results, suggestions."""

    id: str
    query: str
    intent: SearchIntent
    results: list[ExplainedResult] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)
    metrics: SemanticMetrics = field(default_factory=SemanticMetrics)
    semantic_status: SemanticStatus = SemanticStatus.NOT_REQUESTED
    created_at: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "id": self.id,
            "query": self.query,
            "intent": {
                "type": IntentType(self.intent.type).value,
                "description": self.intent.description,
                "confidence": self.intent.confidence,
                "actions": list(self.intent.actions),
            },
            "results": [
                {
                    **r.result.to_dict(),
                    "explanation": r.explanation,
                    "related": list(r.related),
                }
                for r in self.results
            ],
            "suggestions": [_suggestion_dict(s) for s in self.suggestions],
            "metrics": asdict(self.metrics),
            "semantic_status": SemanticStatus(self.semantic_status).value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class EnhancementSuggestion:
    """One proposed rewrite of a query."""

    type: EnhancementType
    text: str
    description: str
    confidence: float = 0.5
    impact: str = "low"


@dataclass
class QueryEnhancement:
    """Output of ``enhance_search``."""

    id: str
    query: str
    enhanced_query: str
    suggestions: list[EnhancementSuggestion] = field(default_factory=list)
    model: str | None = None
    confidence: float = 0.0
    created_at: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "id": self.id,
            "query": self.query,
            "enhanced_query": self.enhanced_query,
            "suggestions": [
                {**asdict(s), "type": EnhancementType(s.type).value} for s in self.suggestions
            ],
            "model": self.model,
            "confidence": self.confidence,
            "created_at": self.created_at.isoformat(),
        }
