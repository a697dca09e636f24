"""Semantic enrichment: intents, explanations, suggestions, and query enhancement."""

from llm_replace.enrichment.enhance import QueryEnhancer, case_variants, split_identifier
from llm_replace.enrichment.intent import IntentClassifier
from llm_replace.enrichment.models import (
    EnhancementSuggestion,
    EnhancementType,
    ExplainedResult,
    IntentType,
    QueryEnhancement,
    SearchIntent,
    SemanticMetrics,
    SemanticReport,
)
from llm_replace.enrichment.suggestions import (
    SuggestionGenerator,
    compute_metrics,
    explain_result,
)

__all__ = [
    "EnhancementSuggestion",
    "EnhancementType",
    "ExplainedResult",
    "IntentClassifier",
    "IntentType",
    "QueryEnhancement",
    "QueryEnhancer",
    "SearchIntent",
    "SemanticMetrics",
    "SemanticReport",
    "SuggestionGenerator",
    "case_variants",
    "compute_metrics",
    "explain_result",
    "split_identifier",
]
