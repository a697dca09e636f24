"""Query intent classification."""

import logging
import re

from llm_replace.enrichment.models import IntentType, SearchIntent
from llm_replace.exceptions import ProviderError
from llm_replace.providers.base import LLMProvider
from llm_replace.utils.logging import get_logger, log_with_context
from llm_replace.utils.retry import llm_retry

logger = get_logger(__name__)

# Checked in order; the first intent with a keyword hit wins
INTENT_KEYWORDS: dict[IntentType, tuple[str, ...]] = {
    IntentType.DEBUG: (
        "bug", "error", "exception", "crash", "fail", "failing", "broken",
        "fix", "traceback", "leak", "race",
    ),
    IntentType.REFACTOR: (
        "refactor", "rename", "extract", "move", "cleanup", "clean up",
        "duplicate", "deprecated", "migrate", "replace",
    ),
    IntentType.OPTIMIZE: (
        "optimize", "optimise", "slow", "performance", "fast", "faster",
        "memory", "cache", "latency", "speed",
    ),
    IntentType.LEARN: (
        "example", "examples", "tutorial", "how to", "how do", "usage",
        "learn", "pattern",
    ),
    IntentType.UNDERSTAND: (
        "what", "why", "how", "explain", "where is", "who calls", "purpose",
        "understand",
    ),
}

INTENT_DESCRIPTIONS: dict[IntentType, str] = {
    IntentType.FIND: "Find code related to the query",
    IntentType.REFACTOR: "Locate code to restructure or rename",
    IntentType.OPTIMIZE: "Locate code with performance concerns",
    IntentType.DEBUG: "Locate code related to a failure",
    IntentType.UNDERSTAND: "Explain how the matching code works",
    IntentType.LEARN: "Find examples of a pattern or API",
}

INTENT_ACTIONS: dict[IntentType, tuple[str, ...]] = {
    IntentType.FIND: ("search", "analyze", "suggest"),
    IntentType.REFACTOR: ("search", "preview", "replace"),
    IntentType.OPTIMIZE: ("search", "analyze", "suggest"),
    IntentType.DEBUG: ("search", "analyze", "fix"),
    IntentType.UNDERSTAND: ("search", "explain"),
    IntentType.LEARN: ("search", "explain", "suggest"),
}


def _has_keyword(text: str, keyword: str) -> bool:
    return re.search(rf"(?<![a-z]){re.escape(keyword)}(?![a-z])", text) is not None


class IntentClassifier:
    """Classifies a query into one of the IntentType values.

    Keyword rules always run. When a provider is given, its answer is
    used if it names a known intent; provider failures fall back to the
    keyword result.
    """

    def __init__(self, provider: LLMProvider | None = None) -> None:
        self.provider = provider

    def classify(self, query: str) -> SearchIntent:
        intent = self._classify_keywords(query)
        if self.provider is None:
            return intent

        try:
            answer = self._ask_provider(self.provider, query)
        except ProviderError as e:
            log_with_context(
                logger, logging.WARNING, "Intent classification fell back to keywords",
                error=str(e),
            )
            return intent

        for intent_type in IntentType:
            if _has_keyword(answer, intent_type.value):
                return SearchIntent(
                    type=intent_type,
                    description=INTENT_DESCRIPTIONS[intent_type],
                    confidence=0.85,
                    actions=INTENT_ACTIONS[intent_type],
                )
        return intent

    def _classify_keywords(self, query: str) -> SearchIntent:
        text = query.lower()
        for intent_type, keywords in INTENT_KEYWORDS.items():
            hits = sum(1 for k in keywords if _has_keyword(text, k))
            if hits:
                return SearchIntent(
                    type=intent_type,
                    description=INTENT_DESCRIPTIONS[intent_type],
                    confidence=min(0.95, 0.6 + 0.1 * hits),
                    actions=INTENT_ACTIONS[intent_type],
                )
        return SearchIntent(
            type=IntentType.FIND,
            description=INTENT_DESCRIPTIONS[IntentType.FIND],
            confidence=0.8,
            actions=INTENT_ACTIONS[IntentType.FIND],
        )

    @llm_retry
    def _ask_provider(self, provider: LLMProvider, query: str) -> str:
        options = ", ".join(t.value for t in IntentType)
        prompt = f"""Classify the intent of this code search query.

Query: {query}

Answer with exactly one word from: {options}"""
        response = provider.invoke(prompt)
        return response.content.strip().lower()
