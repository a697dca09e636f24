"""Query enhancement: identifier variants, refinements, and LLM rewrites."""

import logging
import re

from llm_replace.enrichment.models import (
    EnhancementSuggestion,
    EnhancementType,
    QueryEnhancement,
)
from llm_replace.exceptions import ProviderError
from llm_replace.providers.base import LLMProvider
from llm_replace.utils.hashing import hash_fields
from llm_replace.utils.logging import get_logger, log_with_context
from llm_replace.utils.retry import llm_retry

logger = get_logger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")
_PART_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z]|[0-9]|$)|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")

MAX_VARIANTS = 5
SHORT_QUERY = 3


def split_identifier(text: str) -> list[str]:
    """Split an identifier or phrase into lowercase words.

    >>> split_identifier("parseHTTPResponse")
    ['parse', 'http', 'response']
    """
    words: list[str] = []
    for chunk in re.split(r"[\s_\-]+", text.strip()):
        words.extend(part.lower() for part in _PART_RE.findall(chunk))
    return words


def case_variants(words: list[str]) -> dict[str, str]:
    """The common spellings of a multi-word identifier, keyed by style."""
    if not words:
        return {}
    return {
        "snake_case": "_".join(words),
        "camelCase": words[0] + "".join(w.capitalize() for w in words[1:]),
        "PascalCase": "".join(w.capitalize() for w in words),
        "kebab-case": "-".join(words),
        "CONSTANT_CASE": "_".join(words).upper(),
    }


class QueryEnhancer:
    """Suggests better queries.

    Without a provider the enhancement is rule-based. With a provider
    the enhanced query is the model's rewrite; a failing provider falls
    back to the rule-based result.
    """

    def __init__(self, provider: LLMProvider | None = None) -> None:
        self.provider = provider

    def enhance(self, query: str) -> QueryEnhancement:
        normalized = " ".join(query.split())
        suggestions = self._rule_suggestions(normalized)
        enhanced = normalized
        model: str | None = None
        confidence = 0.6

        if self.provider is not None:
            try:
                rewrite = self._rewrite(self.provider, normalized)
            except ProviderError as e:
                log_with_context(
                    logger, logging.WARNING, "Query rewrite fell back to rules", error=str(e)
                )
                rewrite = None
            if rewrite and rewrite != normalized:
                enhanced = rewrite
                model = self.provider.model_name
                confidence = 0.85
                suggestions.insert(
                    0,
                    EnhancementSuggestion(
                        type=EnhancementType.ALTERNATIVE,
                        text=rewrite,
                        description="Model rewrite of the query",
                        confidence=0.8,
                        impact="medium",
                    ),
                )

        return QueryEnhancement(
            id=hash_fields("enh", query=query, model=model),
            query=query,
            enhanced_query=enhanced,
            suggestions=suggestions,
            model=model,
            confidence=confidence,
        )

    def _rule_suggestions(self, query: str) -> list[EnhancementSuggestion]:
        suggestions: list[EnhancementSuggestion] = []
        if not query:
            return suggestions

        words = split_identifier(query)
        is_identifier = _IDENTIFIER_RE.match(query) is not None

        if len(words) > 1 and (is_identifier or len(words) <= 4):
            variants = [v for v in case_variants(words).items() if v[1] != query]
            for style, variant in variants[:MAX_VARIANTS]:
                suggestions.append(
                    EnhancementSuggestion(
                        type=EnhancementType.EXPAND,
                        text=variant,
                        description=f"Also match the {style} spelling",
                        confidence=0.7,
                        impact="medium",
                    )
                )
            spellings = sorted({query, *(v for _, v in variants)}, key=lambda s: (-len(s), s))
            suggestions.append(
                EnhancementSuggestion(
                    type=EnhancementType.OPTIMIZE,
                    text="(?:" + "|".join(re.escape(s) for s in spellings) + ")",
                    description="Match every spelling in one regex pass",
                    confidence=0.6,
                    impact="medium",
                )
            )

        if is_identifier:
            suggestions.append(
                EnhancementSuggestion(
                    type=EnhancementType.REFINE,
                    text=rf"\b{re.escape(query)}\b",
                    description="Match whole words only",
                    confidence=0.75,
                    impact="low",
                )
            )

        if len(query) < SHORT_QUERY or (len(words) == 1 and not is_identifier):
            suggestions.append(
                EnhancementSuggestion(
                    type=EnhancementType.CLARIFY,
                    text=f"{query} <more context>",
                    description="Short queries match broadly; add surrounding words",
                    confidence=0.5,
                    impact="low",
                )
            )
        return suggestions

    @llm_retry
    def _rewrite(self, provider: LLMProvider, query: str) -> str | None:
        prompt = f"""Rewrite this code search query so it finds the intended code more precisely.

Query: {query}

Reply with only the rewritten query on one line."""
        response = provider.invoke(prompt)
        for line in response.content.splitlines():
            line = line.strip().strip("`\"'")
            if line:
                return line
        return None
