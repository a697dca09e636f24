"""Replace planning: turns a rule and search results into a Preview."""

import logging
from collections.abc import Iterable

from llm_replace.config.schema import ReplaceConfig, RiskConfig
from llm_replace.exceptions import InvalidRuleError, SubstitutionError
from llm_replace.replace.diff import create_diff, diff_info
from llm_replace.replace.edits import apply_edits
from llm_replace.replace.models import (
    FileChange,
    PlannedEdit,
    Preview,
    ReplaceRule,
    RiskLevel,
)
from llm_replace.replace.risk import assess_file_risk, assess_risk, is_sensitive
from llm_replace.replace.substitution import expand_template, preserve_case
from llm_replace.search.base import FILE_ERRORS
from llm_replace.search.corpus import Corpus
from llm_replace.search.models import SearchResult
from llm_replace.search.ranker import Ranker
from llm_replace.utils.hashing import hash_content
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)


class ReplacePlanner:
    """Computes what a replace would do without writing anything.

    Planning the same rule over the same results and corpus content always
    yields an identical Preview.
    """

    def __init__(
        self,
        corpus: Corpus,
        replace_config: ReplaceConfig | None = None,
        risk_config: RiskConfig | None = None,
        ranker: Ranker | None = None,
        diff_context: int = 3,
    ) -> None:
        self.corpus = corpus
        self.config = replace_config or ReplaceConfig()
        self.risk_config = risk_config or RiskConfig()
        self.ranker = ranker or Ranker()
        self.diff_context = diff_context

    def render(self, rule: ReplaceRule, result: SearchResult) -> str:
        """Replacement text for one match.

        Raises:
            SubstitutionError: If the template references a missing group.
        """
        text = rule.replacement
        if rule.uses_captures:
            text = expand_template(text, result.matched_text, result.groups, result.named_groups)
        if rule.options.preserve_case:
            text = preserve_case(result.matched_text, text)
        return text

    def plan(self, rule: ReplaceRule, results: Iterable[SearchResult]) -> Preview:
        """Build a Preview for a rule over search results.

        Args:
            rule: The replace rule.
            results: Matches to rewrite (any order, may overlap).

        Returns:
            Per-file diffs, counts, risk and warnings.

        Raises:
            InvalidRuleError: If the rule's query is empty.
        """
        if not rule.query:
            raise InvalidRuleError("Replace rule has an empty query")

        warnings: list[str] = []
        ranked = self.ranker.sort(self.ranker.dedupe(results))

        limit = rule.options.max_replacements or self.config.max_replacements
        if len(ranked) > limit:
            warnings.append(
                f"Limited to {limit} of {len(ranked)} matches (max_replacements)"
            )
            ranked = ranked[:limit]

        by_file: dict[str, list[SearchResult]] = {}
        for result in ranked:
            by_file.setdefault(result.file, []).append(result)

        changes = [
            self._plan_file(rule, path, sorted(by_file[path], key=lambda r: r.span.start_offset))
            for path in sorted(by_file)
        ]
        applicable = [c for c in changes if c.ok and c.edits]
        total_matches = sum(len(c.edits) for c in applicable)

        if rule.replacement == "" and total_matches:
            warnings.append(
                f"Replacement is empty: {total_matches} match(es) will be deleted"
            )
        for change in applicable:
            if is_sensitive(change.file, self.risk_config):
                warnings.append(f"Sensitive file will be modified: {change.file}")
        for change in changes:
            if change.error:
                warnings.append(f"{change.file}: {change.error}")

        preview = Preview(
            rule=rule,
            total_matches=total_matches,
            total_files=len(applicable),
            risk_level=assess_risk(applicable, rule.replacement, self.risk_config),
            warnings=warnings,
            estimated_time_ms=len(applicable) * self.config.ms_per_file
            + total_matches * self.config.ms_per_match,
            per_file_changes=changes,
        )
        log_with_context(
            logger,
            logging.INFO,
            "Planned replace",
            rule_id=rule.id,
            matches=preview.total_matches,
            files=preview.total_files,
            risk=RiskLevel(preview.risk_level).value,
        )
        return preview

    def _reject(
        self, change: FileChange, rule: ReplaceRule, results: list[SearchResult], error: str
    ) -> FileChange:
        change.error = error
        change.rejected_edits = [
            PlannedEdit(
                span=r.span,
                old_text=r.matched_text,
                new_text=rule.replacement,
                groups=r.groups,
                named_groups=dict(r.named_groups),
                result_id=r.id,
            )
            for r in results
        ]
        return change

    def _plan_file(self, rule: ReplaceRule, path: str, results: list[SearchResult]) -> FileChange:
        change = FileChange(file=path, match_count=len(results))
        try:
            text = self.corpus.read_file(path)
        except FILE_ERRORS as e:
            return self._reject(change, rule, results, f"Unreadable: {e}")

        change.content_hash = hash_content(text)
        edits: list[PlannedEdit] = []
        for result in results:
            start, end = result.span.start_offset, result.span.end_offset
            if text[start:end] != result.matched_text:
                return self._reject(
                    change,
                    rule,
                    results,
                    f"File changed since search (stale match at line {result.span.start_line})",
                )
            try:
                new_text = self.render(rule, result)
            except SubstitutionError as e:
                return self._reject(change, rule, results, str(e))
            edits.append(
                PlannedEdit(
                    span=result.span,
                    old_text=result.matched_text,
                    new_text=new_text,
                    groups=result.groups,
                    named_groups=dict(result.named_groups),
                    result_id=result.id,
                )
            )

        # Edits that change nothing are dropped
        edits = [e for e in edits if e.new_text != e.old_text]
        change.match_count = len(edits)
        change.edits = edits
        if not edits:
            return change

        new_content, _ = apply_edits(text, edits)
        change.new_content_hash = hash_content(new_content)
        change.lines = sorted({e.span.start_line for e in edits})
        change.diff_preview = create_diff(text, new_content, path, self.diff_context)
        change.diff = diff_info(text, new_content)
        change.risk = assess_file_risk(change, rule.replacement, self.risk_config)
        return change
