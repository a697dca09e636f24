"""Service facade: the public search and replace operations."""

import dataclasses
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from llm_replace.cancellation import CancellationToken
from llm_replace.config.defaults import get_backup_dir
from llm_replace.config.schema import LLMReplaceConfig, ProviderType
from llm_replace.enrichment import (
    ExplainedResult,
    IntentClassifier,
    QueryEnhancement,
    QueryEnhancer,
    SemanticReport,
    SuggestionGenerator,
    compute_metrics,
    explain_result,
)
from llm_replace.exceptions import (
    IndexingError,
    InvalidRuleError,
    LLMReplaceError,
    ProviderError,
    SemanticBackendUnavailable,
)
from llm_replace.providers.base import LLMProvider
from llm_replace.providers.registry import ProviderRegistry
from llm_replace.replace.backup import BackupStore
from llm_replace.replace.executor import ReplaceExecutor
from llm_replace.replace.interactive import ConfirmEachSession
from llm_replace.replace.models import (
    OperationStatus,
    Preview,
    ReplaceOperation,
    ReplaceResult,
    ReplaceRule,
)
from llm_replace.replace.planner import ReplacePlanner
from llm_replace.search.corpus import Corpus, FileSystemCorpus
from llm_replace.search.engine import SearchEngine
from llm_replace.search.index import IndexStats, VectorIndex
from llm_replace.search.models import (
    MatchMode,
    SearchOptions,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SearchScope,
)
from llm_replace.search.semantic import SemanticBackend
from llm_replace.session import SearchSession
from llm_replace.utils.hashing import hash_fields
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

_SEMANTIC_MODES = (MatchMode.SEMANTIC, MatchMode.AI_ENHANCED)


class SearchReplaceService:
    """Wires a corpus, providers and configuration into the public operations.

    Example:
        service = SearchReplaceService(FileSystemCorpus("."))
        response = service.search(SearchQuery("old_name"))
        rule = ReplaceRule("old_name", "new_name")
        preview = service.plan_replace(rule, response.results)
        results = service.execute_replace(rule, preview)
    """

    def __init__(
        self,
        corpus: Corpus,
        config: LLMReplaceConfig | None = None,
        provider: LLMProvider | None = None,
        semantic_backend: SemanticBackend | None = None,
        session: SearchSession | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            corpus: Files to search and modify.
            config: Configuration (defaults if None).
            provider: LLM provider for enrichment and, when no backend
                is given, for building a vector index.
            semantic_backend: Similarity backend for semantic matching.
            session: Store for queries, previews and operations.
        """
        self.corpus = corpus
        self.config = config or LLMReplaceConfig()
        self.provider = provider
        self.session = session or SearchSession()

        if semantic_backend is None and provider is not None and provider.supports_embeddings:
            index_config = self.config.index
            semantic_backend = VectorIndex(
                provider,
                db_path=index_config.path,
                chunk_size=index_config.chunk_size,
                chunk_overlap=index_config.chunk_overlap,
                batch_size=index_config.batch_size,
            )
        self.semantic_backend = semantic_backend

        self.engine = SearchEngine(corpus, self.config.search, semantic_backend)
        self.planner = ReplacePlanner(
            corpus,
            self.config.replace,
            self.config.risk,
            ranker=self.engine.ranker,
            diff_context=self.config.output.diff_context_lines,
        )
        self.backups = BackupStore(get_backup_dir(self.config.replace.backup_dir))
        self.executor = ReplaceExecutor(corpus, self.config.replace, self.backups)

        self.intents = IntentClassifier(provider)
        self.suggestions = SuggestionGenerator()
        self.enhancer = QueryEnhancer(provider)

    @classmethod
    def from_config(
        cls,
        config: LLMReplaceConfig,
        root: Path | str = ".",
        provider_type: ProviderType | str | None = None,
        use_provider: bool = True,
    ) -> "SearchReplaceService":
        """Build a service over a directory using the configured provider.

        A provider that cannot be created is logged and skipped; semantic
        matching then reports ``unavailable``.
        """
        corpus = FileSystemCorpus(root, max_file_size=config.search.max_file_size)
        provider: LLMProvider | None = None
        if use_provider:
            try:
                provider = ProviderRegistry.from_config(config, provider_type)
            except ProviderError as e:
                log_with_context(
                    logger, logging.WARNING, "Provider unavailable", error=e.user_message
                )
        return cls(corpus, config, provider=provider)

    def close(self) -> None:
        if isinstance(self.semantic_backend, VectorIndex):
            self.semantic_backend.close()

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(
        self, query: SearchQuery, cancel: CancellationToken | None = None
    ) -> SearchResponse:
        """Run a query and record it in the session.

        Semantic queries first bring the vector index up to date when
        ``index.auto_index`` is set. Indexing failures leave semantic
        matching to report ``unavailable``.

        Raises:
            InvalidQueryError, InvalidPatternError, PatternTooComplexError,
            InvalidScopeError: For bad input.
        """
        mode = MatchMode(query.mode)
        if mode in _SEMANTIC_MODES and self.config.index.auto_index:
            self._refresh_index(query, cancel)

        response = self.engine.search(query, cancel)
        if mode == MatchMode.AI_ENHANCED:
            response.results = [
                r.with_suggestions(self.suggestions.for_result(r)) for r in response.results
            ]
        self.session.record_response(response)
        return response

    def _refresh_index(self, query: SearchQuery, cancel: CancellationToken | None) -> None:
        if not isinstance(self.semantic_backend, VectorIndex):
            return
        try:
            self.semantic_backend.index_corpus(self.corpus, query.scope, query.options, cancel)
        except IndexingError as e:
            log_with_context(
                logger, logging.WARNING, "Index refresh failed", query_id=query.id, error=str(e)
            )

    def index(
        self,
        scope: SearchScope | None = None,
        options: SearchOptions | None = None,
        cancel: CancellationToken | None = None,
    ) -> IndexStats:
        """Index a scope for semantic search.

        Raises:
            SemanticBackendUnavailable: If no vector index is configured.
            IndexingError: If the embedding provider fails.
        """
        if not isinstance(self.semantic_backend, VectorIndex):
            raise SemanticBackendUnavailable("No embedding provider configured for indexing")
        return self.semantic_backend.index_corpus(self.corpus, scope, options, cancel)

    def index_stats(self) -> dict[str, Any]:
        if not isinstance(self.semantic_backend, VectorIndex):
            raise SemanticBackendUnavailable("No embedding provider configured for indexing")
        return self.semantic_backend.get_stats()

    def semantic_search(
        self,
        text: str,
        scope: SearchScope | None = None,
        options: SearchOptions | None = None,
        cancel: CancellationToken | None = None,
    ) -> SemanticReport:
        """Semantic search with intent, explanations, suggestions and metrics."""
        scope = scope or SearchScope()
        intent = self.intents.classify(text)
        query = SearchQuery(
            text=text,
            mode=MatchMode.SEMANTIC,
            options=options or SearchOptions(),
            scope=scope,
        )
        response = self.search(query, cancel)

        report = SemanticReport(
            id=hash_fields("sem", query=text, scope=dataclasses.asdict(scope)),
            query=text,
            intent=intent,
            results=[
                ExplainedResult(
                    result=r.with_suggestions(self.suggestions.for_result(r)),
                    explanation=explain_result(r, text),
                )
                for r in response.results
            ],
            suggestions=self.suggestions.for_report(text, intent, response.results),
            metrics=compute_metrics(response.results),
            semantic_status=response.semantic_status,
        )
        self.session.record_report(report)
        return report

    def enhance_search(self, text: str) -> QueryEnhancement:
        """Suggest better versions of a query."""
        enhancement = self.enhancer.enhance(text)
        self.session.record_enhancement(enhancement)
        return enhancement

    # -------------------------------------------------------------------------
    # Replace
    # -------------------------------------------------------------------------

    def plan_replace(self, rule: ReplaceRule, results: list[SearchResult]) -> Preview:
        """Build a preview without writing anything."""
        preview = self.planner.plan(rule, results)
        self.session.record_preview(preview)
        return preview

    def execute_replace(
        self,
        rule: ReplaceRule,
        preview: Preview,
        cancel: CancellationToken | None = None,
    ) -> list[ReplaceResult] | ConfirmEachSession:
        """Apply a preview.

        Returns:
            Per-edit results, or a ConfirmEachSession to drive when the
            rule has ``confirm_each`` set.

        Raises:
            InvalidRuleError: If the rule is a dry run or the preview was
                planned for a different rule.
            OverlappingSpansError: If the preview's edits overlap.
        """
        if rule.options.dry_run:
            raise InvalidRuleError("Dry-run rules cannot be executed")
        if preview.rule.id != rule.id:
            raise InvalidRuleError("Preview was planned for a different rule")

        self._backup(rule, preview)
        if rule.options.confirm_each:
            return ConfirmEachSession(self.executor, preview, cancel)
        return self.executor.execute(preview, cancel)

    def _backup(self, rule: ReplaceRule, preview: Preview) -> str | None:
        if not (rule.options.backup or self.config.replace.backup):
            return None
        if not preview.applicable_changes:
            return None
        backup_id = self.executor.create_backup(preview)
        log_with_context(logger, logging.INFO, "Created backup", backup_id=backup_id)
        return backup_id

    def preview_rule(
        self,
        rule: ReplaceRule,
        scope: SearchScope | None = None,
        options: SearchOptions | None = None,
        cancel: CancellationToken | None = None,
    ) -> Preview:
        """Search for a rule's matches and plan them."""
        # One extra result lets the planner see that the limit was hit
        limit = rule.options.max_replacements or self.config.replace.max_replacements
        base = dataclasses.replace(options or SearchOptions(), max_results=limit + 1)
        response = self.search(rule.to_search_query(scope, base), cancel)
        return self.plan_replace(rule, response.results)

    def replace(
        self,
        rule: ReplaceRule,
        scope: SearchScope | None = None,
        options: SearchOptions | None = None,
        cancel: CancellationToken | None = None,
        approve: Callable[[Preview], bool] | None = None,
    ) -> ReplaceOperation:
        """Search, plan and apply a rule in one tracked operation.

        A dry-run rule stops after planning. When ``approve`` is given it
        sees the preview first; returning False cancels the operation.
        The operation is recorded in the session whatever the outcome.

        Raises:
            InvalidRuleError: If the rule asks for ``confirm_each``; use
                ``execute_replace`` for interactive replaces.
        """
        if rule.options.confirm_each:
            raise InvalidRuleError("confirm_each replaces must go through execute_replace")

        scope = scope or SearchScope()
        operation = ReplaceOperation(rule=rule, scope=scope)
        self.session.record_operation(operation)

        try:
            operation.preview = self.preview_rule(rule, scope, options, cancel)
            if rule.options.dry_run:
                operation.finish(OperationStatus.COMPLETED)
                return operation
            if approve is not None and not approve(operation.preview):
                operation.finish(OperationStatus.CANCELLED, "Not approved")
                return operation

            operation.start()
            operation.backup_id = self._backup(rule, operation.preview)
            operation.results = self.executor.execute(operation.preview, cancel)
        except LLMReplaceError as e:
            operation.finish(OperationStatus.FAILED, str(e))
            raise

        if cancel is not None and cancel.cancelled:
            operation.finish(OperationStatus.CANCELLED)
        elif operation.results and not operation.succeeded:
            operation.finish(OperationStatus.FAILED, "No edits were applied")
        else:
            operation.finish(OperationStatus.COMPLETED)

        log_with_context(
            logger,
            logging.INFO,
            "Replace operation finished",
            operation_id=operation.id,
            status=OperationStatus(operation.status).value,
            succeeded=operation.succeeded,
            failed=operation.failed,
        )
        return operation

    def undo(self, results: list[ReplaceResult]) -> list[ReplaceResult]:
        """Revert successful results."""
        return self.executor.undo(results)

    def rollback(self, backup_id: str) -> list[str]:
        """Restore every file saved in a backup."""
        return self.executor.rollback(backup_id)
