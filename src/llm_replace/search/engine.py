"""Search engine: runs matchers over a corpus concurrently and ranks results."""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from llm_replace.cancellation import CancellationToken
from llm_replace.config.schema import SearchConfig
from llm_replace.exceptions import InvalidQueryError
from llm_replace.search.base import FILE_ERRORS, LexicalMatcher, Matcher
from llm_replace.search.corpus import Corpus
from llm_replace.search.exact import ExactMatcher
from llm_replace.search.fuzzy import FuzzyMatcher
from llm_replace.search.models import (
    FileWarning,
    MatchMode,
    MatchOutcome,
    SearchQuery,
    SearchResponse,
    SearchResult,
    SemanticStatus,
)
from llm_replace.search.ranker import Ranker
from llm_replace.search.regex import RegexMatcher
from llm_replace.search.scanner import SourceText
from llm_replace.search.semantic import SemanticBackend, SemanticMatcher
from llm_replace.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

# How often the wait loop wakes up to check for cancellation
_POLL_INTERVAL = 0.05

_FileOutcome = tuple[list[SearchResult], list[FileWarning]]


class SearchEngine:
    """Runs the matchers a query selects and returns a SearchResponse.

    Lexical matchers run per file on a bounded thread pool; the semantic
    matcher runs as one task in the same pool. The timeout and the
    cancellation token stop new files from starting; results from files
    already finished are kept and the response is marked truncated.
    """

    def __init__(
        self,
        corpus: Corpus,
        config: SearchConfig | None = None,
        semantic_backend: SemanticBackend | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            corpus: Files to search.
            config: Search configuration (defaults if None).
            semantic_backend: Similarity backend for semantic matching.
        """
        self.corpus = corpus
        self.config = config or SearchConfig()
        self.ranker = Ranker(self.config.matcher_priority)
        self.matchers: dict[MatchMode, Matcher] = {
            MatchMode.EXACT: ExactMatcher(),
            MatchMode.REGEX: RegexMatcher(
                step_budget=self.config.regex_step_budget,
                reference_length=self.config.regex_reference_length,
            ),
            MatchMode.FUZZY: FuzzyMatcher(threshold=self.config.fuzzy_threshold),
            MatchMode.SEMANTIC: SemanticMatcher(
                semantic_backend,
                min_score=self.config.semantic_min_score,
                top_k=self.config.semantic_top_k,
            ),
        }

    def matchers_for(self, mode: MatchMode) -> list[Matcher]:
        """Matchers a query mode runs (``ai_enhanced`` runs several)."""
        mode = MatchMode(mode)
        if mode == MatchMode.AI_ENHANCED:
            return [self.matchers[MatchMode(s)] for s in self.config.enhanced_strategies]
        return [self.matchers[mode]]

    def search(
        self, query: SearchQuery, cancel: CancellationToken | None = None
    ) -> SearchResponse:
        """Run a query.

        Args:
            query: The search request.
            cancel: Optional token checked between files.

        Returns:
            Ranked results with status metadata. Backend failures,
            timeouts and unreadable files are reported here, not raised.

        Raises:
            InvalidQueryError: If the query text is empty.
            InvalidPatternError: If a regex query does not compile.
            PatternTooComplexError: If a regex query is too expensive.
            InvalidScopeError: If the scope does not resolve.
        """
        if not query.text.strip():
            raise InvalidQueryError("Search query is empty")

        start_time = time.perf_counter()
        matchers = self.matchers_for(query.mode)
        for matcher in matchers:
            matcher.validate(query)

        files = self.corpus.select_files(query.scope, query.options)
        lexical = [m for m in matchers if isinstance(m, LexicalMatcher)]
        others = [m for m in matchers if not isinstance(m, LexicalMatcher)]

        response = SearchResponse(query=query)
        if any(isinstance(m, SemanticMatcher) for m in others):
            response.semantic_status = SemanticStatus.UNAVAILABLE

        timeout = query.options.timeout
        deadline = time.monotonic() + timeout if timeout is not None else None

        collected: list[SearchResult] = []
        executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="llm-replace-search"
        )
        file_futures: dict[Future[_FileOutcome | None], str] = {}
        other_futures: dict[Future[MatchOutcome], Matcher] = {}
        try:
            for matcher in others:
                other_futures[executor.submit(matcher.match, query, self.corpus)] = matcher
            if lexical:
                for path in files:
                    future = executor.submit(self._match_file, lexical, query, path, cancel)
                    file_futures[future] = path

            pending: set[Future] = set(file_futures) | set(other_futures)
            while pending:
                if cancel is not None and cancel.cancelled:
                    response.cancelled = True
                    break
                wait_for = _POLL_INTERVAL
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        response.timed_out = True
                        break
                    wait_for = min(wait_for, remaining)
                done, pending = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)
                for future in done:
                    if future in other_futures:
                        self._collect_outcome(future.result(), response, collected)
                    else:
                        file_outcome = future.result()
                        if file_outcome is None:
                            response.cancelled = True
                            continue
                        results, warnings = file_outcome
                        response.files_searched += 1
                        collected.extend(results)
                        response.warnings.extend(warnings)

            for future in pending:
                future.cancel()
        finally:
            interrupted = response.timed_out or response.cancelled
            executor.shutdown(wait=not interrupted, cancel_futures=True)

        if not lexical:
            response.files_searched = len(files)

        ranked, truncated = self.ranker.rank(collected, query.options.max_results)
        response.results = ranked
        response.truncated = truncated or response.timed_out or response.cancelled
        response.warnings.sort(key=lambda w: w.file)
        response.search_time_ms = (time.perf_counter() - start_time) * 1000

        log_with_context(
            logger,
            logging.INFO,
            "Search finished",
            query_id=query.id,
            mode=MatchMode(query.mode).value,
            results=len(ranked),
            files=response.files_searched,
            timed_out=response.timed_out,
            cancelled=response.cancelled,
        )
        return response

    def _match_file(
        self,
        matchers: list[LexicalMatcher],
        query: SearchQuery,
        path: str,
        cancel: CancellationToken | None,
    ) -> _FileOutcome | None:
        """Run lexical matchers over one file; None if cancelled before starting."""
        if cancel is not None and cancel.cancelled:
            return None
        try:
            source = SourceText(path, self.corpus.read_file(path))
        except FILE_ERRORS as e:
            return [], [FileWarning(path, str(e))]

        results: list[SearchResult] = []
        for matcher in matchers:
            results.extend(matcher.match_source(query, source))
        return results, []

    @staticmethod
    def _collect_outcome(
        outcome: MatchOutcome, response: SearchResponse, collected: list[SearchResult]
    ) -> None:
        collected.extend(outcome.results)
        response.warnings.extend(outcome.warnings)
        if outcome.backend_status != SemanticStatus.NOT_REQUESTED:
            response.semantic_status = outcome.backend_status
