"""Output formatter protocol and base classes."""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TextIO

from llm_replace.config.schema import OutputFormat
from llm_replace.enrichment.models import (
    EnhancementType,
    IntentType,
    QueryEnhancement,
    SemanticReport,
)
from llm_replace.replace.models import (
    OperationStatus,
    Preview,
    ReplaceOperation,
    ReplaceResult,
    RiskLevel,
)
from llm_replace.search.index import IndexStats
from llm_replace.search.models import MatchMode, SearchResponse, SemanticStatus


@dataclass
class OutputData:
    """Container for output data to be formatted.

    Attributes:
        content: The main content to display.
        title: Optional title for the output.
        metadata: Additional metadata (counts, timing, etc.).
        error: Error message if operation failed.
        success: Whether the operation was successful.
    """

    content: str | list[str] | dict[str, Any]
    title: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    success: bool = True

    @classmethod
    def from_error(cls, error: str, title: str | None = None) -> "OutputData":
        """Create an OutputData instance for an error."""
        return cls(content="", title=title, error=error, success=False)

    @classmethod
    def from_content(
        cls,
        content: str | list[str] | dict[str, Any],
        title: str | None = None,
        **metadata: Any,
    ) -> "OutputData":
        """Create an OutputData instance for successful output."""
        return cls(content=content, title=title, metadata=metadata, success=True)


def result_rows(response: SearchResponse) -> list[dict[str, Any]]:
    """One table row per search result."""
    return [
        {
            "file": r.file,
            "line": r.span.start_line,
            "col": r.span.start_col,
            "match": r.matched_text.replace("\n", "\\n"),
            "strategy": MatchMode(r.strategy).value,
            "relevance": f"{r.relevance:.2f}",
        }
        for r in response.results
    ]


def status_line(response: SearchResponse) -> str:
    """Summary of a search response's counts and flags."""
    parts = [
        f"{response.total} result(s) in {len(response.files)} file(s)",
        f"{response.files_searched} searched",
        f"{response.search_time_ms:.0f} ms",
    ]
    if response.truncated:
        parts.append("truncated")
    if response.timed_out:
        parts.append("timed out")
    if response.cancelled:
        parts.append("cancelled")
    status = SemanticStatus(response.semantic_status).value
    if status != "not_requested":
        parts.append(f"semantic {status}")
    return ", ".join(parts)


def replace_rows(results: list[ReplaceResult]) -> list[dict[str, Any]]:
    return [
        {
            "file": r.file,
            "line": r.span.start_line,
            "old": r.old_text,
            "new": r.new_text,
            "status": "ok" if r.success else f"failed: {r.error}",
        }
        for r in results
    ]


class OutputFormatter(ABC):
    """Abstract base class for output formatters.

    Formatters render generic content (text, lists, tables, code) and the
    domain objects of a search or replace (responses, previews, results,
    reports). The domain renderers are built on the generic ones and can
    be overridden where a format has a better representation.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the formatter.

        Args:
            stream: Output stream (defaults to stdout).
            error_stream: Error stream (defaults to stderr).
            verbose: Whether to show verbose output.
        """
        self._stream = stream or sys.stdout
        self._error_stream = error_stream or sys.stderr
        self._verbose = verbose

    @property
    def stream(self) -> TextIO:
        return self._stream

    @property
    def error_stream(self) -> TextIO:
        return self._error_stream

    @property
    def verbose(self) -> bool:
        return self._verbose

    @property
    @abstractmethod
    def format_type(self) -> OutputFormat:
        """Get the format type of this formatter."""
        pass

    @abstractmethod
    def format(self, data: OutputData) -> str:
        """Format output data as a string."""
        pass

    def print(self, data: OutputData) -> None:
        """Format and print output data."""
        formatted = self.format(data)
        if data.success:
            print(formatted, file=self._stream)
        else:
            print(formatted, file=self._error_stream)

    def print_error(self, message: str, title: str | None = None) -> None:
        self.print(OutputData.from_error(message, title))

    def print_content(
        self,
        content: str | list[str] | dict[str, Any],
        title: str | None = None,
        **metadata: Any,
    ) -> None:
        self.print(OutputData.from_content(content, title, **metadata))

    def emit(self, text: str) -> None:
        """Print already formatted text."""
        if text:
            print(text, file=self._stream)

    @abstractmethod
    def format_list(self, items: list[str], title: str | None = None) -> str:
        pass

    @abstractmethod
    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as a table.

        Args:
            rows: List of row dictionaries.
            columns: Column names (inferred from rows if None).
            title: Optional title.
        """
        pass

    @abstractmethod
    def format_code(
        self,
        code: str,
        language: str | None = None,
        title: str | None = None,
    ) -> str:
        """Format code with optional syntax highlighting."""
        pass

    # -------------------------------------------------------------------------
    # Domain renderers
    # -------------------------------------------------------------------------

    def format_search(self, response: SearchResponse) -> str:
        """Render a search response."""
        parts = [self.format_table(result_rows(response), title=f"Search: {response.query.text}")]
        if self._verbose:
            parts.extend(f"warning: {w.file}: {w.message}" for w in response.warnings)
        parts.append(status_line(response))
        return "\n".join(p for p in parts if p)

    def format_preview(self, preview: Preview) -> str:
        """Render a replace preview with per-file diffs."""
        parts: list[str] = []
        for change in preview.per_file_changes:
            if change.error:
                parts.append(f"{change.file}: skipped ({change.error})")
            elif change.diff_preview:
                parts.append(self.format_code(change.diff_preview, "diff", title=change.file))
        parts.extend(f"warning: {w}" for w in preview.warnings)
        risk = RiskLevel(preview.risk_level).value
        parts.append(
            f"{preview.total_matches} match(es) in {preview.total_files} file(s), "
            f"risk {risk}, ~{preview.estimated_time_ms:.0f} ms"
        )
        return "\n".join(parts)

    def format_replace_results(self, results: list[ReplaceResult]) -> str:
        ok = sum(1 for r in results if r.success)
        table = self.format_table(replace_rows(results), title="Replace results")
        return "\n".join(p for p in (table, f"{ok} applied, {len(results) - ok} failed") if p)

    def format_operation(self, operation: ReplaceOperation) -> str:
        parts = []
        if operation.preview is not None:
            parts.append(self.format_preview(operation.preview))
        if operation.results:
            parts.append(self.format_replace_results(operation.results))
        status = OperationStatus(operation.status).value
        line = f"operation {operation.id}: {status}"
        if operation.backup_id:
            line += f" (backup {operation.backup_id})"
        if operation.error:
            line += f": {operation.error}"
        parts.append(line)
        return "\n".join(parts)

    def format_report(self, report: SemanticReport) -> str:
        """Render a semantic search report."""
        intent = report.intent
        intent_type = IntentType(intent.type).value
        parts = [f"intent: {intent_type} ({intent.confidence:.2f}) - {intent.description}"]
        parts.append(self.format_list([r.explanation for r in report.results], title="Results"))
        if report.suggestions:
            parts.append(self.format_list([s.text for s in report.suggestions], title="Suggestions"))
        m = report.metrics
        parts.append(
            f"complexity {m.complexity:.2f}, coverage {m.coverage:.2f}, quality {m.quality:.2f}"
        )
        return "\n".join(p for p in parts if p)

    def format_enhancement(self, enhancement: QueryEnhancement) -> str:
        rows = [
            {
                "type": EnhancementType(s.type).value,
                "suggestion": s.text,
                "why": s.description,
            }
            for s in enhancement.suggestions
        ]
        parts = [f"enhanced query: {enhancement.enhanced_query}"]
        parts.append(self.format_table(rows, title="Suggestions"))
        return "\n".join(p for p in parts if p)

    def format_index_stats(self, stats: IndexStats) -> str:
        content = {
            "files indexed": stats.files_indexed,
            "files unchanged": stats.files_unchanged,
            "files failed": stats.files_failed,
            "files removed": stats.files_removed,
            "chunks written": stats.chunks_written,
            "duration ms": round(stats.duration_ms, 1),
        }
        if stats.cancelled:
            content["cancelled"] = True
        return self.format(OutputData.from_content(content, title="Index"))
