"""JSON output formatter."""

import json
from dataclasses import asdict
from typing import Any, TextIO

from llm_replace.config.schema import OutputFormat
from llm_replace.enrichment.models import QueryEnhancement, SemanticReport
from llm_replace.output.base import OutputData, OutputFormatter
from llm_replace.replace.models import (
    OperationStatus,
    Preview,
    ReplaceOperation,
    ReplaceResult,
)
from llm_replace.search.index import IndexStats
from llm_replace.search.models import SearchResponse


class JSONFormatter(OutputFormatter):
    """JSON output formatter.

    Produces structured JSON output suitable for programmatic
    consumption and integration with other tools.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        indent: int | None = 2,
        ensure_ascii: bool = False,
    ) -> None:
        """Initialize JSON formatter.

        Args:
            stream: Output stream.
            error_stream: Error stream.
            verbose: Whether to show verbose output.
            indent: JSON indentation (None for compact).
            ensure_ascii: Whether to escape non-ASCII characters.
        """
        super().__init__(stream, error_stream, verbose)
        self._indent = indent
        self._ensure_ascii = ensure_ascii

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.JSON

    def _to_json(self, data: Any) -> str:
        return json.dumps(
            data,
            indent=self._indent,
            ensure_ascii=self._ensure_ascii,
            default=str,  # Enums, paths and datetimes
        )

    def format(self, data: OutputData) -> str:
        """Format output data as JSON."""
        output: dict[str, Any] = {"success": data.success}

        if data.title:
            output["title"] = data.title

        if data.success:
            output["content"] = data.content
        else:
            output["error"] = data.error

        if data.metadata:
            output["metadata"] = data.metadata

        return self._to_json(output)

    def format_list(self, items: list[str], title: str | None = None) -> str:
        output: dict[str, Any] = {"success": True, "items": items, "count": len(items)}
        if title:
            output["title"] = title
        return self._to_json(output)

    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        output: dict[str, Any] = {"success": True, "rows": rows, "count": len(rows)}
        if title:
            output["title"] = title
        if columns:
            output["columns"] = columns
        return self._to_json(output)

    def format_code(
        self,
        code: str,
        language: str | None = None,
        title: str | None = None,
    ) -> str:
        output: dict[str, Any] = {"success": True, "code": code}
        if language:
            output["language"] = language
        if title:
            output["title"] = title
        return self._to_json(output)

    def format_search(self, response: SearchResponse) -> str:
        return self._to_json(response.to_dict())

    def format_preview(self, preview: Preview) -> str:
        return self._to_json(preview.to_dict())

    def format_replace_results(self, results: list[ReplaceResult]) -> str:
        return self._to_json(
            {
                "results": [r.to_dict() for r in results],
                "succeeded": sum(1 for r in results if r.success),
                "failed": sum(1 for r in results if not r.success),
            }
        )

    def format_operation(self, operation: ReplaceOperation) -> str:
        return self._to_json(
            {
                "id": operation.id,
                "status": OperationStatus(operation.status).value,
                "error": operation.error,
                "backup_id": operation.backup_id,
                "duration_ms": operation.duration_ms,
                "preview": operation.preview.to_dict() if operation.preview else None,
                "results": [r.to_dict() for r in operation.results],
            }
        )

    def format_report(self, report: SemanticReport) -> str:
        return self._to_json(report.to_dict())

    def format_enhancement(self, enhancement: QueryEnhancement) -> str:
        return self._to_json(enhancement.to_dict())

    def format_index_stats(self, stats: IndexStats) -> str:
        return self._to_json(asdict(stats))
