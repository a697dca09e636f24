"""Plain text output formatter."""

from typing import Any, TextIO

from llm_replace.config.schema import OutputFormat
from llm_replace.output.base import OutputData, OutputFormatter
from llm_replace.search.models import SearchResponse


class PlainFormatter(OutputFormatter):
    """Plain text output formatter.

    Produces simple, unformatted text suitable for piping to other
    commands. Search results use grep's ``file:line:col:text`` layout.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        show_metadata: bool = False,
    ) -> None:
        super().__init__(stream, error_stream, verbose)
        self._show_metadata = show_metadata

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.PLAIN

    def format(self, data: OutputData) -> str:
        """Format output data as plain text."""
        lines: list[str] = []

        if data.title:
            lines.append(data.title)
            lines.append("-" * len(data.title))
            lines.append("")

        if not data.success and data.error:
            lines.append(f"Error: {data.error}")
            return "\n".join(lines)

        if isinstance(data.content, str):
            lines.append(data.content)
        elif isinstance(data.content, list):
            for item in data.content:
                lines.append(str(item))
        elif isinstance(data.content, dict):
            for key, value in data.content.items():
                lines.append(f"{key}: {value}")

        if (self._verbose or self._show_metadata) and data.metadata:
            lines.append("")
            lines.append("---")
            for key, value in data.metadata.items():
                lines.append(f"{key}: {value}")

        return "\n".join(lines)

    def format_list(self, items: list[str], title: str | None = None) -> str:
        lines: list[str] = []
        if title:
            lines.append(title)
            lines.append("-" * len(title))
            lines.append("")
        for item in items:
            lines.append(f"  {item}")
        return "\n".join(lines)

    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as a plain text table."""
        if not rows:
            return ""

        if columns is None:
            columns = list(rows[0].keys())

        widths: dict[str, int] = {}
        for col in columns:
            widths[col] = len(col)
            for row in rows:
                widths[col] = max(widths[col], len(str(row.get(col, ""))))

        lines: list[str] = []
        if title:
            lines.append(title)
            lines.append("")

        lines.append("  ".join(col.ljust(widths[col]) for col in columns).rstrip())
        lines.append("  ".join("-" * widths[col] for col in columns))
        for row in rows:
            lines.append(
                "  ".join(str(row.get(col, "")).ljust(widths[col]) for col in columns).rstrip()
            )
        return "\n".join(lines)

    def format_code(
        self,
        code: str,
        language: str | None = None,
        title: str | None = None,
    ) -> str:
        """Format code as plain text (no highlighting)."""
        lines: list[str] = []
        if title:
            lines.append(title)
            lines.append("-" * len(title))
        if language and self._verbose:
            lines.append(f"[{language}]")
        lines.append(code.rstrip("\n"))
        return "\n".join(lines)

    def format_search(self, response: SearchResponse) -> str:
        lines = []
        for r in response.results:
            text = r.matched_text.splitlines()[0] if r.matched_text else ""
            lines.append(f"{r.file}:{r.span.start_line}:{r.span.start_col}:{text}")
        if self._verbose:
            lines.extend(f"warning: {w.file}: {w.message}" for w in response.warnings)
        return "\n".join(lines)
