"""Rich terminal output formatter."""

from io import StringIO
from typing import Any, TextIO

from rich.console import Console, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from llm_replace.config.schema import OutputFormat
from llm_replace.output.base import OutputData, OutputFormatter, status_line
from llm_replace.replace.models import Preview, RiskLevel
from llm_replace.search.models import MatchMode, SearchResponse

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "bold red",
}


class RichFormatter(OutputFormatter):
    """Rich terminal output formatter.

    Tables for results, panels for errors, and syntax-highlighted
    diffs for previews.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        theme: str = "monokai",
        width: int | None = None,
        color: bool = True,
    ) -> None:
        """Initialize rich formatter.

        Args:
            stream: Output stream.
            error_stream: Error stream.
            verbose: Whether to show verbose output.
            theme: Syntax highlighting theme.
            width: Console width (None for auto-detect).
            color: Whether to emit ANSI colors when printing.
        """
        super().__init__(stream, error_stream, verbose)
        self._theme = theme
        self._width = width
        self._color = color
        self._console: Console | None = None
        self._error_console: Console | None = None

    def _get_console(self) -> Console:
        if self._console is None:
            self._console = Console(
                file=self._stream, width=self._width, no_color=not self._color
            )
        return self._console

    def _get_error_console(self) -> Console:
        if self._error_console is None:
            self._error_console = Console(
                file=self._error_stream, width=self._width, stderr=True, no_color=not self._color
            )
        return self._error_console

    def _render(self, *renderables: RenderableType) -> str:
        """Render to a string without terminal control codes."""
        string_io = StringIO()
        temp_console = Console(file=string_io, width=self._width, force_terminal=False)
        for renderable in renderables:
            temp_console.print(renderable)
        return string_io.getvalue().rstrip()

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.RICH

    def format(self, data: OutputData) -> str:
        """Format output data with Rich formatting."""
        if not data.success and data.error:
            error_text = Text(f"Error: {data.error}", style="bold red")
            if data.title:
                return self._render(Panel(error_text, title=data.title, border_style="red"))
            return self._render(error_text)

        content_renderable: RenderableType
        if isinstance(data.content, str):
            if self._looks_like_markdown(data.content):
                content_renderable = Markdown(data.content)
            else:
                content_renderable = Text(data.content)
        elif isinstance(data.content, list):
            table = Table(show_header=False, box=None)
            table.add_column("Item")
            for item in data.content:
                table.add_row(str(item))
            content_renderable = table
        else:
            table = Table(show_header=False, box=None, padding=(0, 1))
            table.add_column("Key", style="bold cyan")
            table.add_column("Value")
            for key, value in data.content.items():
                table.add_row(str(key), str(value))
            content_renderable = table

        renderables: list[RenderableType] = [
            Panel(content_renderable, title=data.title) if data.title else content_renderable
        ]

        if self._verbose and data.metadata:
            meta_table = Table(title="Metadata", show_header=False, box=None)
            meta_table.add_column("Key", style="dim")
            meta_table.add_column("Value", style="dim")
            for key, value in data.metadata.items():
                meta_table.add_row(str(key), str(value))
            renderables.append(meta_table)

        return self._render(*renderables)

    def _looks_like_markdown(self, text: str) -> bool:
        markdown_indicators = ["# ", "## ", "```", "- ", "* ", "1. ", "**", "> "]
        return any(indicator in text for indicator in markdown_indicators)

    def format_list(self, items: list[str], title: str | None = None) -> str:
        table = Table(show_header=False, box=None)
        table.add_column("Item")
        for item in items:
            table.add_row(f"• {item}")
        return self._render(Panel(table, title=title) if title else table)

    def format_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str] | None = None,
        title: str | None = None,
    ) -> str:
        """Format data as a Rich table."""
        if not rows:
            return ""
        if columns is None:
            columns = list(rows[0].keys())

        table = Table(title=title)
        for col in columns:
            table.add_column(col, style="cyan")
        for row in rows:
            table.add_row(*[str(row.get(col, "")) for col in columns])
        return self._render(table)

    def format_code(
        self,
        code: str,
        language: str | None = None,
        title: str | None = None,
    ) -> str:
        """Format code with Rich syntax highlighting."""
        syntax = Syntax(
            code.rstrip("\n"),
            language or "text",
            theme=self._theme,
            line_numbers=language != "diff",
            word_wrap=True,
        )
        return self._render(Panel(syntax, title=title) if title else syntax)

    def format_search(self, response: SearchResponse) -> str:
        table = Table(title=f"Search: {response.query.text}")
        table.add_column("Location", style="cyan", no_wrap=True)
        table.add_column("Match")
        table.add_column("Strategy", style="magenta")
        table.add_column("Relevance", justify="right")
        for r in response.results:
            table.add_row(
                f"{r.file}:{r.span.start_line}:{r.span.start_col}",
                Text(r.matched_text.replace("\n", "\\n")),
                MatchMode(r.strategy).value,
                f"{r.relevance:.2f}",
            )

        renderables: list[RenderableType] = [table] if response.results else []
        if self._verbose:
            for w in response.warnings:
                renderables.append(Text(f"warning: {w.file}: {w.message}", style="yellow"))
        renderables.append(Text(status_line(response), style="dim"))
        return self._render(*renderables)

    def format_preview(self, preview: Preview) -> str:
        renderables: list[RenderableType] = []
        for change in preview.per_file_changes:
            if change.error:
                renderables.append(Text(f"{change.file}: skipped ({change.error})", style="yellow"))
                continue
            if not change.diff_preview:
                continue
            risk = RiskLevel(change.risk)
            syntax = Syntax(change.diff_preview.rstrip("\n"), "diff", theme=self._theme)
            renderables.append(
                Panel(
                    syntax,
                    title=f"{change.file} ({change.match_count})",
                    subtitle=Text(risk.value, style=RISK_STYLES[risk]),
                )
            )
        for warning in preview.warnings:
            renderables.append(Text(f"warning: {warning}", style="yellow"))

        risk = RiskLevel(preview.risk_level)
        summary = Text()
        summary.append(f"{preview.total_matches} match(es) in {preview.total_files} file(s), risk ")
        summary.append(risk.value, style=RISK_STYLES[risk])
        summary.append(f", ~{preview.estimated_time_ms:.0f} ms")
        renderables.append(summary)
        return self._render(*renderables)

    def print(self, data: OutputData) -> None:
        """Print output using the Rich console directly."""
        console = self._get_console() if data.success else self._get_error_console()
        console.print(self.format(data), highlight=False, markup=False)

    def emit(self, text: str) -> None:
        if text:
            self._get_console().print(text, highlight=False, markup=False)
