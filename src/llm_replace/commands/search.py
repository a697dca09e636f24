"""Search the working tree with exact, regex, fuzzy, or semantic matching."""

from typing import Any

from llm_replace.commands.arguments import build_options, build_scope
from llm_replace.commands.base import BaseCommand, CommandContext, CommandResult
from llm_replace.commands.registry import CommandRegistry
from llm_replace.exceptions import InvalidArgumentError, InvalidQueryError, LLMReplaceError
from llm_replace.search.models import MatchMode, SearchQuery


def parse_mode(value: str | MatchMode | None) -> MatchMode:
    if value is None:
        return MatchMode.EXACT
    try:
        return MatchMode(value.lower() if isinstance(value, str) else value)
    except ValueError as e:
        valid = ", ".join(m.value for m in MatchMode)
        raise InvalidArgumentError(f"Invalid mode '{value}'. Valid options: {valid}") from e


@CommandRegistry.register
class SearchCommand(BaseCommand):
    """Find matches for a query."""

    @property
    def name(self) -> str:
        return "search"

    @property
    def description(self) -> str:
        return "Search files with exact, regex, fuzzy, or semantic matching"

    @property
    def aliases(self) -> list[str]:
        return ["grep", "find"]

    def execute(self, ctx: CommandContext, **kwargs: Any) -> CommandResult:
        """Execute the search command.

        Args:
            ctx: Command context.
            **kwargs: Command arguments:
                - query: Search text or pattern
                - mode: exact, regex, fuzzy, semantic, or ai_enhanced
                - paths: Files or directories to search (default: all)
                - report: Return a SemanticReport instead of a response
                - plus any SearchOptions field (case_sensitive, whole_word,
                  file_types, exclude, max_results, timeout, ...)

        Returns:
            CommandResult with a SearchResponse or SemanticReport.
        """
        query = kwargs.get("query")
        if not query:
            return CommandResult.from_error(InvalidQueryError("No search query provided"))

        try:
            mode = parse_mode(kwargs.get("mode"))
            scope = build_scope(ctx.working_dir, kwargs.get("paths"))
            options = build_options(**kwargs)

            if kwargs.get("report"):
                report = ctx.service.semantic_search(query, scope, options)
                return CommandResult.ok(report, results=len(report.results))

            response = ctx.service.search(SearchQuery(query, mode, options, scope))
        except LLMReplaceError as e:
            return CommandResult.from_error(e)

        return CommandResult.ok(
            response,
            results=response.total,
            truncated=response.truncated,
        )


@CommandRegistry.register
class EnhanceCommand(BaseCommand):
    """Suggest better versions of a query."""

    @property
    def name(self) -> str:
        return "enhance"

    @property
    def description(self) -> str:
        return "Suggest identifier variants, refinements, and rewrites of a query"

    @property
    def aliases(self) -> list[str]:
        return ["suggest"]

    def execute(self, ctx: CommandContext, **kwargs: Any) -> CommandResult:
        query = kwargs.get("query")
        if not query:
            return CommandResult.from_error(InvalidQueryError("No search query provided"))
        enhancement = ctx.service.enhance_search(query)
        return CommandResult.ok(enhancement, suggestions=len(enhancement.suggestions))
