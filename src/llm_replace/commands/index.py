"""Build or inspect the semantic search index."""

from typing import Any

from llm_replace.commands.arguments import build_options, build_scope
from llm_replace.commands.base import BaseCommand, CommandContext, CommandResult
from llm_replace.commands.registry import CommandRegistry
from llm_replace.exceptions import LLMReplaceError


@CommandRegistry.register
class IndexCommand(BaseCommand):
    """Index files for semantic search."""

    @property
    def name(self) -> str:
        return "index"

    @property
    def description(self) -> str:
        return "Embed files into the vector index used by semantic search"

    def execute(self, ctx: CommandContext, **kwargs: Any) -> CommandResult:
        """Execute the index command.

        Args:
            ctx: Command context.
            **kwargs: Command arguments:
                - paths: Files or directories to index (default: all)
                - file_types, exclude: File filters
                - stats: Only report what is indexed

        Returns:
            CommandResult with IndexStats, or a stats dict.
        """
        try:
            if kwargs.get("stats"):
                return CommandResult.ok(ctx.service.index_stats())

            scope = build_scope(ctx.working_dir, kwargs.get("paths"))
            options = build_options(
                file_types=kwargs.get("file_types"), exclude=kwargs.get("exclude")
            )
            stats = ctx.service.index(scope, options)
        except LLMReplaceError as e:
            return CommandResult.from_error(e)

        return CommandResult.ok(stats, files_indexed=stats.files_indexed)
