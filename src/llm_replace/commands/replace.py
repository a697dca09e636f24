"""Preview and apply a bulk replace."""

from collections.abc import Callable
from typing import Any, cast

from llm_replace.commands.arguments import build_options, build_scope
from llm_replace.commands.base import BaseCommand, CommandContext, CommandResult
from llm_replace.commands.registry import CommandRegistry
from llm_replace.commands.search import parse_mode
from llm_replace.exceptions import InvalidArgumentError, InvalidQueryError, LLMReplaceError
from llm_replace.replace.interactive import ConfirmEachSession, Decision, PendingEdit
from llm_replace.replace.models import (
    OperationStatus,
    ReplaceOperation,
    ReplaceOptions,
    ReplaceRule,
)
from llm_replace.search.models import SearchOptions, SearchScope


def build_rule(**kwargs: Any) -> ReplaceRule:
    """ReplaceRule from command kwargs."""
    max_replacements = kwargs.get("max_replacements")
    if max_replacements is not None and max_replacements < 1:
        raise InvalidArgumentError("max_replacements must be at least 1")
    options = ReplaceOptions(
        whole_word=bool(kwargs.get("whole_word")),
        preserve_case=bool(kwargs.get("preserve_case")),
        regex=bool(kwargs.get("regex")),
        dry_run=bool(kwargs.get("dry_run")),
        max_replacements=max_replacements,
        confirm_each=bool(kwargs.get("confirm_each")),
        backup=bool(kwargs.get("backup")),
        case_sensitive=bool(kwargs.get("case_sensitive")),
        timeout=kwargs.get("timeout"),
    )
    return ReplaceRule(
        query=kwargs["query"],
        replacement=kwargs.get("replacement") or "",
        mode=parse_mode(kwargs.get("mode")),
        options=options,
    )


@CommandRegistry.register
class ReplaceCommand(BaseCommand):
    """Replace matches across the working tree."""

    @property
    def name(self) -> str:
        return "replace"

    @property
    def description(self) -> str:
        return "Preview and apply a search-and-replace with diffs and risk assessment"

    @property
    def aliases(self) -> list[str]:
        return ["sub"]

    def execute(self, ctx: CommandContext, **kwargs: Any) -> CommandResult:
        """Execute the replace command.

        Args:
            ctx: Command context.
            **kwargs: Command arguments:
                - query: Text or pattern to find
                - replacement: Replacement text (``$1``/``${name}`` with regex)
                - mode: Match mode (default: exact)
                - paths: Files or directories (default: all)
                - dry_run, regex, whole_word, case_sensitive, preserve_case,
                  backup, max_replacements, timeout, confirm_each
                - approve: Callable[[Preview], bool] asked before writing
                - decide: Callable[[PendingEdit], Decision] for confirm_each
                - plus search filters (file_types, exclude, include_*)

        Returns:
            CommandResult with the ReplaceOperation.
        """
        if not kwargs.get("query"):
            return CommandResult.from_error(InvalidQueryError("No search query provided"))

        try:
            rule = build_rule(**kwargs)
            scope = build_scope(ctx.working_dir, kwargs.get("paths"))
            options = build_options(**{**kwargs, "max_results": None, "timeout": None})

            if rule.options.confirm_each and not rule.options.dry_run:
                decide = kwargs.get("decide")
                if decide is None:
                    raise InvalidArgumentError("confirm_each requires a decision callback")
                operation = self._run_interactive(ctx, rule, scope, options, decide)
            else:
                operation = ctx.service.replace(
                    rule, scope, options, approve=kwargs.get("approve")
                )
        except LLMReplaceError as e:
            return CommandResult.from_error(e)

        if OperationStatus(operation.status) == OperationStatus.FAILED:
            return CommandResult.fail(operation.error or "Replace failed", operation=operation)
        return CommandResult.ok(
            operation,
            status=OperationStatus(operation.status).value,
            succeeded=operation.succeeded,
            failed=operation.failed,
        )

    def _run_interactive(
        self,
        ctx: CommandContext,
        rule: ReplaceRule,
        scope: SearchScope,
        options: SearchOptions,
        decide: Callable[[PendingEdit], Decision],
    ) -> ReplaceOperation:
        operation = ReplaceOperation(rule=rule, scope=scope)
        ctx.service.session.record_operation(operation)
        operation.preview = ctx.service.preview_rule(rule, scope, options)

        operation.start()
        try:
            session = cast(
                ConfirmEachSession, ctx.service.execute_replace(rule, operation.preview)
            )
            for pending in session:
                session.decide(decide(pending))
        except LLMReplaceError as e:
            operation.finish(OperationStatus.FAILED, str(e))
            raise

        operation.results = session.results
        operation.finish(
            OperationStatus.CANCELLED if session.aborted else OperationStatus.COMPLETED
        )
        return operation


@CommandRegistry.register
class RollbackCommand(BaseCommand):
    """Restore files from a replace backup."""

    @property
    def name(self) -> str:
        return "rollback"

    @property
    def description(self) -> str:
        return "Restore files saved by a replace with --backup, or list backups"

    @property
    def aliases(self) -> list[str]:
        return ["restore"]

    def execute(self, ctx: CommandContext, **kwargs: Any) -> CommandResult:
        backup_id = kwargs.get("backup_id")
        if not backup_id:
            backups = ctx.service.backups.list_backups()
            return CommandResult.ok(
                [
                    {
                        "backup_id": b["backup_id"],
                        "timestamp": b["timestamp"],
                        "files": len(b["files"]),
                        "description": b.get("description", ""),
                    }
                    for b in backups
                ]
            )
        try:
            restored = ctx.service.rollback(backup_id)
        except LLMReplaceError as e:
            return CommandResult.from_error(e)
        return CommandResult.ok(restored, backup_id=backup_id)
