"""Main CLI application for llm-replace."""

from collections.abc import Callable
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from llm_replace import __version__
from llm_replace.cli.context import create_context
from llm_replace.cli.options import (
    CaseSensitiveOption,
    ExcludeOption,
    FileTypeOption,
    FormatChoice,
    FormatOption,
    ModeChoice,
    ModelOption,
    ModeOption,
    PathsArgument,
    ProviderOption,
    RootOption,
    TimeoutOption,
    VerboseOption,
    WholeWordOption,
)

# Import commands to ensure they're registered
from llm_replace.commands import (
    CommandRegistry,
    EnhanceCommand,
    IndexCommand,
    ReplaceCommand,
    RollbackCommand,
    SearchCommand,
)
from llm_replace.commands.base import CommandContext, CommandResult
from llm_replace.config import get_config
from llm_replace.exceptions import ConfigError
from llm_replace.output.base import OutputData
from llm_replace.replace.interactive import Decision, PendingEdit
from llm_replace.replace.models import OperationStatus, Preview
from llm_replace.utils.logging import setup_logging

# Create Typer app
app = typer.Typer(
    name="llm-replace",
    help="Multi-strategy search and replace with previews, diffs and rollback",
    add_completion=True,
    no_args_is_help=True,
)

# Rich console for output
console = Console()
err_console = Console(stderr=True)

_SEMANTIC_MODES = (ModeChoice.SEMANTIC, ModeChoice.AI_ENHANCED)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"llm-replace version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Multi-strategy search and replace."""
    try:
        config = get_config()
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e.user_message}")
        raise typer.Exit(e.exit_code) from None
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        use_color=config.output.color,
    )


def _fail(result: CommandResult) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {result.error}")
    raise typer.Exit(result.exit_code or 1)


def _spinner(description: str) -> Progress:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=err_console,
        transient=True,
    )
    progress.add_task(description=description, total=None)
    return progress


def _is_json(ctx: CommandContext) -> bool:
    return ctx.formatter.format_type.value == FormatChoice.JSON.value


@app.command()
def search(
    query: str = typer.Argument(..., help="Text, pattern, or description to search for."),
    paths: PathsArgument = None,
    mode: ModeOption = ModeChoice.EXACT,
    case_sensitive: CaseSensitiveOption = False,
    whole_word: WholeWordOption = False,
    file_types: FileTypeOption = None,
    exclude: ExcludeOption = None,
    max_results: int | None = typer.Option(
        None, "--max-results", "-n", help="Maximum number of results."
    ),
    timeout: TimeoutOption = None,
    context: int | None = typer.Option(
        None, "--context", "-C", help="Lines of context around each match."
    ),
    no_comments: bool = typer.Option(False, "--no-comments", help="Skip matches in comments."),
    no_strings: bool = typer.Option(False, "--no-strings", help="Skip matches in strings."),
    no_code: bool = typer.Option(False, "--no-code", help="Skip matches in code."),
    threshold: float | None = typer.Option(
        None, "--threshold", help="Minimum fuzzy similarity (0-1)."
    ),
    top_k: int | None = typer.Option(None, "--top-k", help="Semantic neighbors to consider."),
    report: bool = typer.Option(
        False, "--report", help="Classify intent, explain results and suggest next steps."
    ),
    format: FormatOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    verbose: VerboseOption = False,
    root: RootOption = Path("."),
) -> None:
    """Search files with exact, regex, fuzzy, or semantic matching."""
    config = get_config()
    ctx = create_context(
        provider=provider,
        model=model,
        format_choice=format,
        verbose=verbose,
        working_dir=root,
        use_provider=report or mode in _SEMANTIC_MODES,
    )
    try:
        with _spinner("Searching..."):
            result = SearchCommand().execute(
                ctx,
                query=query,
                mode=mode.value,
                paths=paths,
                report=report,
                case_sensitive=case_sensitive,
                whole_word=whole_word,
                file_types=file_types,
                exclude=exclude,
                max_results=max_results or config.search.max_results,
                timeout=timeout if timeout is not None else config.search.timeout_seconds,
                context_lines=context if context is not None else config.search.context_lines,
                include_comments=not no_comments,
                include_strings=not no_strings,
                include_code=not no_code,
                fuzzy_threshold=threshold,
                semantic_top_k=top_k,
            )
    finally:
        ctx.service.close()

    if not result.success:
        _fail(result)
    if report:
        ctx.formatter.emit(ctx.formatter.format_report(result.data))
    else:
        ctx.formatter.emit(ctx.formatter.format_search(result.data))


def _approve_with(ctx: CommandContext) -> Callable[[Preview], bool]:
    def approve(preview: Preview) -> bool:
        ctx.formatter.emit(ctx.formatter.format_preview(preview))
        if not preview.applicable_changes:
            return False
        return typer.confirm("Apply these changes?", default=False)

    return approve


def _decide(pending: PendingEdit) -> Decision:
    edit = pending.edit
    err_console.print(
        f"\n[bold]{pending.file}:{edit.span.start_line}[/bold] "
        f"[dim]({pending.index}/{pending.total})[/dim]"
    )
    err_console.print(f"[red]- {escape(edit.old_text)}[/red]", highlight=False)
    err_console.print(f"[green]+ {escape(edit.new_text)}[/green]", highlight=False)
    answer = typer.prompt("Replace? [y]es/[n]o/[q]uit", default="n")
    choice = answer.strip().lower()[:1]
    if choice == "y":
        return Decision.APPROVE
    if choice == "q":
        return Decision.ABORT
    return Decision.SKIP


@app.command()
def replace(
    query: str = typer.Argument(..., help="Text or pattern to replace."),
    replacement: str = typer.Argument(..., help="Replacement text ($1, ${name} with --regex)."),
    paths: PathsArgument = None,
    mode: ModeOption = ModeChoice.EXACT,
    regex: bool = typer.Option(
        False, "--regex", "-E", help="Treat the query as a regex with capture groups."
    ),
    whole_word: WholeWordOption = False,
    case_sensitive: CaseSensitiveOption = False,
    preserve_case: bool = typer.Option(
        False, "--preserve-case", help="Match the case shape of each replaced word."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Preview without writing."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply without asking."),
    confirm_each: bool = typer.Option(
        False, "--confirm-each", "-i", help="Ask before every single edit."
    ),
    backup: bool | None = typer.Option(
        None, "--backup/--no-backup", help="Save originals so the replace can be rolled back."
    ),
    max_replacements: int | None = typer.Option(
        None, "--max-replacements", help="Stop after this many matches."
    ),
    timeout: TimeoutOption = None,
    file_types: FileTypeOption = None,
    exclude: ExcludeOption = None,
    format: FormatOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    verbose: VerboseOption = False,
    root: RootOption = Path("."),
) -> None:
    """Preview and apply a search-and-replace across files."""
    config = get_config()
    ctx = create_context(
        provider=provider,
        model=model,
        format_choice=format,
        verbose=verbose,
        working_dir=root,
        use_provider=mode in _SEMANTIC_MODES,
    )
    interactive = not (yes or dry_run or _is_json(ctx))
    try:
        result = ReplaceCommand().execute(
            ctx,
            query=query,
            replacement=replacement,
            paths=paths,
            mode=mode.value,
            regex=regex,
            whole_word=whole_word,
            case_sensitive=case_sensitive,
            preserve_case=preserve_case,
            dry_run=dry_run,
            confirm_each=confirm_each,
            backup=config.replace.backup if backup is None else backup,
            max_replacements=max_replacements,
            timeout=timeout,
            file_types=file_types,
            exclude=exclude,
            approve=_approve_with(ctx) if interactive and not confirm_each else None,
            decide=_decide,
        )
    finally:
        ctx.service.close()

    if not result.success:
        if result.metadata.get("operation") is not None:
            ctx.formatter.emit(ctx.formatter.format_operation(result.metadata["operation"]))
        _fail(result)

    operation = result.data
    if dry_run and not _is_json(ctx) and operation.preview is not None:
        ctx.formatter.emit(ctx.formatter.format_preview(operation.preview))
    elif interactive and not confirm_each:
        # The preview was already shown before asking
        if operation.results:
            ctx.formatter.emit(ctx.formatter.format_replace_results(operation.results))
        console.print(f"[dim]{OperationStatus(operation.status).value}[/dim]")
    else:
        ctx.formatter.emit(ctx.formatter.format_operation(operation))


@app.command()
def index(
    paths: PathsArgument = None,
    file_types: FileTypeOption = None,
    exclude: ExcludeOption = None,
    stats: bool = typer.Option(False, "--stats", help="Show what is indexed and exit."),
    format: FormatOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    verbose: VerboseOption = False,
    root: RootOption = Path("."),
) -> None:
    """Embed files into the vector index used by semantic search."""
    ctx = create_context(
        provider=provider,
        model=model,
        format_choice=format,
        verbose=verbose,
        working_dir=root,
        use_provider=True,
    )
    try:
        with _spinner("Indexing..."):
            result = IndexCommand().execute(
                ctx, paths=paths, file_types=file_types, exclude=exclude, stats=stats
            )
    finally:
        ctx.service.close()

    if not result.success:
        _fail(result)
    if stats:
        ctx.formatter.emit(ctx.formatter.format(OutputData.from_content(result.data, "Index")))
    else:
        ctx.formatter.emit(ctx.formatter.format_index_stats(result.data))


@app.command()
def enhance(
    query: str = typer.Argument(..., help="Query to improve."),
    format: FormatOption = None,
    provider: ProviderOption = None,
    model: ModelOption = None,
    use_llm: bool = typer.Option(
        True, "--llm/--no-llm", help="Ask the LLM provider for a rewrite."
    ),
    verbose: VerboseOption = False,
) -> None:
    """Suggest identifier variants, refinements, and rewrites of a query."""
    ctx = create_context(
        provider=provider,
        model=model,
        format_choice=format,
        verbose=verbose,
        use_provider=use_llm,
    )
    try:
        with _spinner("Enhancing query..."):
            result = EnhanceCommand().execute(ctx, query=query)
    finally:
        ctx.service.close()

    if not result.success:
        _fail(result)
    ctx.formatter.emit(ctx.formatter.format_enhancement(result.data))


@app.command()
def rollback(
    backup_id: Annotated[
        str | None, typer.Argument(help="Backup to restore (omit to list backups).")
    ] = None,
    format: FormatOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Restore files saved by a replace with --backup."""
    ctx = create_context(format_choice=format, verbose=verbose)
    result = RollbackCommand().execute(ctx, backup_id=backup_id)
    if not result.success:
        _fail(result)

    if backup_id is None:
        if not result.data:
            console.print("[dim]No backups[/dim]")
            return
        ctx.formatter.emit(ctx.formatter.format_table(result.data, title="Backups"))
    else:
        ctx.formatter.emit(
            ctx.formatter.format_list(result.data, title=f"Restored from {backup_id}")
        )


@app.command("config")
def config_cmd(
    show_path: bool = typer.Option(
        False,
        "--path",
        "-p",
        help="Show config file path.",
    ),
) -> None:
    """Show current configuration."""
    from llm_replace.config.defaults import get_backup_dir, get_config_path

    if show_path:
        console.print(str(get_config_path()))
        return

    config = get_config()
    console.print("[bold]llm-replace configuration[/bold]\n")
    console.print(f"Config file: {get_config_path()}")
    console.print(f"Default provider: {config.default_provider}")
    console.print(f"Output format: {config.output.default_format}")
    console.print(f"Max results: {config.search.max_results}")
    console.print(f"Search timeout: {config.search.timeout_seconds}")
    console.print(f"Max replacements: {config.replace.max_replacements}")
    console.print(f"Backups: {get_backup_dir(config.replace.backup_dir)}")

    # Provider status
    console.print("\n[bold]Providers:[/bold]")
    console.print(
        f"  Ollama: {'enabled' if config.providers.ollama.enabled else 'disabled'}"
    )
    console.print(
        f"  OpenAI: {'enabled' if config.providers.openai.enabled else 'disabled'}"
    )


@app.command()
def commands() -> None:
    """List all available commands."""
    info_list = CommandRegistry.get_command_info()

    if not info_list:
        console.print("[dim]No commands registered[/dim]")
        return

    console.print("[bold]Available Commands[/bold]\n")
    for info in info_list:
        name = info["name"]
        desc = info["description"]
        aliases = info["aliases"]

        console.print(f"  [cyan]{name}[/cyan]")
        if aliases:
            console.print(f"    Aliases: {aliases}")
        console.print(f"    {desc}")
        console.print()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
