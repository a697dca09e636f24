"""Shared CLI options for llm-replace commands.

This module provides reusable Typer options that are shared across
multiple commands.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from llm_replace.config.schema import OutputFormat, ProviderType


class FormatChoice(str, Enum):
    """Output format choices for CLI."""

    PLAIN = "plain"
    JSON = "json"
    RICH = "rich"


class ModeChoice(str, Enum):
    """Match mode choices for CLI."""

    EXACT = "exact"
    REGEX = "regex"
    FUZZY = "fuzzy"
    SEMANTIC = "semantic"
    AI_ENHANCED = "ai_enhanced"


FormatOption = Annotated[
    FormatChoice | None,
    typer.Option(
        "--format",
        "-f",
        help="Output format (plain, json, rich). Defaults to config setting.",
        case_sensitive=False,
    ),
]

ProviderOption = Annotated[
    str | None,
    typer.Option(
        "--provider",
        "-p",
        help="LLM provider for semantic search and enrichment (ollama, openai, mock).",
    ),
]

ModelOption = Annotated[
    str | None,
    typer.Option("--model", help="Model to use. Defaults to provider's default model."),
]

VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show verbose output including warnings."),
]

RootOption = Annotated[
    Path,
    typer.Option(
        "--root",
        "-r",
        help="Root directory of the files to search.",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
]

PathsArgument = Annotated[
    list[str] | None,
    typer.Argument(help="Files or directories under the root (default: everything)."),
]

ModeOption = Annotated[
    ModeChoice,
    typer.Option("--mode", "-m", help="Match mode.", case_sensitive=False),
]

CaseSensitiveOption = Annotated[
    bool,
    typer.Option("--case-sensitive", "-s", help="Match case exactly."),
]

WholeWordOption = Annotated[
    bool,
    typer.Option("--whole-word", "-w", help="Only match whole words."),
]

FileTypeOption = Annotated[
    list[str] | None,
    typer.Option("--type", "-t", help="Only search files with this extension (repeatable)."),
]

ExcludeOption = Annotated[
    list[str] | None,
    typer.Option("--exclude", "-x", help="Skip paths matching this glob (repeatable)."),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option("--timeout", help="Stop matching after this many seconds."),
]


def get_output_format(format_choice: FormatChoice | None, default: str = "rich") -> OutputFormat:
    """Convert CLI format choice to OutputFormat."""
    if format_choice is None:
        return OutputFormat(default)
    return OutputFormat(format_choice.value)


def get_provider_type(provider: str | None, default: str = "ollama") -> ProviderType:
    """Convert CLI provider string to ProviderType.

    Raises:
        typer.BadParameter: If provider name is invalid.
    """
    provider_str = provider or default
    try:
        return ProviderType(provider_str.lower())
    except ValueError as e:
        valid = [p.value for p in ProviderType]
        raise typer.BadParameter(
            f"Invalid provider '{provider_str}'. Valid options: {', '.join(valid)}"
        ) from e
