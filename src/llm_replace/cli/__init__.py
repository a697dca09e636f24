"""CLI layer for llm-replace.

This module provides the command-line interface for llm-replace,
built on Typer with Rich formatting support.

Usage:
    # Run the main CLI
    llm-replace --help

    # Use shortcut commands
    llm-grep "old_name" src/
    llm-sub "old_name" "new_name" --dry-run
"""

from llm_replace.cli.app import app, main
from llm_replace.cli.context import create_context
from llm_replace.cli.options import (
    FormatChoice,
    FormatOption,
    ModeChoice,
    ModelOption,
    ProviderOption,
    VerboseOption,
)

__all__ = [
    # App
    "app",
    "main",
    # Context
    "create_context",
    # Options
    "FormatChoice",
    "FormatOption",
    "ModeChoice",
    "ModelOption",
    "ProviderOption",
    "VerboseOption",
]
