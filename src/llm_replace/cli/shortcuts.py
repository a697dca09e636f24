"""Shortcut entry points for standalone commands.

These entry points allow commands to be invoked directly as
standalone executables (llm-grep, llm-sub) instead of
subcommands (llm-replace search, llm-replace replace).

The shortcuts are defined in pyproject.toml under [project.scripts]:
    llm-grep = "llm_replace.cli.shortcuts:grep_main"
    llm-sub = "llm_replace.cli.shortcuts:sub_main"
"""

import sys


def grep_main() -> None:
    """Entry point for llm-grep command."""
    from llm_replace.cli.app import app

    # Rewrite sys.argv to inject 'search' command
    sys.argv = ["llm-replace", "search"] + sys.argv[1:]
    app()


def sub_main() -> None:
    """Entry point for llm-sub command."""
    from llm_replace.cli.app import app

    sys.argv = ["llm-replace", "replace"] + sys.argv[1:]
    app()
