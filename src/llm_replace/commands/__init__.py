"""Command implementations for llm-replace.

Usage:
    from llm_replace.commands import CommandRegistry

    cmd = CommandRegistry.get_instance("grep")
    result = cmd.execute(context, query="old_name")
"""

from llm_replace.commands.base import BaseCommand, CommandContext, CommandResult
from llm_replace.commands.registry import CommandRegistry

# Import commands to trigger registration
from llm_replace.commands.index import IndexCommand
from llm_replace.commands.replace import ReplaceCommand, RollbackCommand
from llm_replace.commands.search import EnhanceCommand, SearchCommand

__all__ = [
    "BaseCommand",
    "CommandContext",
    "CommandResult",
    "CommandRegistry",
    "EnhanceCommand",
    "IndexCommand",
    "ReplaceCommand",
    "RollbackCommand",
    "SearchCommand",
]
