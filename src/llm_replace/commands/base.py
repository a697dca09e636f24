"""Base command pattern implementation.

This module provides the foundation for all llm-replace commands,
including the CommandContext for dependency injection and the
BaseCommand abstract class for command implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from llm_replace.config.schema import LLMReplaceConfig
from llm_replace.exceptions import LLMReplaceError
from llm_replace.output.base import OutputData, OutputFormatter
from llm_replace.service import SearchReplaceService


@dataclass
class CommandContext:
    """Context object passed to commands for dependency injection.

    Attributes:
        service: Search and replace operations over the working tree.
        formatter: The output formatter for displaying results.
        config: The application configuration.
        verbose: Whether to show verbose output.
        working_dir: Root of the corpus.
    """

    service: SearchReplaceService
    formatter: OutputFormatter
    config: LLMReplaceConfig
    verbose: bool = False
    working_dir: Path = field(default_factory=Path.cwd)

    def with_verbose(self, verbose: bool = True) -> "CommandContext":
        """Create a new context with verbose mode set."""
        return replace(self, verbose=verbose)


@dataclass
class CommandResult:
    """Result of a command execution.

    Attributes:
        success: Whether the command succeeded.
        data: The result data (type depends on command).
        error: Error message if command failed.
        exit_code: Process exit code for the CLI.
        metadata: Additional metadata about the execution.
    """

    success: bool
    data: Any = None
    error: str | None = None
    exit_code: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> "CommandResult":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, exit_code: int = 1, **metadata: Any) -> "CommandResult":
        """Create a failed result."""
        return cls(success=False, error=error, exit_code=exit_code, metadata=metadata)

    @classmethod
    def from_error(cls, error: LLMReplaceError, **metadata: Any) -> "CommandResult":
        """Create a failed result carrying the exception's exit code."""
        return cls.fail(str(error), exit_code=error.exit_code, **metadata)

    def to_output_data(self, title: str | None = None) -> OutputData:
        """Convert to OutputData for formatting."""
        if self.success:
            return OutputData.from_content(content=self.data, title=title, **self.metadata)
        return OutputData.from_error(error=self.error or "Unknown error", title=title)


class BaseCommand(ABC):
    """Abstract base class for all llm-replace commands.

    Commands receive a CommandContext with all necessary dependencies
    and return a CommandResult. They never raise for expected failures.

    Example:
        class IndexCommand(BaseCommand):
            @property
            def name(self) -> str:
                return "index"

            @property
            def description(self) -> str:
                return "Index files for semantic search"

            def execute(self, ctx: CommandContext, **kwargs) -> CommandResult:
                stats = ctx.service.index()
                return CommandResult.ok(stats)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The command name (used in CLI)."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """A short description of what the command does."""
        pass

    @property
    def aliases(self) -> list[str]:
        """Alternative names for the command."""
        return []

    @abstractmethod
    def execute(self, ctx: CommandContext, **kwargs: Any) -> CommandResult:
        """Execute the command.

        Args:
            ctx: The command context with dependencies.
            **kwargs: Command-specific arguments.

        Returns:
            CommandResult indicating success/failure and data.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
