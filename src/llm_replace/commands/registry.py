"""Command registry for discovering and managing commands."""

from typing import TypeVar

from llm_replace.commands.base import BaseCommand

# Type for command classes
CommandClass = TypeVar("CommandClass", bound=type[BaseCommand])


class CommandRegistry:
    """Registry for discovering and managing commands.

    Usage:
        @CommandRegistry.register
        class SearchCommand(BaseCommand):
            ...

        cmd = CommandRegistry.get_instance("grep")  # by alias
    """

    _commands: dict[str, type[BaseCommand]] = {}
    _aliases: dict[str, str] = {}  # alias -> command name

    @classmethod
    def register(cls, command_class: CommandClass) -> CommandClass:
        """Decorator to register a command class."""
        cls.register_command(command_class)
        return command_class

    @classmethod
    def register_command(cls, command_class: type[BaseCommand]) -> None:
        """Register a command class.

        Raises:
            ValueError: If a command with the same name is already registered.
        """
        instance = command_class()
        name = instance.name

        if name in cls._commands:
            raise ValueError(f"Command '{name}' is already registered")

        cls._commands[name] = command_class

        for alias in instance.aliases:
            if alias in cls._aliases or alias in cls._commands:
                raise ValueError(f"Alias '{alias}' conflicts with existing command or alias")
            cls._aliases[alias] = name

    @classmethod
    def get(cls, name: str) -> type[BaseCommand] | None:
        """Get a command class by name or alias."""
        if name in cls._commands:
            return cls._commands[name]
        if name in cls._aliases:
            return cls._commands[cls._aliases[name]]
        return None

    @classmethod
    def get_instance(cls, name: str) -> BaseCommand | None:
        command_class = cls.get(name)
        if command_class is None:
            return None
        return command_class()

    @classmethod
    def list_commands(cls) -> list[type[BaseCommand]]:
        return list(cls._commands.values())

    @classmethod
    def list_names(cls) -> list[str]:
        return list(cls._commands.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._commands or name in cls._aliases

    @classmethod
    def unregister(cls, name: str) -> bool:
        """Unregister a command by name.

        Returns:
            True if unregistered, False if not found.
        """
        if name not in cls._commands:
            return False

        instance = cls._commands[name]()
        for alias in instance.aliases:
            cls._aliases.pop(alias, None)

        del cls._commands[name]
        return True

    @classmethod
    def clear(cls) -> None:
        """Clear all registered commands (mainly for testing)."""
        cls._commands.clear()
        cls._aliases.clear()

    @classmethod
    def get_command_info(cls) -> list[dict[str, str]]:
        """Get name, description and aliases of all registered commands."""
        info = []
        for command_class in cls._commands.values():
            instance = command_class()
            info.append(
                {
                    "name": instance.name,
                    "description": instance.description,
                    "aliases": ", ".join(instance.aliases) if instance.aliases else "",
                }
            )
        return info
