"""Output formatting (rich, plain, JSON).

Usage:
    from llm_replace.output import get_formatter

    formatter = get_formatter("plain")
    formatter.emit(formatter.format_search(response))
"""

from typing import Any

from llm_replace.config.schema import OutputFormat
from llm_replace.output.base import OutputData, OutputFormatter
from llm_replace.output.json_fmt import JSONFormatter
from llm_replace.output.plain import PlainFormatter
from llm_replace.output.rich_fmt import RichFormatter

__all__ = [
    "OutputFormatter",
    "OutputData",
    "OutputFormat",
    "PlainFormatter",
    "JSONFormatter",
    "RichFormatter",
    "get_formatter",
]


def get_formatter(
    format_type: OutputFormat | str,
    verbose: bool = False,
    **kwargs: Any,
) -> OutputFormatter:
    """Get a formatter instance by format type.

    Args:
        format_type: The output format to use.
        verbose: Whether to enable verbose output.
        **kwargs: Additional formatter-specific options.

    Raises:
        ValueError: If format_type is not recognized.
    """
    if isinstance(format_type, str):
        format_type = OutputFormat(format_type.lower())

    formatters: dict[OutputFormat, type[OutputFormatter]] = {
        OutputFormat.PLAIN: PlainFormatter,
        OutputFormat.JSON: JSONFormatter,
        OutputFormat.RICH: RichFormatter,
    }

    formatter_class = formatters.get(format_type)
    if formatter_class is None:
        raise ValueError(f"Unknown format type: {format_type}")

    return formatter_class(verbose=verbose, **kwargs)
