"""Pure application of planned edits to text."""

from collections.abc import Sequence

from llm_replace.exceptions import OverlappingSpansError
from llm_replace.replace.models import PlannedEdit


def validate_edits(edits: Sequence[PlannedEdit]) -> None:
    """Check that edits target one file, are sorted, and do not overlap.

    Raises:
        OverlappingSpansError: If the batch violates the invariant.
    """
    for previous, current in zip(edits, edits[1:]):
        if previous.span.file != current.span.file:
            raise OverlappingSpansError(
                f"Edit batch mixes files: {previous.span.file}, {current.span.file}"
            )
        if (
            current.span.start_offset <= previous.span.start_offset
            or current.span.start_offset < previous.span.end_offset
        ):
            raise OverlappingSpansError(
                f"Edits in {current.span.file} overlap or are unsorted at offsets "
                f"{previous.span.start_offset}-{previous.span.end_offset} and "
                f"{current.span.start_offset}-{current.span.end_offset}"
            )


def apply_edits(text: str, edits: Sequence[PlannedEdit]) -> tuple[str, list[tuple[int, int]]]:
    """Apply sorted, non-overlapping edits from the last to the first.

    Args:
        text: Original file text.
        edits: Edits ordered by start offset.

    Returns:
        The new text and, for each edit in input order, the
        ``(start, end)`` offsets of its new text in the result.

    Raises:
        OverlappingSpansError: If the edits are unsorted or overlap.
    """
    validate_edits(edits)

    for edit in reversed(edits):
        text = text[: edit.span.start_offset] + edit.new_text + text[edit.span.end_offset :]

    applied: list[tuple[int, int]] = []
    delta = 0
    for edit in edits:
        start = edit.span.start_offset + delta
        applied.append((start, start + len(edit.new_text)))
        delta += len(edit.new_text) - (edit.span.end_offset - edit.span.start_offset)
    return text, applied
