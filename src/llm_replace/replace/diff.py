"""Unified diffs and structured line changes for previews."""

import difflib

from llm_replace.replace.models import DiffInfo, DiffType, LineChange, LineChangeType


def create_diff(original: str, modified: str, filename: str = "file", context: int = 3) -> str:
    """Create a unified diff between two versions of a file.

    Args:
        original: Original content.
        modified: Modified content.
        filename: Name of file for diff header.
        context: Lines of context around each hunk.

    Returns:
        Unified diff string (empty if the contents are equal).
    """
    original_lines = original.splitlines(keepends=True)
    modified_lines = modified.splitlines(keepends=True)

    # Keep hunks line-separated when the last line has no newline
    if original_lines and not original_lines[-1].endswith("\n"):
        original_lines[-1] += "\n\\ No newline at end of file\n"
    if modified_lines and not modified_lines[-1].endswith("\n"):
        modified_lines[-1] += "\n\\ No newline at end of file\n"

    diff = difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
        n=context,
    )
    return "".join(diff)


def diff_info(original: str, modified: str) -> DiffInfo:
    """Describe which lines a change adds and removes.

    Line numbers are 1-based: removed lines use original numbering, added
    lines use modified numbering. ``start_line``/``end_line`` bound the
    changed lines in the original.
    """
    old_lines = original.splitlines()
    new_lines = modified.splitlines()
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)

    changes: list[LineChange] = []
    removed: list[str] = []
    added: list[str] = []
    touched: list[int] = []

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        for i in range(i1, i2):
            changes.append(LineChange(i + 1, LineChangeType.REMOVED, old_lines[i]))
            removed.append(old_lines[i])
            touched.append(i + 1)
        for j in range(j1, j2):
            changes.append(LineChange(j + 1, LineChangeType.ADDED, new_lines[j]))
            added.append(new_lines[j])
        if i1 == i2:
            # Pure insertion: anchor at the original line it follows
            touched.append(max(i1, 1))

    if removed and not added:
        change_type = DiffType.DELETION
    elif added and not removed:
        change_type = DiffType.ADDITION
    else:
        change_type = DiffType.MODIFICATION

    return DiffInfo(
        type=change_type,
        old_text="\n".join(removed),
        new_text="\n".join(added),
        start_line=min(touched) if touched else 0,
        end_line=max(touched) if touched else 0,
        changes=changes,
    )
