"""Replacement text synthesis: capture substitution and case preservation."""

import re
from collections.abc import Mapping, Sequence

from llm_replace.exceptions import SubstitutionError

# $$, $&, ${name}/${n}, $n/$nn
_TEMPLATE_RE = re.compile(r"\$(?:(\$)|(&)|\{(\w+)\}|(\d{1,2}))")


def expand_template(
    template: str,
    matched_text: str,
    groups: Sequence[str | None] = (),
    named_groups: Mapping[str, str | None] | None = None,
) -> str:
    """Expand a replacement template against one match.

    ``$1``..``$99`` and ``${n}`` insert numbered groups, ``${name}`` a
    named group, ``$&`` and ``$0`` the whole match, ``$$`` a literal
    dollar. A group that exists but did not participate expands to an
    empty string. A two-digit reference past the group count is read as a
    one-digit reference followed by a literal digit when that one-digit
    group exists.

    Raises:
        SubstitutionError: If a template references a group the pattern
            does not have.
    """
    named_groups = named_groups or {}

    def group_text(index: int) -> str:
        if index == 0:
            return matched_text
        if index > len(groups):
            raise SubstitutionError(
                f"Capture group ${index} out of range "
                f"(pattern has {len(groups)} group{'s' if len(groups) != 1 else ''})"
            )
        return groups[index - 1] or ""

    def replace(m: re.Match[str]) -> str:
        if m.group(1):
            return "$"
        if m.group(2):
            return matched_text
        name = m.group(3)
        if name is not None:
            if name.isdigit():
                return group_text(int(name))
            if name not in named_groups:
                raise SubstitutionError(f"Unknown named group ${{{name}}}")
            return named_groups[name] or ""
        digits = m.group(4)
        index = int(digits)
        if len(digits) == 2 and index > len(groups) and int(digits[0]) <= len(groups):
            return group_text(int(digits[0])) + digits[1]
        return group_text(index)

    return _TEMPLATE_RE.sub(replace, template)


def preserve_case(original: str, replacement: str) -> str:
    """Adapt ``replacement`` to the letter case of ``original``.

    ALL CAPS stays all caps, all lower stays lower, and a leading capital
    is carried over. Anything else is returned unchanged.
    """
    if not replacement or not any(c.isalpha() for c in original):
        return replacement
    if original.isupper():
        return replacement.upper()
    if original.islower():
        return replacement.lower()
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement
