"""Static worst-case backtracking estimate for regular expressions.

The estimate walks the parsed pattern tree:

- An unbounded repeat nested in another unbounded repeat, or an unbounded
  repeat over alternatives that can match the same characters, is treated
  as exponential.
- A run of adjacent unbounded repeats whose character sets overlap (e.g.
  ``\\d+\\d+``, ``.*\\w+``) is polynomial: ``n ** (run + 1)`` for a
  reference input length ``n``.
- Anything else is linear.

Possessive repeats and atomic groups never backtrack and are not counted.
Character sets are approximated over ASCII plus one non-ASCII stand-in.

The default budget admits two overlapping repeats (``.*\\w+``,
``\\w+\\s*\\w+``) and rejects longer runs and exponential patterns.

Parsing uses ``re._parser`` and ``re._constants``, which are CPython
internals (Python 3.11+) rather than public API.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from re import _constants as sre
from re import _parser

from llm_replace.exceptions import InvalidPatternError, PatternTooComplexError

DEFAULT_STEP_BUDGET = 1_000_000_000

_NON_ASCII = "é"
_ALPHABET = frozenset(chr(c) for c in range(128)) | {_NON_ASCII}
_DIGIT = frozenset("0123456789")
_SPACE = frozenset(" \t\n\r\f\v")
_WORD = frozenset(c for c in _ALPHABET if c.isalnum() or c == "_")

_CATEGORIES = {
    sre.CATEGORY_DIGIT: _DIGIT,
    sre.CATEGORY_NOT_DIGIT: _ALPHABET - _DIGIT,
    sre.CATEGORY_SPACE: _SPACE,
    sre.CATEGORY_NOT_SPACE: _ALPHABET - _SPACE,
    sre.CATEGORY_WORD: _WORD,
    sre.CATEGORY_NOT_WORD: _ALPHABET - _WORD,
}


@dataclass
class _Node:
    chars: frozenset[str] = frozenset()
    unbounded: bool = False
    has_unbounded: bool = False
    can_be_empty: bool = False
    star_height: int = 0
    chain: int = 0
    exponential: bool = False
    overlapping_alternatives: bool = False
    variable: bool = False


def _char(code: int, ignore_case: bool) -> frozenset[str]:
    c = chr(code) if code < 128 else _NON_ASCII
    if ignore_case:
        return frozenset({c, c.lower(), c.upper()}) & _ALPHABET
    return frozenset({c})


def _class_chars(items: list, ignore_case: bool) -> frozenset[str]:
    negate = False
    chars: set[str] = set()
    for op, av in items:
        if op == sre.NEGATE:
            negate = True
        elif op == sre.LITERAL:
            chars |= _char(av, ignore_case)
        elif op == sre.RANGE:
            lo, hi = av
            chars.update(chr(c) for c in range(lo, min(hi, 127) + 1))
            if hi > 127:
                chars.add(_NON_ASCII)
        elif op == sre.CATEGORY:
            chars |= _CATEGORIES.get(av, _ALPHABET)
        else:
            chars |= _ALPHABET
    if ignore_case:
        chars |= {c.swapcase() for c in chars} & _ALPHABET
    return _ALPHABET - chars if negate else frozenset(chars)


def _analyze_seq(subpattern: _parser.SubPattern | list, ignore_case: bool) -> _Node:
    result = _Node(can_be_empty=True)
    chars: set[str] = set()
    run = 0
    run_chars: frozenset[str] = frozenset()

    for op, av in subpattern:
        node = _analyze_node(op, av, ignore_case)
        chars |= node.chars
        result.star_height = max(result.star_height, node.star_height)
        result.chain = max(result.chain, node.chain)
        result.exponential |= node.exponential
        result.overlapping_alternatives |= node.overlapping_alternatives
        result.has_unbounded |= node.has_unbounded
        result.variable |= node.variable
        result.can_be_empty &= node.can_be_empty

        if node.unbounded:
            if run and run_chars & node.chars:
                run += 1
                run_chars = run_chars | node.chars
            elif run and node.can_be_empty:
                run_chars = run_chars | node.chars
            else:
                run = 1
                run_chars = node.chars
            result.chain = max(result.chain, run)
        elif not node.can_be_empty:
            run = 0
            run_chars = frozenset()

    result.chars = frozenset(chars)
    return result


def _analyze_node(op: object, av: object, ignore_case: bool) -> _Node:
    if op == sre.LITERAL:
        return _Node(chars=_char(av, ignore_case))  # type: ignore[arg-type]
    if op == sre.NOT_LITERAL:
        return _Node(chars=_ALPHABET - _char(av, ignore_case), variable=True)  # type: ignore[arg-type]
    if op == sre.ANY:
        return _Node(chars=_ALPHABET, variable=True)
    if op == sre.IN:
        return _Node(chars=_class_chars(av, ignore_case), variable=True)  # type: ignore[arg-type]
    if op == sre.AT:
        return _Node(can_be_empty=True)
    if op in (sre.ASSERT, sre.ASSERT_NOT):
        body = _analyze_seq(av[1], ignore_case)  # type: ignore[index]
        return _Node(can_be_empty=True, exponential=body.exponential)
    if op == sre.SUBPATTERN:
        _group, add_flags, del_flags, pattern = av  # type: ignore[misc]
        case = (ignore_case or bool(add_flags & re.IGNORECASE)) and not (
            del_flags & re.IGNORECASE
        )
        body = _analyze_seq(pattern, case)
        body.unbounded = body.has_unbounded
        return body
    if op == sre.ATOMIC_GROUP:
        body = _analyze_seq(av, ignore_case)  # type: ignore[arg-type]
        return _Node(chars=body.chars, can_be_empty=body.can_be_empty, variable=True)
    if op == sre.BRANCH:
        alternatives = [_analyze_seq(alt, ignore_case) for alt in av[1]]  # type: ignore[index]
        node = _Node(variable=True)
        for alt in alternatives:
            node.chars |= alt.chars
            node.star_height = max(node.star_height, alt.star_height)
            node.chain = max(node.chain, alt.chain)
            node.exponential |= alt.exponential
            node.has_unbounded |= alt.has_unbounded
            node.can_be_empty |= alt.can_be_empty
        for i, left in enumerate(alternatives):
            for right in alternatives[i + 1 :]:
                if left.chars & right.chars and (left.variable or right.variable):
                    node.overlapping_alternatives = True
        return node
    if op in (sre.MAX_REPEAT, sre.MIN_REPEAT):
        lo, hi, pattern = av  # type: ignore[misc]
        body = _analyze_seq(pattern, ignore_case)
        unbounded = hi == sre.MAXREPEAT
        node = _Node(
            chars=body.chars,
            unbounded=unbounded,
            has_unbounded=unbounded or body.has_unbounded,
            can_be_empty=lo == 0 or body.can_be_empty,
            star_height=body.star_height + (1 if unbounded else 0),
            chain=body.chain,
            exponential=body.exponential,
            overlapping_alternatives=body.overlapping_alternatives,
            variable=True,
        )
        if unbounded and (body.star_height >= 1 or body.overlapping_alternatives):
            node.exponential = True
        return node
    if op == sre.POSSESSIVE_REPEAT:
        _lo, _hi, pattern = av  # type: ignore[misc]
        body = _analyze_seq(pattern, ignore_case)
        return _Node(chars=body.chars, can_be_empty=True, exponential=body.exponential, variable=True)
    if op == sre.GROUPREF_EXISTS:
        _group, yes, no = av  # type: ignore[misc]
        branches = [_analyze_seq(yes, ignore_case)]
        if no is not None:
            branches.append(_analyze_seq(no, ignore_case))
        node = _Node(variable=True, can_be_empty=True)
        for branch in branches:
            node.chars |= branch.chars
            node.chain = max(node.chain, branch.chain)
            node.exponential |= branch.exponential
            node.star_height = max(node.star_height, branch.star_height)
        return node
    # GROUPREF and anything unknown: may consume any character
    return _Node(chars=_ALPHABET, variable=True)


@lru_cache(maxsize=256)
def estimate_steps(pattern: str, flags: int = 0, input_length: int = 1000) -> float:
    """Estimate worst-case matching steps for ``pattern`` on one input.

    Args:
        pattern: Regular expression source.
        flags: ``re`` flags the pattern will be compiled with.
        input_length: Reference input length ``n``.

    Returns:
        Estimated steps: ``n`` for linear patterns, ``n ** (k + 1)`` for a
        run of ``k`` overlapping unbounded repeats, ``2 ** n`` (capped) for
        exponential patterns.

    Raises:
        InvalidPatternError: If the pattern does not parse.
    """
    try:
        parsed = _parser.parse(pattern, flags)
    except re.error as e:
        raise InvalidPatternError(f"Invalid regex {pattern!r}: {e}") from e

    analysis = _analyze_seq(parsed, bool(flags & re.IGNORECASE))
    n = float(input_length)
    if analysis.exponential:
        return 2.0 ** min(input_length, 1000)
    return n ** (analysis.chain + 1)


def check_complexity(
    pattern: str,
    flags: int = 0,
    *,
    step_budget: int = DEFAULT_STEP_BUDGET,
    input_length: int = 1000,
) -> float:
    """Reject patterns whose estimated cost exceeds the step budget.

    Returns:
        The estimated step count.

    Raises:
        PatternTooComplexError: If the estimate exceeds ``step_budget``.
    """
    steps = estimate_steps(pattern, flags, input_length)
    if steps > step_budget:
        raise PatternTooComplexError(
            f"Regex {pattern!r} may need ~{steps:.3g} steps on "
            f"{input_length}-char input (budget {step_budget})"
        )
    return steps
