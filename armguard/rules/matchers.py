"""
Named pattern matchers over serialized output text.

ARM expressions live inside JSON strings that start with '['. A list*()
call or a parameters('...') reference only matters when it sits inside
such an expression, not when it is merely mentioned in a plain string.
Instead of parsing the expression language, each match is classified by
the nearest unescaped '[' or '"' to its left.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

# list<Name>( preceded by '[', '(' or ',' so that names which merely
# contain "list" (myListKeys, blacklist) are not mistaken for list*() calls.
LIST_FUNCTION_PATTERN = re.compile(r"[\[\(,]\s*(list\w+)\s*\(", re.IGNORECASE)

_PARAMETER_REFERENCE = r"parameters\s*\(\s*'{name}'\s*\)"

EXPRESSION_START = "["
STRING_START = '"'


@dataclass(frozen=True)
class ListFunctionCall:
    function: str
    start: int
    text: str


def _is_escaped(text: str, index: int) -> bool:
    """True if the character at index is preceded by an odd run of backslashes."""
    backslashes = 0
    pos = index - 1
    while pos >= 0 and text[pos] == "\\":
        backslashes += 1
        pos -= 1
    return backslashes % 2 == 1


def preceding_boundary(text: str, index: int) -> Optional[str]:
    """Return the nearest unescaped '[' or '"' before index, or None."""
    pos = index - 1
    while pos >= 0:
        char = text[pos]
        if char in (EXPRESSION_START, STRING_START) and not _is_escaped(text, pos):
            return char
        pos -= 1
    return None


def in_expression(text: str, index: int) -> bool:
    return preceding_boundary(text, index) == EXPRESSION_START


def find_list_function_calls(text: str) -> list[ListFunctionCall]:
    """Find list*() calls that occur inside a live template expression."""
    calls: list[ListFunctionCall] = []
    for match in LIST_FUNCTION_PATTERN.finditer(text):
        matched = match.group(0)
        if matched.strip().startswith(EXPRESSION_START) or in_expression(text, match.start()):
            calls.append(ListFunctionCall(
                function=match.group(1),
                start=match.start(),
                text=matched,
            ))
    return calls


@lru_cache(maxsize=256)
def secure_parameter_pattern(name: str) -> re.Pattern[str]:
    """Pattern for a parameters('<name>') reference to exactly this parameter."""
    return re.compile(
        _PARAMETER_REFERENCE.format(name=re.escape(name)),
        re.IGNORECASE | re.DOTALL,
    )


def find_parameter_reference(text: str, name: str) -> Optional[int]:
    """
    Return the position of a live parameters('<name>') reference, or None.

    Only the first reference is considered. When it sits inside a plain
    string rather than an expression, the output is treated as clean.
    """
    match = secure_parameter_pattern(name).search(text)
    if match is None:
        return None
    if in_expression(text, match.start()):
        return match.start()
    return None
