"""Shallow literal typing.

Only literal values are typed; any other expression is unknown and never
reported. Custom types (schemas, aliases) accept anything.
"""

from __future__ import annotations

import re

from kitescope.index.models import DocumentIndex

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_DOUBLE_RE = re.compile(r'"(?:[^"\\\n]|\\.)*"')
_SINGLE_RE = re.compile(r"'(?:[^'\\\n]|\\.)*'")

PRIMITIVES = frozenset(("string", "number", "boolean"))


def value_span(index: DocumentIndex, start: int) -> tuple[int, int]:
    """Extent of the expression starting at ``start``.

    Bracketed values run to their closing bracket. Anything else stops at
    the end of the line or at an unbalanced closer, comma or semicolon,
    without trailing comments or whitespace.
    """
    text = index.text
    if start < len(text) and text[start] in "{[(":
        close = index.lexmap.find_matching(start)
        if close is not None:
            return start, close + 1
    line_end = text.find("\n", start)
    line_end = len(text) if line_end == -1 else line_end
    end = line_end
    depth = 0
    for i in range(start, line_end):
        if not index.lexmap.is_code(i):
            continue
        ch = text[i]
        if ch in "{[(":
            depth += 1
        elif ch in "}])":
            if depth == 0:
                end = i
                break
            depth -= 1
        elif ch in ",;" and depth == 0:
            end = i
            break
    while end > start and (text[end - 1].isspace() or index.lexmap.in_comment(end - 1)):
        end -= 1
    return start, end


def infer_value_type(expression: str) -> str | None:
    """Literal type of ``expression``: string, number, boolean, null, object, array."""
    value = expression.strip()
    if not value:
        return None
    if _DOUBLE_RE.fullmatch(value) or _SINGLE_RE.fullmatch(value):
        return "string"
    if value in ("true", "false"):
        return "boolean"
    if value == "null":
        return "null"
    if _NUMBER_RE.fullmatch(value):
        return "number"
    if value.startswith("{") and value.endswith("}"):
        return "object"
    if value.startswith("[") and value.endswith("]"):
        return "array"
    return None


def is_type_compatible(declared: str, actual: str | None) -> bool:
    if actual is None or actual == "null" or declared == "any":
        return True
    if declared.endswith("[]"):
        return actual == "array"
    if declared in PRIMITIVES:
        return actual == declared
    if declared == "object":
        return actual == "object"
    return True
