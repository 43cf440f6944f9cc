"""Comment, string and interpolation aware scanning primitives.

Every consumer (indexer, resolver, occurrence collector, diagnostics) asks
the same questions of a text: is this offset code, comment or string, and
where does this brace close. All of them are answered from one character
classification map produced by a single forward scan.

Lexical rules:
- ``"..."`` and ``'...'`` strings; a backslash escapes the next character.
- ``//`` comments run to the end of the line; ``/* */`` may span lines.
- Inside double-quoted strings, ``${expr}`` and ``$name`` are interpolation.
  Their characters are classified INTERPOLATION (code for reference
  purposes, still inside the string for everything else).
- Strings never span lines; a newline ends an unterminated literal, which is
  recorded in ``LexicalMap.unclosed_strings``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache


class CharClass(IntEnum):
    CODE = 0
    COMMENT = 1
    STRING = 2
    INTERPOLATION = 3


_CODE = CharClass.CODE
_COMMENT = CharClass.COMMENT
_STRING = CharClass.STRING
_INTERP = CharClass.INTERPOLATION

_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_IDENT_CHARS = _IDENT_START | frozenset("0123456789")

IDENTIFIER_RE = re.compile(r"(?<![A-Za-z0-9_])[A-Za-z_][A-Za-z0-9_]*")

_PAIRS = {"{": "}", "[": "]", "(": ")"}


@dataclass(frozen=True, slots=True)
class Token:
    """An identifier occurrence outside comments and plain string content."""

    name: str
    start: int
    end: int
    interpolated: bool


@dataclass(frozen=True, slots=True)
class LexicalMap:
    """Per-character classification of one text snapshot."""

    text: str
    classes: bytes
    unclosed_strings: tuple[int, ...]

    def class_at(self, offset: int) -> CharClass:
        if 0 <= offset < len(self.classes):
            return CharClass(self.classes[offset])
        return CharClass.CODE

    def is_code(self, offset: int) -> bool:
        """True for plain code, false for comments, strings and interpolation."""
        return self.class_at(offset) == _CODE

    def is_referable(self, offset: int) -> bool:
        """True where an identifier can be a reference: code or interpolation."""
        return self.class_at(offset) in (_CODE, _INTERP)

    def in_string(self, offset: int) -> bool:
        return self.class_at(offset) in (_STRING, _INTERP)

    def in_comment(self, offset: int) -> bool:
        return self.class_at(offset) == _COMMENT

    def interpolated(self, offset: int) -> bool:
        return self.class_at(offset) == _INTERP

    def find_matching(self, open_offset: int) -> int | None:
        """Offset of the bracket closing the one at ``open_offset``.

        Only brackets of the same lexical class as the opener count, so
        braces inside strings or comments never change depth.
        """
        text = self.text
        if not 0 <= open_offset < len(text) or text[open_offset] not in _PAIRS:
            return None
        opener = text[open_offset]
        closer = _PAIRS[opener]
        cls = self.classes[open_offset]
        classes = self.classes
        depth = 0
        for i in range(open_offset, len(text)):
            ch = text[i]
            if ch != opener and ch != closer:
                continue
            if classes[i] != cls:
                continue
            if ch == opener:
                depth += 1
            else:
                depth -= 1
                if depth == 0:
                    return i
        return None

    def find_code(self, char: str, start: int, end: int | None = None) -> int | None:
        """First offset of ``char`` in plain code within ``[start, end)``."""
        text = self.text
        end = len(text) if end is None else min(end, len(text))
        i = text.find(char, start, end)
        while i != -1:
            if self.classes[i] == _CODE:
                return i
            i = text.find(char, i + 1, end)
        return None

    def skip_trivia(self, offset: int) -> int:
        """Advance past whitespace and comments."""
        text = self.text
        n = len(text)
        while offset < n and (text[offset].isspace() or self.classes[offset] == _COMMENT):
            offset += 1
        return offset

    def identifiers(self) -> Iterator[Token]:
        """Identifier tokens in code and interpolation, in document order."""
        classes = self.classes
        for match in IDENTIFIER_RE.finditer(self.text):
            start = match.start()
            cls = classes[start]
            if cls == _CODE or cls == _INTERP:
                yield Token(match.group(), start, match.end(), cls == _INTERP)


@lru_cache(maxsize=64)
def scan(text: str) -> LexicalMap:
    """Classify every character of ``text``."""
    n = len(text)
    classes = bytearray(n)
    unclosed: list[int] = []
    # Each entry is [kind, value]: kind '"' or "'" holds the string start,
    # kind '{' holds the brace depth of an open ${...} interpolation.
    stack: list[list] = []
    i = 0

    def abandon_strings() -> None:
        unclosed.extend(entry[1] for entry in stack if entry[0] != "{")
        stack.clear()

    while i < n:
        ch = text[i]
        top = stack[-1] if stack else None

        if top is not None and top[0] != "{":
            # Inside a string literal
            if ch == "\n":
                abandon_strings()
                i += 1
                continue
            if ch == "\\":
                classes[i] = _STRING
                if i + 1 < n and text[i + 1] != "\n":
                    classes[i + 1] = _STRING
                    i += 2
                else:
                    i += 1
                continue
            classes[i] = _STRING
            if ch == top[0]:
                stack.pop()
                i += 1
                continue
            if ch == "$" and top[0] == '"' and i + 1 < n:
                nxt = text[i + 1]
                if nxt == "{":
                    classes[i + 1] = _STRING
                    stack.append(["{", 0])
                    i += 2
                    continue
                if nxt in _IDENT_START:
                    j = i + 1
                    while j < n and text[j] in _IDENT_CHARS:
                        classes[j] = _INTERP
                        j += 1
                    i = j
                    continue
            i += 1
            continue

        # Code, either top level or inside an interpolation
        code_class = _INTERP if top is not None else _CODE
        if ch == "/" and i + 1 < n:
            nxt = text[i + 1]
            if nxt == "/":
                end = text.find("\n", i)
                end = n if end == -1 else end
                classes[i:end] = bytes([_COMMENT]) * (end - i)
                i = end
                continue
            if nxt == "*":
                end = text.find("*/", i + 2)
                end = n if end == -1 else end + 2
                classes[i:end] = bytes([_COMMENT]) * (end - i)
                i = end
                continue
        if ch == '"' or ch == "'":
            classes[i] = _STRING
            stack.append([ch, i])
            i += 1
            continue
        if ch == "\n" and top is not None:
            abandon_strings()
            i += 1
            continue
        if top is not None:
            if ch == "{":
                top[1] += 1
            elif ch == "}":
                if top[1] == 0:
                    classes[i] = _STRING
                    stack.pop()
                    i += 1
                    continue
                top[1] -= 1
        classes[i] = code_class
        i += 1

    abandon_strings()
    return LexicalMap(text=text, classes=bytes(classes), unclosed_strings=tuple(unclosed))


def is_inside_string(text: str, offset: int) -> bool:
    """True when ``offset`` falls inside a string literal, interpolation included."""
    return scan(text).in_string(offset)


def is_inside_comment(text: str, offset: int) -> bool:
    return scan(text).in_comment(offset)


def is_interpolated(text: str, offset: int) -> bool:
    """True when ``offset`` is inside ``${...}`` or a ``$name`` reference."""
    return scan(text).interpolated(offset)


def find_matching_brace(text: str, open_offset: int) -> int | None:
    """Offset of the brace closing ``text[open_offset]``, or None if unbalanced."""
    return scan(text).find_matching(open_offset)


def find_matching_bracket(text: str, open_offset: int) -> int | None:
    """Same as ``find_matching_brace`` for ``[`` and ``(``."""
    if not 0 <= open_offset < len(text) or text[open_offset] not in "[(":
        return None
    return scan(text).find_matching(open_offset)


def iter_identifiers(text: str) -> Iterator[Token]:
    return scan(text).identifiers()


def is_identifier_char(ch: str) -> bool:
    return ch in _IDENT_CHARS


def word_at(text: str, offset: int) -> tuple[str, int, int] | None:
    """The identifier touching ``offset`` as ``(word, start, end)``.

    A cursor placed just after the last character of a word still selects it.
    """
    n = len(text)
    if not 0 <= offset <= n:
        return None
    if (offset == n or text[offset] not in _IDENT_CHARS) and offset > 0:
        if text[offset - 1] in _IDENT_CHARS:
            offset -= 1
    if offset >= n or text[offset] not in _IDENT_CHARS:
        return None
    start = offset
    while start > 0 and text[start - 1] in _IDENT_CHARS:
        start -= 1
    end = offset
    while end < n and text[end] in _IDENT_CHARS:
        end += 1
    if text[start] not in _IDENT_START:
        return None
    return text[start:end], start, end
