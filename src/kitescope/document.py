"""Text document snapshots and offset/position conversion."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from urllib.parse import unquote, urlparse

from kitescope.protocol import Position, Range, TextEdit


def path_to_uri(path: Path | str) -> str:
    return Path(path).resolve().as_uri()


def uri_to_path(uri: str) -> Path:
    """Convert a file:// URI to a path; other strings are treated as paths."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


@dataclass(frozen=True)
class TextDocument:
    """An immutable snapshot of one document.

    Offsets are Python string indices. Positions are zero-based
    (line, character) pairs where character counts string indices
    within the line.
    """

    uri: str
    text: str
    version: int = 0

    @classmethod
    def from_path(cls, path: Path, text: str | None = None, version: int = 0) -> TextDocument:
        if text is None:
            text = path.read_text(encoding="utf-8")
        return cls(uri=path_to_uri(path), text=text, version=version)

    @cached_property
    def path(self) -> Path:
        return uri_to_path(self.uri)

    @cached_property
    def line_starts(self) -> list[int]:
        starts = [0]
        starts.extend(i + 1 for i, ch in enumerate(self.text) if ch == "\n")
        return starts

    @property
    def line_count(self) -> int:
        return len(self.line_starts)

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self.line_starts, offset) - 1
        return Position(line, offset - self.line_starts[line])

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= self.line_count:
            return len(self.text)
        start, end = self.line_span(position.line)
        return min(start + max(position.character, 0), end)

    def range_of(self, start: int, end: int) -> Range:
        return Range(self.position_at(start), self.position_at(end))

    def line_span(self, line: int) -> tuple[int, int]:
        """Offsets of a line's first character and its end, excluding the newline."""
        start = self.line_starts[line]
        if line + 1 < self.line_count:
            return start, self.line_starts[line + 1] - 1
        return start, len(self.text)

    def line_text(self, line: int) -> str:
        start, end = self.line_span(line)
        return self.text[start:end]

    def line_of(self, offset: int) -> int:
        return self.position_at(offset).line

    def apply_edits(self, edits: Iterable[TextEdit]) -> str:
        """Text after applying non-overlapping ``edits``, in any order."""
        spans = sorted(
            ((self.offset_at(e.range.start), self.offset_at(e.range.end), e.new_text) for e in edits),
            key=lambda span: (span[0], span[1]),
        )
        parts: list[str] = []
        cursor = 0
        for start, end, new_text in spans:
            parts.append(self.text[cursor:start])
            parts.append(new_text)
            cursor = max(cursor, end)
        parts.append(self.text[cursor:])
        return "".join(parts)
