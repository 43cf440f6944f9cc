"""Edit synthesis shared by rename and the remove-unused quick fixes."""

from __future__ import annotations

from collections.abc import Iterable

from kitescope.document import TextDocument
from kitescope.index.imports import ImportEntry
from kitescope.index.models import Import
from kitescope.protocol import TextEdit


def replace_spans(document: TextDocument, spans: Iterable[tuple[int, int]], new_text: str) -> list[TextEdit]:
    """Replace exactly each identifier span; surrounding text is untouched."""
    return [TextEdit.replace(document.range_of(start, end), new_text) for start, end in spans]


def delete_lines(document: TextDocument, first: int, last: int | None = None) -> TextEdit:
    """Delete whole lines ``first..last`` without leaving a blank line behind.

    The final line of the file takes the preceding newline with it; a
    deletion covering every line empties the buffer.
    """
    last = first if last is None else last
    text = document.text
    start = document.line_starts[first]
    if first == 0 and last >= document.line_count - 1:
        return TextEdit.delete(document.range_of(0, len(text)))
    if last >= document.line_count - 1:
        return TextEdit.delete(document.range_of(start - 1, len(text)))
    return TextEdit.delete(document.range_of(start, document.line_starts[last + 1]))


def remove_import_symbol(document: TextDocument, imp: Import, symbol: str) -> TextEdit:
    """Drop ``symbol`` from a named import; the last symbol takes the statement with it."""
    remaining = tuple(name for name in imp.symbol_names if name != symbol)
    if not remaining:
        return delete_lines(document, imp.start_line, imp.end_line)
    entry = ImportEntry(imp.path, imp.quote, remaining)
    return TextEdit.replace(document.range_of(imp.start, imp.end), entry.render())
