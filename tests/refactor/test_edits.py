"""Tests for edit synthesis."""

from __future__ import annotations

from kitescope.document import TextDocument
from kitescope.index.imports import extract_imports
from kitescope.refactor.edits import delete_lines, remove_import_symbol, replace_spans

URI = "file:///w/main.kite"


def _apply(text: str, edit) -> str:
    return TextDocument(URI, text).apply_edits([edit])


class TestDeleteLines:
    """Whole-line deletion never leaves a blank line behind."""

    def test_middle_line(self) -> None:
        text = "var a = 1\nvar b = 2\nvar c = 3\n"
        doc = TextDocument(URI, text)
        assert _apply(text, delete_lines(doc, 1)) == "var a = 1\nvar c = 3\n"

    def test_last_line_takes_preceding_newline(self) -> None:
        text = "var a = 1\nvar b = 2"
        doc = TextDocument(URI, text)
        assert _apply(text, delete_lines(doc, 1)) == "var a = 1"

    def test_only_line_empties_buffer(self) -> None:
        text = "var a = 1"
        assert _apply(text, delete_lines(TextDocument(URI, text), 0)) == ""

    def test_line_range(self) -> None:
        text = "var a = 1\nfun f() {\n  return\n}\nvar b = 2\n"
        doc = TextDocument(URI, text)
        assert _apply(text, delete_lines(doc, 1, 3)) == "var a = 1\nvar b = 2\n"


class TestRemoveImportSymbol:
    """Dropping one symbol from an import statement."""

    def test_one_of_many(self) -> None:
        text = 'import A, B, C from "p.kite"\nvar x = A\n'
        imp = extract_imports(text)[0]
        edit = remove_import_symbol(TextDocument(URI, text), imp, "B")
        assert _apply(text, edit) == 'import A, C from "p.kite"\nvar x = A\n'

    def test_last_symbol_deletes_line(self) -> None:
        text = 'import A from "p.kite"\nvar x = 1\n'
        imp = extract_imports(text)[0]
        edit = remove_import_symbol(TextDocument(URI, text), imp, "A")
        assert _apply(text, edit) == "var x = 1\n"

    def test_quote_style_kept(self) -> None:
        text = "import A, B from 'p.kite'"
        imp = extract_imports(text)[0]
        edit = remove_import_symbol(TextDocument(URI, text), imp, "A")
        assert _apply(text, edit) == "import B from 'p.kite'"


def test_replace_spans_touches_only_spans() -> None:
    text = "var ab = ab + abc"
    doc = TextDocument(URI, text)
    edits = replace_spans(doc, [(4, 6), (9, 11)], "x")
    assert doc.apply_edits(edits) == "var x = x + abc"
