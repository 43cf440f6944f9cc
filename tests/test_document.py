"""Tests for text document snapshots."""

from __future__ import annotations

from pathlib import Path

import pytest

from kitescope.document import TextDocument, path_to_uri, uri_to_path
from kitescope.protocol import Position, Range, TextEdit

TEXT = "var a = 1\nvar bb = 2\n"


@pytest.fixture
def document() -> TextDocument:
    return TextDocument("file:///ws/main.kite", TEXT)


class TestPositions:
    """Offset and position conversion."""

    @pytest.mark.parametrize(
        ("offset", "position"),
        [
            (0, Position(0, 0)),
            (9, Position(0, 9)),
            (10, Position(1, 0)),
            (14, Position(1, 4)),
            (len(TEXT), Position(2, 0)),
        ],
    )
    def test_position_at(self, document: TextDocument, offset: int, position: Position) -> None:
        assert document.position_at(offset) == position
        assert document.offset_at(position) == offset

    def test_out_of_range_values_clamp(self, document: TextDocument) -> None:
        assert document.position_at(-5) == Position(0, 0)
        assert document.offset_at(Position(0, 99)) == 9
        assert document.offset_at(Position(9, 0)) == len(TEXT)

    def test_lines(self, document: TextDocument) -> None:
        assert document.line_count == 3
        assert document.line_text(1) == "var bb = 2"
        assert document.line_span(2) == (len(TEXT), len(TEXT))
        assert document.line_of(12) == 1


class TestApplyEdits:
    def test_edits_in_any_order(self, document: TextDocument) -> None:
        edits = [
            TextEdit.replace(Range(Position(1, 4), Position(1, 6)), "c"),
            TextEdit.replace(Range(Position(0, 4), Position(0, 5)), "x"),
        ]
        assert document.apply_edits(edits) == "var x = 1\nvar c = 2\n"

    def test_insert_and_delete(self, document: TextDocument) -> None:
        edits = [
            TextEdit.insert(Position(0, 0), "// top\n"),
            TextEdit.delete(Range(Position(1, 0), Position(2, 0))),
        ]
        assert document.apply_edits(edits) == "// top\nvar a = 1\n"


class TestUris:
    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "dir with space" / "main.kite"
        uri = path_to_uri(path)
        assert uri.startswith("file://")
        assert "%20" in uri
        assert uri_to_path(uri) == path.resolve()

    def test_plain_path_passes_through(self) -> None:
        assert uri_to_path("/ws/main.kite") == Path("/ws/main.kite")

    def test_from_path_reads_disk(self, tmp_path: Path) -> None:
        path = tmp_path / "main.kite"
        path.write_text("var a = 1\n")
        document = TextDocument.from_path(path, version=3)
        assert document.text == "var a = 1\n"
        assert document.version == 3
        assert document.path == path.resolve()
