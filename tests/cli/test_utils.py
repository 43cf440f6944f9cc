"""Tests for CLI utilities."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from kitescope.cli.utils import find_workspace_root, format_location, to_position
from kitescope.document import path_to_uri
from kitescope.protocol import Location, Position, Range


class TestFindWorkspaceRoot:
    """Tests for find_workspace_root."""

    @pytest.mark.parametrize("marker", [".kitescope", ".git"])
    def test_finds_marker_from_subdirectory(self, tmp_path: Path, marker: str) -> None:
        """Walks up to the nearest directory holding a marker."""
        (tmp_path / marker).mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_workspace_root(nested) == tmp_path.resolve()

    def test_starts_from_file_parent(self, tmp_path: Path) -> None:
        (tmp_path / ".kitescope").mkdir()
        file = tmp_path / "mod" / "main.kite"
        file.parent.mkdir()
        file.write_text("")
        assert find_workspace_root(file) == tmp_path.resolve()

    def test_falls_back_to_start_directory(self, tmp_path: Path) -> None:
        nested = tmp_path / "plain"
        nested.mkdir()
        start = nested.resolve()
        assert find_workspace_root(nested) in (start, *start.parents)


class TestToPosition:
    def test_converts_to_zero_based(self) -> None:
        assert to_position(3, 5) == Position(2, 4)

    @pytest.mark.parametrize(("line", "col"), [(0, 1), (1, 0)])
    def test_rejects_zero(self, line: int, col: int) -> None:
        with pytest.raises(click.BadParameter):
            to_position(line, col)


def test_format_location_relative_to_root(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    location = Location(path_to_uri(root / "lib" / "a.kite"), Range(Position(4, 2), Position(4, 6)))
    assert format_location(location, root) == "lib/a.kite:5:3"
