"""CLI utilities."""

from __future__ import annotations

from pathlib import Path

import click

from kitescope.core.errors import KiteScopeError
from kitescope.document import path_to_uri, uri_to_path
from kitescope.engine import KiteScope
from kitescope.protocol import Location, Position

MARKERS = (".kitescope", ".git")


def find_workspace_root(start_path: Path) -> Path:
    """Nearest ancestor of ``start_path`` holding ``.kitescope`` or ``.git``.

    Falls back to the directory of ``start_path`` itself.
    """
    start = start_path.resolve()
    base = start if start.is_dir() else start.parent
    for candidate in (base, *base.parents):
        if any((candidate / marker).exists() for marker in MARKERS):
            return candidate
    return base


def open_engine(root: Path) -> KiteScope:
    try:
        return KiteScope(root)
    except KiteScopeError as e:
        raise click.ClickException(str(e)) from e


def open_file(engine: KiteScope, path: Path) -> str:
    """Open ``path`` in the engine's session and return its URI."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e
    uri = path_to_uri(path)
    engine.open(uri, text)
    return uri


def to_position(line: int, column: int) -> Position:
    """Zero-based position from the 1-based line and column the CLI takes."""
    if line < 1 or column < 1:
        raise click.BadParameter("LINE and COL are 1-based")
    return Position(line - 1, column - 1)


def format_location(location: Location, root: Path) -> str:
    path = uri_to_path(location.uri)
    try:
        shown = path.relative_to(root)
    except ValueError:
        shown = path
    start = location.range.start
    return f"{shown}:{start.line + 1}:{start.character + 1}"
