"""kitescope symbols command - document outline."""

import json
from pathlib import Path

import click

from kitescope.cli.utils import find_workspace_root, open_engine, open_file
from kitescope.protocol import DocumentSymbol


def _lines(symbols: list[DocumentSymbol], depth: int = 0) -> list[str]:
    lines: list[str] = []
    for symbol in symbols:
        start = symbol.selection_range.start
        detail = f" {symbol.detail}" if symbol.detail else ""
        location = f"({start.line + 1}:{start.character + 1})"
        lines.append(f"{'  ' * depth}{symbol.kind.name.lower()} {symbol.name}{detail} {location}")
        lines.extend(_lines(symbol.children, depth + 1))
    return lines


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def symbols_command(file: Path, as_json: bool) -> None:
    """Outline the top-level declarations of FILE."""
    engine = open_engine(find_workspace_root(file))
    uri = open_file(engine, file)
    symbols = engine.document_symbols(uri)
    if as_json:
        click.echo(json.dumps([s.to_dict() for s in symbols], indent=2))
        return
    for line in _lines(symbols) or ["No symbols"]:
        click.echo(line)
