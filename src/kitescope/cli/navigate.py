"""kitescope definition/references/implementations commands."""

import json
from pathlib import Path

import click

from kitescope.cli.utils import find_workspace_root, format_location, open_engine, open_file, to_position
from kitescope.protocol import Location


def _emit(locations: list[Location], root: Path, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps([location.to_dict() for location in locations], indent=2))
        return
    if not locations:
        click.echo("No results")
        return
    for location in locations:
        click.echo(format_location(location, root))


_file_argument = click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
_line_argument = click.argument("line", type=int)
_column_argument = click.argument("col", type=int)
_json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


@click.command()
@_file_argument
@_line_argument
@_column_argument
@_json_option
def definition_command(file: Path, line: int, col: int, as_json: bool) -> None:
    """Show where the symbol at FILE:LINE:COL is declared."""
    root = find_workspace_root(file)
    engine = open_engine(root)
    uri = open_file(engine, file)
    location = engine.definition(uri, to_position(line, col))
    _emit([location] if location is not None else [], root, as_json)


@click.command()
@_file_argument
@_line_argument
@_column_argument
@click.option("--include-declaration", is_flag=True, help="Also list the declaration itself")
@_json_option
def references_command(file: Path, line: int, col: int, include_declaration: bool, as_json: bool) -> None:
    """List every reference to the symbol at FILE:LINE:COL."""
    root = find_workspace_root(file)
    engine = open_engine(root)
    uri = open_file(engine, file)
    locations = engine.references(uri, to_position(line, col), include_declaration)
    _emit(locations, root, as_json)


@click.command()
@_file_argument
@_line_argument
@_column_argument
@_json_option
def implementations_command(file: Path, line: int, col: int, as_json: bool) -> None:
    """List instances of the schema or component at FILE:LINE:COL."""
    root = find_workspace_root(file)
    engine = open_engine(root)
    uri = open_file(engine, file)
    _emit(engine.implementations(uri, to_position(line, col)), root, as_json)
