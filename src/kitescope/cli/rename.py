"""kitescope rename command - scope-aware rename across the workspace."""

import json
from pathlib import Path

import click
from rich.console import Console

from kitescope.cli.utils import find_workspace_root, open_engine, open_file, to_position
from kitescope.core.errors import RefactorError
from kitescope.document import TextDocument, uri_to_path


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("line", type=int)
@click.argument("col", type=int)
@click.argument("new_name")
@click.option("--apply", "apply_edits", is_flag=True, help="Write the changes to disk")
def rename_command(file: Path, line: int, col: int, new_name: str, apply_edits: bool) -> None:
    """Rename the symbol at FILE:LINE:COL to NEW_NAME.

    Prints the workspace edit as JSON unless --apply is given.
    """
    root = find_workspace_root(file)
    engine = open_engine(root)
    uri = open_file(engine, file)
    try:
        edit = engine.rename(uri, to_position(line, col), new_name)
    except RefactorError as e:
        raise click.ClickException(e.message) from e
    if edit is None:
        raise click.ClickException("Nothing to rename at this position")

    if not apply_edits:
        click.echo(json.dumps(edit.to_dict(), indent=2))
        return

    console = Console(stderr=True)
    for target_uri, edits in edit.changes.items():
        path = uri_to_path(target_uri)
        try:
            document = TextDocument.from_path(path)
            path.write_text(document.apply_edits(edits), encoding="utf-8")
        except OSError as e:
            console.print(f"  [red]✗[/red] Failed to update {path}: {e}")
            continue
        console.print(f"  [green]✓[/green] {path} ({len(edits)} edit(s))")
