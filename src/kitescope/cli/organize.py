"""kitescope organize-imports command."""

from pathlib import Path

import click

from kitescope.cli.utils import find_workspace_root, open_engine, open_file


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--write", is_flag=True, help="Rewrite FILE in place")
def organize_imports_command(file: Path, write: bool) -> None:
    """Merge, sort and prune the import block of FILE.

    Prints the organized file unless --write is given.
    """
    engine = open_engine(find_workspace_root(file))
    uri = open_file(engine, file)
    document = engine.session.require(uri).document
    edit = engine.organize_imports(uri)
    if edit is None:
        if not write:
            click.echo(document.text, nl=False)
        click.echo("Imports already organized", err=True)
        return
    text = document.apply_edits([edit])
    if write:
        file.write_text(text, encoding="utf-8")
        click.echo(f"Organized imports in {file}", err=True)
    else:
        click.echo(text, nl=False)
