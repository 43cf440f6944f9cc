"""kitescope CLI - Kite editor tooling from the command line."""

import click

from kitescope import __version__
from kitescope.cli.check import check_command
from kitescope.cli.navigate import definition_command, implementations_command, references_command
from kitescope.cli.organize import organize_imports_command
from kitescope.cli.rename import rename_command
from kitescope.cli.symbols import symbols_command
from kitescope.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="kitescope")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """kitescope - scope-aware diagnostics, navigation and refactoring for Kite."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(check_command, name="check")
cli.add_command(definition_command, name="definition")
cli.add_command(references_command, name="references")
cli.add_command(implementations_command, name="implementations")
cli.add_command(rename_command, name="rename")
cli.add_command(organize_imports_command, name="organize-imports")
cli.add_command(symbols_command, name="symbols")


if __name__ == "__main__":
    cli()
