"""kitescope check command - report diagnostics."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from kitescope.cli.utils import find_workspace_root, open_engine, open_file
from kitescope.config.models import WorkspaceConfig
from kitescope.document import uri_to_path
from kitescope.index.workspace import LocalWorkspace
from kitescope.lint import LintResult
from kitescope.protocol import DiagnosticSeverity

_SEVERITY_STYLES = {
    DiagnosticSeverity.ERROR: ("error", "red"),
    DiagnosticSeverity.WARNING: ("warning", "yellow"),
    DiagnosticSeverity.INFORMATION: ("info", "blue"),
    DiagnosticSeverity.HINT: ("hint", "dim"),
}


def _collect_files(paths: tuple[Path, ...], config: WorkspaceConfig) -> list[Path]:
    """Files named directly plus the source files under each directory."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            workspace = LocalWorkspace(path, config=config)
            files.extend(sorted(workspace.find_files_in_workspace()))
        else:
            files.append(path.resolve())
    return files


def _make_table(results: list[LintResult], root: Path) -> Table:
    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("Location", style="cyan")
    table.add_column("Severity")
    table.add_column("Rule", style="dim")
    table.add_column("Message")
    for result in results:
        path = uri_to_path(result.uri)
        try:
            shown = path.relative_to(root)
        except ValueError:
            shown = path
        for d in result.diagnostics:
            label, color = _SEVERITY_STYLES[d.severity]
            start = d.range.start
            table.add_row(
                f"{shown}:{start.line + 1}:{start.character + 1}",
                f"[{color}]{label}[/{color}]",
                d.code or "",
                d.message,
            )
    return table


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check_command(ctx: click.Context, paths: tuple[Path, ...], as_json: bool) -> None:
    """Report diagnostics for Kite files.

    PATHS are files or directories (default: current directory).
    """
    paths = paths or (Path("."),)
    root = find_workspace_root(paths[0])
    engine = open_engine(root)
    files = _collect_files(paths, engine.config.workspace)
    uris = [open_file(engine, path) for path in files]
    results = [engine.diagnostics(uri) for uri in uris]
    has_errors = any(result.has_errors for result in results)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {"uri": r.uri, "diagnostics": [d.to_dict() for d in r.diagnostics]}
                    for r in results
                ],
                indent=2,
            )
        )
    else:
        console = Console()
        total = sum(len(r.diagnostics) for r in results)
        if total:
            console.print(_make_table(results, root))
            console.print()
        style = "red" if has_errors else "green"
        marker = "✗" if has_errors else "✓"
        console.print(f"[{style}]{marker}[/{style}] {len(files)} file(s) checked, {total} diagnostic(s)")

    if has_errors:
        ctx.exit(1)
