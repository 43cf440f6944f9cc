"""Import statement checks: repeated files, missing files and cycles."""

from __future__ import annotations

from collections import deque
from pathlib import Path

from kitescope.index.imports import normalize_path, resolve_import_path
from kitescope.index.models import Import
from kitescope.index.workspace import WorkspaceView
from kitescope.lint.models import LintContext
from kitescope.lint.registry import rule
from kitescope.protocol import Diagnostic, DiagnosticSeverity


def _path_span(imp: Import) -> tuple[int, int]:
    """The quoted path literal, quotes included; it closes the statement."""
    return imp.end - len(imp.path) - 2, imp.end


@rule("duplicate-import", "More than one import statement for the same file")
def check_duplicate_imports(ctx: LintContext) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    first_by_path: dict[Path, Import] = {}
    for imp in ctx.index.imports:
        resolved = resolve_import_path(imp.path, ctx.path.parent, ctx.extension)
        first = first_by_path.setdefault(resolved, imp)
        if first is imp:
            continue
        diagnostics.append(
            ctx.diagnostic(
                imp.start,
                imp.end,
                f"Duplicate import: '{imp.path}' is already imported on line {first.start_line + 1}",
                DiagnosticSeverity.WARNING,
                "duplicate-import",
                data={"type": "duplicate-import", "importPath": imp.path, "firstLine": first.start_line},
            )
        )
    return diagnostics


@rule("invalid-import-path", "Import paths that do not name a readable workspace file")
def check_invalid_import_paths(ctx: LintContext) -> list[Diagnostic]:
    if ctx.view is None:
        return []
    diagnostics: list[Diagnostic] = []
    for imp in ctx.index.imports:
        if ctx.view.index(ctx.view.resolve_import(imp, ctx.path)) is not None:
            continue
        diagnostics.append(
            ctx.diagnostic(
                *_path_span(imp),
                f"Cannot find file '{imp.path}'",
                DiagnosticSeverity.ERROR,
                "invalid-import-path",
            )
        )
    return diagnostics


def find_import_cycle(view: WorkspaceView, start: Path, current: Path) -> list[Path] | None:
    """Shortest import chain from ``start`` leading back to ``current``.

    The chain begins with ``start`` and ends with ``current``. Files that
    cannot be read end their branch of the search.
    """
    queue: deque[list[Path]] = deque([[start]])
    seen = {start}
    while queue:
        chain = queue.popleft()
        index = view.index(chain[-1])
        if index is None:
            continue
        for imp in index.imports:
            target = view.resolve_import(imp, chain[-1])
            if target == current:
                return [*chain, target]
            if target not in seen:
                seen.add(target)
                queue.append([*chain, target])
    return None


@rule("circular-import", "Files importing themselves directly or through other files")
def check_circular_imports(ctx: LintContext) -> list[Diagnostic]:
    if ctx.view is None:
        return []
    current = normalize_path(ctx.path)
    diagnostics: list[Diagnostic] = []
    for imp in ctx.index.imports:
        target = ctx.view.resolve_import(imp, ctx.path)
        if target == current:
            message = "Circular import: File imports itself"
            chain = [current]
        else:
            cycle = find_import_cycle(ctx.view, target, current)
            if cycle is None:
                continue
            chain = [current, *cycle]
            message = "Circular import detected: " + " -> ".join(p.name for p in chain)
        diagnostics.append(
            ctx.diagnostic(
                imp.start,
                imp.end,
                message,
                DiagnosticSeverity.ERROR,
                "circular-import",
                data={"type": "circular-import", "chain": [str(p) for p in chain]},
            )
        )
    return diagnostics
