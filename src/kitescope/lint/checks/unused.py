"""Unused variables, functions and imports."""

from __future__ import annotations

from kitescope.index.imports import is_symbol_imported
from kitescope.index.models import Declaration, DeclarationKind, DocumentIndex
from kitescope.index.resolver import is_referenced, references
from kitescope.lint.models import LintContext
from kitescope.lint.registry import rule
from kitescope.protocol import Diagnostic, DiagnosticSeverity

_PREFIXES = {
    DeclarationKind.VARIABLE: "Variable",
    DeclarationKind.INPUT: "Input",
    DeclarationKind.OUTPUT: "Output",
    DeclarationKind.LOOP_VARIABLE: "Loop variable",
    DeclarationKind.COMPREHENSION_VARIABLE: "Loop variable",
    DeclarationKind.PARAMETER: "Parameter",
}


def _used_by_importers(ctx: LintContext, decl: Declaration) -> bool:
    """True when another file imports ``decl`` and names it outside the import line."""
    if ctx.view is None or not decl.is_exported:
        return False
    for path, index in ctx.view.importers(ctx.path):
        if not is_symbol_imported(index.imports, decl.name, ctx.path, path, ctx.view.extension):
            continue
        for ref in references(index, decl.name):
            if ref.declaration is None and not index.in_import(ref.start):
                return True
    return False


def _is_used(ctx: LintContext, decl: Declaration) -> bool:
    return is_referenced(ctx.index, decl) or _used_by_importers(ctx, decl)


@rule("unused-variable", "Variables, inputs, outputs, loop variables and parameters never read")
def check_unused_variables(ctx: LintContext) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for decl in ctx.index.declarations:
        prefix = _PREFIXES.get(decl.kind)
        if prefix is None or decl.name.startswith("_"):
            continue
        if _is_used(ctx, decl):
            continue
        severity = DiagnosticSeverity.WARNING
        if decl.kind is DeclarationKind.OUTPUT and ctx.config.unused_output_as_hint:
            severity = DiagnosticSeverity.HINT
        diagnostics.append(
            ctx.diagnostic(
                decl.start,
                decl.end,
                f"{prefix} '{decl.name}' is declared but never used",
                severity,
                "unused-variable",
                unnecessary=True,
                data={"type": "unused-variable", "name": decl.name, "kind": decl.kind.value},
            )
        )
    return diagnostics


@rule("unused-function", "Functions never called")
def check_unused_functions(ctx: LintContext) -> list[Diagnostic]:
    return [
        ctx.diagnostic(
            decl.start,
            decl.end,
            f"Function '{decl.name}' is declared but never called",
            DiagnosticSeverity.WARNING,
            "unused-function",
            unnecessary=True,
        )
        for decl in ctx.index.declarations
        if decl.kind is DeclarationKind.FUNCTION and not _is_used(ctx, decl)
    ]


def _unbound_names(index: DocumentIndex) -> set[str]:
    """Names referenced outside import statements that no local scope binds."""
    return {
        ref.name
        for ref in references(index)
        if ref.declaration is None and not index.in_import(ref.start)
    }


@rule("unused-import", "Imported symbols never referenced")
def check_unused_imports(ctx: LintContext) -> list[Diagnostic]:
    index = ctx.index
    used = _unbound_names(index)
    diagnostics: list[Diagnostic] = []
    for imp in index.imports:
        base = {
            "type": "unused-import",
            "importPath": imp.path,
            "isWildcard": imp.is_wildcard,
            "importLineStart": imp.start_line,
            "importLineEnd": imp.end_line,
        }
        if imp.is_wildcard:
            if ctx.view is None:
                continue
            target = ctx.view.index(ctx.view.resolve_import(imp, ctx.path))
            if target is None:
                continue
            if any(d.name in used for d in target.exported()):
                continue
            diagnostics.append(
                ctx.diagnostic(
                    imp.start,
                    imp.end,
                    f'Unused import from "{imp.path}"',
                    DiagnosticSeverity.HINT,
                    "unused-import",
                    unnecessary=True,
                    data={**base, "symbol": None},
                )
            )
            continue
        for symbol in imp.symbols:
            if symbol.name in used:
                continue
            diagnostics.append(
                ctx.diagnostic(
                    symbol.start,
                    symbol.end,
                    f"Unused import '{symbol.name}' from \"{imp.path}\"",
                    DiagnosticSeverity.HINT,
                    "unused-import",
                    unnecessary=True,
                    data={**base, "symbol": symbol.name},
                )
            )
    return diagnostics
