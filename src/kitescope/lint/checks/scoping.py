"""Shadowing, duplicate bindings and unresolved names."""

from __future__ import annotations

import os

from kitescope.index.models import (
    BUILTIN_FUNCTIONS,
    BUILTIN_TYPES,
    DeclarationKind,
)
from kitescope.index.resolver import find_shadowed, references
from kitescope.lint.models import LintContext
from kitescope.lint.registry import rule
from kitescope.protocol import Diagnostic, DiagnosticSeverity

_SHADOWING_KINDS = frozenset(
    (
        DeclarationKind.VARIABLE,
        DeclarationKind.LOOP_VARIABLE,
        DeclarationKind.COMPREHENSION_VARIABLE,
        DeclarationKind.PARAMETER,
    )
)


@rule("variable-shadowing", "Local bindings hiding a binding of an enclosing scope")
def check_shadowing(ctx: LintContext) -> list[Diagnostic]:
    document = ctx.document
    return [
        ctx.diagnostic(
            pair.declaration.start,
            pair.declaration.end,
            f"Variable '{pair.declaration.name}' shadows outer variable",
            DiagnosticSeverity.WARNING,
            "variable-shadowing",
            data={
                "type": "variable-shadowing",
                "name": pair.declaration.name,
                "shadowedLine": document.line_of(pair.shadowed.start),
            },
        )
        for pair in find_shadowed(ctx.index)
        if pair.declaration.kind in _SHADOWING_KINDS
    ]


@rule("duplicate-parameter", "A parameter name repeated in one function signature")
def check_duplicate_parameters(ctx: LintContext) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for decl in ctx.index.declarations:
        if decl.kind is not DeclarationKind.FUNCTION:
            continue
        seen: set[str] = set()
        for param in decl.parameters:
            if param.name in seen:
                diagnostics.append(
                    ctx.diagnostic(
                        param.start,
                        param.end,
                        f"Duplicate parameter '{param.name}'",
                        DiagnosticSeverity.ERROR,
                        "duplicate-parameter",
                    )
                )
            seen.add(param.name)
    return diagnostics


@rule("duplicate-declaration", "A name declared twice in the same scope")
def check_duplicate_declarations(ctx: LintContext) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for decl in ctx.index.declarations:
        first = decl.scope.bindings.get(decl.name)
        if first is None or first is decl:
            continue
        if decl.kind is DeclarationKind.PARAMETER and first.kind is DeclarationKind.PARAMETER:
            continue
        diagnostics.append(
            ctx.diagnostic(
                decl.start,
                decl.end,
                f"Duplicate declaration '{decl.name}'",
                DiagnosticSeverity.ERROR,
                "duplicate-declaration",
                data={"firstLine": ctx.document.line_of(first.start)},
            )
        )
    return diagnostics


def _import_path_for(ctx: LintContext, target: os.PathLike[str]) -> str:
    relative = os.path.relpath(target, ctx.path.parent)
    return relative.replace(os.sep, "/")


@rule("undefined-symbol", "Names that resolve neither locally nor through imports")
def check_undefined_symbols(ctx: LintContext) -> list[Diagnostic]:
    """Report unresolved names.

    Abstains when a wildcard import points at a file that cannot be read,
    and for type positions unless the type exists unimported in the
    workspace (provider types such as ``VM`` are defined outside it).
    """
    index = ctx.index
    view = ctx.view
    if view is None:
        return []
    for imp in index.imports:
        if imp.is_wildcard and view.index(view.resolve_import(imp, ctx.path)) is None:
            return []
    explicitly_imported = {name for imp in index.imports for name in imp.symbol_names}
    type_spans = [(ref.start, ref.end) for ref in index.type_references]

    diagnostics: list[Diagnostic] = []
    verdicts: dict[str, tuple[bool, str | None]] = {}
    for ref in references(index):
        name = ref.name
        if ref.declaration is not None or index.in_import(ref.start):
            continue
        if name in BUILTIN_FUNCTIONS or name in BUILTIN_TYPES or name in explicitly_imported:
            continue
        if name not in verdicts:
            if view.find_declaration(name, ctx.path, index.imports) is not None:
                verdicts[name] = (True, None)
            else:
                elsewhere = view.find_unimported(name, ctx.path)
                suggestion = None if elsewhere is None else _import_path_for(ctx, elsewhere.path)
                verdicts[name] = (False, suggestion)
        resolved, suggestion = verdicts[name]
        if resolved:
            continue
        in_type_position = any(start <= ref.start < end for start, end in type_spans)
        if in_type_position and suggestion is None:
            continue
        data = None
        if suggestion is not None:
            data = {"type": "missing-import", "symbol": name, "importPath": suggestion}
        diagnostics.append(
            ctx.diagnostic(
                ref.start,
                ref.end,
                f"Cannot resolve symbol '{name}'",
                DiagnosticSeverity.ERROR,
                "undefined-symbol",
                data=data,
            )
        )
    return diagnostics
