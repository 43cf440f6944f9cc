"""Literal type mismatches and function return checks."""

from __future__ import annotations

import re

from kitescope.index.models import Declaration, DeclarationKind, DocumentIndex
from kitescope.lint.literals import infer_value_type, is_type_compatible, value_span
from kitescope.lint.models import LintContext
from kitescope.lint.registry import rule
from kitescope.protocol import Diagnostic, DiagnosticSeverity
from kitescope.refactor.occurrences import instance_type, member_of

_RETURN_RE = re.compile(r"(?<![A-Za-z0-9_.])return(?![A-Za-z0-9_])")

_TYPED_VALUE_KINDS = frozenset(
    (
        DeclarationKind.VARIABLE,
        DeclarationKind.INPUT,
        DeclarationKind.OUTPUT,
        DeclarationKind.PROPERTY,
    )
)


@rule("type-mismatch", "Literal values incompatible with their declared type")
def check_type_mismatch(ctx: LintContext) -> list[Diagnostic]:
    index = ctx.index
    diagnostics: list[Diagnostic] = []
    for decl in index.declarations:
        if decl.kind not in _TYPED_VALUE_KINDS or not decl.type_name or decl.value_start is None:
            continue
        start, end = value_span(index, decl.value_start)
        actual = infer_value_type(index.text[start:end])
        if not is_type_compatible(decl.type_name, actual):
            diagnostics.append(
                ctx.diagnostic(
                    start,
                    end,
                    f"Type mismatch: expected '{decl.type_name}' but got '{actual}'",
                    DiagnosticSeverity.ERROR,
                    "type-mismatch",
                )
            )

    for key in index.property_keys:
        if key.instance.kind is not DeclarationKind.RESOURCE_INSTANCE:
            continue
        schema = instance_type(index, ctx.path, key.instance, ctx.view)
        if schema is None or schema.declaration.kind is not DeclarationKind.SCHEMA:
            continue
        prop = member_of(schema.index, schema.declaration, key.name)
        if prop is None or not prop.type_name:
            continue
        start, end = value_span(index, key.value_start)
        actual = infer_value_type(index.text[start:end])
        if not is_type_compatible(prop.type_name, actual):
            diagnostics.append(
                ctx.diagnostic(
                    start,
                    end,
                    f"Type mismatch: property '{key.name}' expects '{prop.type_name}' but got '{actual}'",
                    DiagnosticSeverity.ERROR,
                    "type-mismatch",
                )
            )
    return diagnostics


def _returns(index: DocumentIndex, fun: Declaration) -> list[int]:
    """Offsets of ``return`` keywords in the function's own body."""
    assert fun.body is not None
    start, end = fun.body
    nested = [
        d.body
        for d in index.declarations
        if d.kind is DeclarationKind.FUNCTION and d is not fun and d.body is not None
        and start < d.body[0] < end
    ]
    return [
        m.start()
        for m in _RETURN_RE.finditer(index.text, start, end)
        if index.lexmap.is_code(m.start()) and not any(s < m.start() < e for s, e in nested)
    ]


def _functions_with_return_type(index: DocumentIndex) -> list[Declaration]:
    return [
        d
        for d in index.declarations
        if d.kind is DeclarationKind.FUNCTION
        and d.body is not None
        and d.return_type
        and d.return_type != "void"
    ]


@rule("missing-return", "Functions with a return type but no return statement")
def check_missing_return(ctx: LintContext) -> list[Diagnostic]:
    return [
        ctx.diagnostic(
            fun.start,
            fun.end,
            f"Function '{fun.name}' has return type '{fun.return_type}' but no return statement",
            DiagnosticSeverity.ERROR,
            "missing-return",
        )
        for fun in _functions_with_return_type(ctx.index)
        if not _returns(ctx.index, fun)
    ]


@rule("return-type-mismatch", "Returned literals incompatible with the declared return type")
def check_return_type_mismatch(ctx: LintContext) -> list[Diagnostic]:
    index = ctx.index
    diagnostics: list[Diagnostic] = []
    for fun in _functions_with_return_type(index):
        assert fun.return_type is not None
        for offset in _returns(index, fun):
            value_start = offset + len("return")
            while value_start < len(index.text) and index.text[value_start] in " \t":
                value_start += 1
            start, end = value_span(index, value_start)
            actual = infer_value_type(index.text[start:end])
            if not is_type_compatible(fun.return_type, actual):
                diagnostics.append(
                    ctx.diagnostic(
                        start,
                        end,
                        f"Return type mismatch: expected '{fun.return_type}' but got '{actual}'",
                        DiagnosticSeverity.ERROR,
                        "return-type-mismatch",
                    )
                )
    return diagnostics
