"""Unterminated string literals."""

from __future__ import annotations

from kitescope.lint.models import LintContext
from kitescope.lint.registry import rule
from kitescope.protocol import Diagnostic, DiagnosticSeverity


@rule("unclosed-string", "String literals not closed before the end of the line")
def check_unclosed_strings(ctx: LintContext) -> list[Diagnostic]:
    text = ctx.index.text
    diagnostics: list[Diagnostic] = []
    for start in ctx.index.lexmap.unclosed_strings:
        end = text.find("\n", start)
        diagnostics.append(
            ctx.diagnostic(
                start,
                len(text) if end == -1 else end,
                "Unclosed string literal",
                DiagnosticSeverity.ERROR,
                "unclosed-string",
            )
        )
    return diagnostics
