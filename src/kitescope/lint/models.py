"""Lint models - rule context and results."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from kitescope.config.models import DiagnosticsConfig
from kitescope.document import TextDocument
from kitescope.index.imports import DEFAULT_EXTENSION
from kitescope.index.models import DocumentIndex
from kitescope.index.workspace import WorkspaceView
from kitescope.protocol import Diagnostic, DiagnosticSeverity, DiagnosticTag


@dataclass
class LintContext:
    """Everything a rule may look at for one document."""

    document: TextDocument
    index: DocumentIndex
    view: WorkspaceView | None = None
    config: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)

    @cached_property
    def path(self) -> Path:
        return self.document.path

    @property
    def extension(self) -> str:
        return self.view.extension if self.view is not None else DEFAULT_EXTENSION

    def diagnostic(
        self,
        start: int,
        end: int,
        message: str,
        severity: DiagnosticSeverity,
        code: str,
        *,
        unnecessary: bool = False,
        data: dict[str, Any] | None = None,
    ) -> Diagnostic:
        return Diagnostic(
            range=self.document.range_of(start, end),
            message=message,
            severity=severity,
            code=code,
            tags=(DiagnosticTag.UNNECESSARY,) if unnecessary else (),
            data=data,
        )


@dataclass(frozen=True)
class LintRule:
    """A named diagnostic rule."""

    rule_id: str
    description: str
    check: Callable[[LintContext], list[Diagnostic]]


@dataclass
class LintResult:
    """Diagnostics for one document plus the rules that failed to run."""

    uri: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    failed_rules: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)
