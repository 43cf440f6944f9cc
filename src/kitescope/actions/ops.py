"""Code action operations - quick fixes, import rewrites and source actions."""

from __future__ import annotations

from kitescope.actions.imports import (
    convert_wildcard_import,
    organize_imports,
    sort_imports,
    wildcard_import_at,
)
from kitescope.actions.quickfix import quick_fixes
from kitescope.config.models import DiagnosticsConfig
from kitescope.core.logging import get_logger
from kitescope.index.session import DocumentSession, DocumentState
from kitescope.index.workspace import WorkspaceHost, WorkspaceView
from kitescope.lint.models import LintContext
from kitescope.lint.ops import LintOps
from kitescope.lint.registry import registry
from kitescope.protocol import (
    CodeAction,
    CodeActionKind,
    Diagnostic,
    Range,
    TextEdit,
    WorkspaceEdit,
)

log = get_logger(__name__)


def _overlaps(a: Range, b: Range) -> bool:
    return a.start <= b.end and b.start <= a.end


class CodeActionOps:
    """Code actions for a range of an open document.

    Args:
        session: Open-document cache
        host: Workspace access for import targets
        config: Diagnostics settings used when diagnostics are not supplied
        extension: Source file extension
    """

    def __init__(
        self,
        session: DocumentSession,
        host: WorkspaceHost,
        config: DiagnosticsConfig | None = None,
        extension: str = ".kite",
    ) -> None:
        self._session = session
        self._host = host
        self._config = config or DiagnosticsConfig()
        self._extension = extension

    def code_actions(
        self,
        uri: str,
        selection: Range,
        diagnostics: list[Diagnostic] | None = None,
        only: list[str] | None = None,
    ) -> list[CodeAction]:
        """Actions available for ``selection``.

        When ``diagnostics`` is None the document is linted first and the
        diagnostics overlapping ``selection`` are used. ``only`` filters by kind
        prefix, as editors do.
        """
        state = self._session.require(uri)
        view = WorkspaceView(self._host, self._extension)
        if diagnostics is None:
            result = LintOps(self._session, self._host, self._config, self._extension).check(uri)
            diagnostics = [d for d in result.diagnostics if _overlaps(d.range, selection)]

        actions: list[CodeAction] = []
        for diagnostic in diagnostics:
            actions.extend(quick_fixes(state.document, state.index, diagnostic))

        for line in range(selection.start.line, selection.end.line + 1):
            imp = wildcard_import_at(state.index, line)
            if imp is None:
                continue
            edit = convert_wildcard_import(state.document, state.index, view, imp)
            if edit is not None:
                actions.append(
                    self._action(state, "Convert to named import", CodeActionKind.REFACTOR_REWRITE, edit)
                )
            break

        edit = self.organize_imports(uri, view)
        if edit is not None:
            actions.append(self._action(state, "Organize imports", CodeActionKind.SOURCE_ORGANIZE_IMPORTS, edit))
        edit = sort_imports(state.document, state.index)
        if edit is not None:
            actions.append(self._action(state, "Sort imports", CodeActionKind.SOURCE_SORT_IMPORTS, edit))

        if only:
            actions = [a for a in actions if any(a.kind == k or a.kind.startswith(k + ".") for k in only)]
        log.debug("actions.listed", uri=uri, count=len(actions))
        return actions

    def organize_imports(self, uri: str, view: WorkspaceView | None = None) -> TextEdit | None:
        """Canonical import block for ``uri`` without its unused named symbols."""
        state = self._session.require(uri)
        view = view or WorkspaceView(self._host, self._extension)
        ctx = LintContext(state.document, state.index, view, self._config)
        unused_rule = registry.get("unused-import")
        unused: set[str] = set()
        if unused_rule is not None:
            for diagnostic in unused_rule.check(ctx):
                symbol = (diagnostic.data or {}).get("symbol")
                if symbol is not None:
                    unused.add(symbol)
        return organize_imports(state.document, state.index, unused, self._extension)

    def _action(self, state: DocumentState, title: str, kind: str, edit: TextEdit) -> CodeAction:
        workspace_edit = WorkspaceEdit()
        workspace_edit.add(state.document.uri, edit)
        return CodeAction(title=title, kind=kind, edit=workspace_edit)
