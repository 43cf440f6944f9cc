"""KiteScope facade - the object an editor host drives.

Wires configuration, the open-document session, workspace access and the
feature operations. Every public feature method is one editor request and
runs under its own request id.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from kitescope.actions import CodeActionOps
from kitescope.config import KiteScopeConfig, load_config
from kitescope.core.logging import clear_request_id, get_logger, set_request_id
from kitescope.index.session import DocumentSession, DocumentState
from kitescope.index.workspace import LocalWorkspace, WorkspaceHost, WorkspaceView
from kitescope.lint import LintOps, LintResult
from kitescope.navigation import CallHierarchyOps, NavigationOps, document_symbols, workspace_symbols
from kitescope.protocol import (
    CallHierarchyIncomingCall,
    CallHierarchyItem,
    CallHierarchyOutgoingCall,
    CodeAction,
    CodeLens,
    Diagnostic,
    DocumentHighlight,
    DocumentSymbol,
    LinkedEditingRanges,
    Location,
    Position,
    PrepareRenameResult,
    Range,
    SymbolInformation,
    TextEdit,
    WorkspaceEdit,
)
from kitescope.refactor import RefactorOps

log = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def request(operation: str) -> Callable[[F], F]:
    """Run the wrapped method as one request with a fresh request id."""

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self: KiteScope, *args: Any, **kwargs: Any) -> Any:
            set_request_id()
            try:
                log.debug("engine.request", operation=operation)
                return fn(self, *args, **kwargs)
            finally:
                clear_request_id()

        return wrapper  # type: ignore[return-value]

    return decorator


class KiteScope:
    """Editor tooling for one Kite workspace.

    Args:
        root: Workspace root directory
        config: Settings; loaded from ``root`` when omitted
        host: Workspace access; a ``LocalWorkspace`` over ``root`` when omitted
    """

    def __init__(
        self,
        root: Path,
        config: KiteScopeConfig | None = None,
        host: WorkspaceHost | None = None,
    ) -> None:
        self.root = root
        self.config = config or load_config(root)
        self.session = DocumentSession()
        self.host = host or LocalWorkspace(root, self.session, self.config.workspace)
        extension = self.config.workspace.extension
        self.extension = extension
        self.refactor = RefactorOps(self.session, self.host, extension)
        self.navigation = NavigationOps(self.session, self.host, extension)
        self.calls = CallHierarchyOps(self.session, self.host, extension)
        self.lint = LintOps(self.session, self.host, self.config.diagnostics, extension)
        self.actions = CodeActionOps(self.session, self.host, self.config.diagnostics, extension)

    # Document lifecycle

    def open(self, uri: str, text: str, version: int = 0) -> DocumentState:
        return self.session.on_open(uri, text, version)

    def change(self, uri: str, text: str, version: int) -> DocumentState:
        return self.session.on_change(uri, text, version)

    def close(self, uri: str) -> None:
        self.session.on_close(uri)

    # Features

    @request("diagnostics")
    def diagnostics(self, uri: str) -> LintResult:
        return self.lint.check(uri)

    @request("definition")
    def definition(self, uri: str, position: Position) -> Location | None:
        return self.navigation.find_definition(uri, position)

    @request("type_definition")
    def type_definition(self, uri: str, position: Position) -> Location | None:
        return self.navigation.find_type_definition(uri, position)

    @request("references")
    def references(self, uri: str, position: Position, include_declaration: bool = True) -> list[Location]:
        return self.navigation.find_references(uri, position, include_declaration)

    @request("implementations")
    def implementations(self, uri: str, position: Position) -> list[Location]:
        return self.navigation.find_implementations(uri, position)

    @request("document_highlights")
    def document_highlights(self, uri: str, position: Position) -> list[DocumentHighlight]:
        return self.navigation.document_highlights(uri, position)

    @request("code_lenses")
    def code_lenses(self, uri: str) -> list[CodeLens]:
        return self.navigation.code_lenses(uri)

    @request("document_symbols")
    def document_symbols(self, uri: str) -> list[DocumentSymbol]:
        state = self.session.require(uri)
        return document_symbols(state.document, state.index)

    @request("workspace_symbols")
    def workspace_symbols(self, query: str = "") -> list[SymbolInformation]:
        return workspace_symbols(WorkspaceView(self.host, self.extension), query)

    @request("prepare_call_hierarchy")
    def prepare_call_hierarchy(self, uri: str, position: Position) -> list[CallHierarchyItem]:
        return self.calls.prepare(uri, position)

    @request("incoming_calls")
    def incoming_calls(self, item: CallHierarchyItem) -> list[CallHierarchyIncomingCall]:
        return self.calls.incoming_calls(item)

    @request("outgoing_calls")
    def outgoing_calls(self, item: CallHierarchyItem) -> list[CallHierarchyOutgoingCall]:
        return self.calls.outgoing_calls(item)

    @request("prepare_rename")
    def prepare_rename(self, uri: str, position: Position) -> PrepareRenameResult | None:
        return self.refactor.prepare_rename(uri, position)

    @request("rename")
    def rename(self, uri: str, position: Position, new_name: str) -> WorkspaceEdit | None:
        return self.refactor.rename(uri, position, new_name)

    @request("linked_editing_ranges")
    def linked_editing_ranges(self, uri: str, position: Position) -> LinkedEditingRanges | None:
        return self.refactor.linked_editing_ranges(uri, position)

    @request("code_actions")
    def code_actions(
        self,
        uri: str,
        selection: Range,
        diagnostics: list[Diagnostic] | None = None,
        only: list[str] | None = None,
    ) -> list[CodeAction]:
        return self.actions.code_actions(uri, selection, diagnostics, only)

    @request("organize_imports")
    def organize_imports(self, uri: str) -> TextEdit | None:
        return self.actions.organize_imports(uri)
