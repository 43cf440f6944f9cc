"""Call hierarchy over function declarations.

A call is a name token bound to a function and followed by ``(``. Calls
are attributed to the innermost enclosing function; calls made at file
level have no caller item and are not reported as incoming calls.
"""

from __future__ import annotations

from pathlib import Path

from kitescope.core.logging import get_logger
from kitescope.document import TextDocument, uri_to_path
from kitescope.index.models import Declaration, DeclarationKind, DocumentIndex
from kitescope.index.resolver import resolve
from kitescope.index.session import DocumentSession
from kitescope.index.workspace import WorkspaceHost, WorkspaceView
from kitescope.navigation.symbols import signature
from kitescope.protocol import (
    CallHierarchyIncomingCall,
    CallHierarchyItem,
    CallHierarchyOutgoingCall,
    Position,
    Range,
    SymbolKind,
)
from kitescope.refactor.occurrences import Target, collect_cross_file_occurrences, find_target

log = get_logger(__name__)


def is_call(index: DocumentIndex, end: int) -> bool:
    """True when the token ending at ``end`` is followed by ``(``."""
    text = index.text
    i = end
    while i < len(text) and text[i] in " \t":
        i += 1
    return i < len(text) and text[i] == "(" and index.lexmap.is_code(i)


def enclosing_function(index: DocumentIndex, offset: int) -> Declaration | None:
    """Innermost function whose body contains ``offset``."""
    best: Declaration | None = None
    best_start = -1
    for decl in index.declarations:
        if decl.kind is not DeclarationKind.FUNCTION or decl.body is None:
            continue
        start, end = decl.body
        if start < offset < end and start > best_start:
            best, best_start = decl, start
    return best


def call_item(target: Target) -> CallHierarchyItem:
    decl = target.declaration
    document = TextDocument.from_path(target.path, target.index.text)
    start, end = decl.extent or (decl.start, decl.end)
    return CallHierarchyItem(
        name=decl.name,
        kind=SymbolKind.FUNCTION,
        uri=document.uri,
        range=document.range_of(start, end),
        selection_range=document.range_of(decl.start, decl.end),
        detail=signature(decl),
    )


class CallHierarchyOps:
    """Prepare, incoming and outgoing calls.

    Items are located again from their URI and name position, so an item
    from ``prepare`` stays usable across later requests while the text is
    unchanged.
    """

    def __init__(self, session: DocumentSession, host: WorkspaceHost, extension: str = ".kite") -> None:
        self._session = session
        self._host = host
        self._extension = extension

    def prepare(self, uri: str, position: Position) -> list[CallHierarchyItem]:
        state = self._session.require(uri)
        view = WorkspaceView(self._host, self._extension)
        offset = state.document.offset_at(position)
        target = find_target(state.index, state.document.path, offset, view)
        if target is None or target.declaration.kind is not DeclarationKind.FUNCTION:
            return []
        return [call_item(target)]

    def incoming_calls(self, item: CallHierarchyItem) -> list[CallHierarchyIncomingCall]:
        """Functions calling ``item``, in this file and in files importing it."""
        view = WorkspaceView(self._host, self._extension)
        target = self._locate(item, view)
        if target is None:
            return []
        calls: list[CallHierarchyIncomingCall] = []
        for occurrences in collect_cross_file_occurrences(view, target):
            index = occurrences.index
            document = TextDocument.from_path(occurrences.path, index.text)
            by_caller: dict[int, tuple[Declaration, list[Range]]] = {}
            for start, end in occurrences.spans:
                if index is target.index and start == target.declaration.start:
                    continue
                if not is_call(index, end):
                    continue
                caller = enclosing_function(index, start)
                if caller is None:
                    continue
                entry = by_caller.setdefault(id(caller), (caller, []))
                entry[1].append(document.range_of(start, end))
            for caller, ranges in by_caller.values():
                calls.append(
                    CallHierarchyIncomingCall(
                        call_item(Target(occurrences.path, index, caller)), tuple(ranges)
                    )
                )
        log.debug("calls.incoming", name=item.name, count=len(calls))
        return calls

    def outgoing_calls(self, item: CallHierarchyItem) -> list[CallHierarchyOutgoingCall]:
        """Functions called from the body of ``item``, in order of first call."""
        view = WorkspaceView(self._host, self._extension)
        source = self._locate(item, view)
        if source is None or source.declaration.body is None:
            return []
        index = source.index
        document = TextDocument.from_path(source.path, index.text)
        body_start, body_end = source.declaration.body
        by_callee: dict[int, tuple[Target, list[Range]]] = {}
        for token in index.name_tokens():
            if not body_start < token.start < body_end or not is_call(index, token.end):
                continue
            callee = self._callee(index, source.path, token.start, token.name, view)
            if callee is None:
                continue
            entry = by_callee.setdefault(id(callee.declaration), (callee, []))
            entry[1].append(document.range_of(token.start, token.end))
        return [
            CallHierarchyOutgoingCall(call_item(callee), tuple(ranges))
            for callee, ranges in by_callee.values()
        ]

    @staticmethod
    def _callee(
        index: DocumentIndex, path: Path, offset: int, name: str, view: WorkspaceView
    ) -> Target | None:
        local = resolve(index, offset, name)
        if local is not None:
            return Target(path, index, local) if local.kind is DeclarationKind.FUNCTION else None
        match = view.find_declaration(name, path, index.imports)
        if match is None or match.declaration.kind is not DeclarationKind.FUNCTION:
            return None
        return Target(match.path, match.index, match.declaration)

    def _locate(self, item: CallHierarchyItem, view: WorkspaceView) -> Target | None:
        state = self._session.get(item.uri)
        path = uri_to_path(item.uri)
        if state is not None:
            document, index = state.document, state.index
        else:
            found = view.index(path)
            if found is None:
                return None
            document, index = TextDocument.from_path(path, found.text), found
        decl = index.declaration_at(document.offset_at(item.selection_range.start))
        if decl is None or decl.kind is not DeclarationKind.FUNCTION or decl.name != item.name:
            return None
        return Target(document.path, index, decl)
