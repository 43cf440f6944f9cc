"""Rename and linked-editing operations."""

from __future__ import annotations

import re
from pathlib import Path

from kitescope.core.errors import RefactorError
from kitescope.core.logging import get_logger
from kitescope.document import TextDocument
from kitescope.index.lexical import word_at
from kitescope.index.models import BUILTIN_TYPES, KEYWORDS, DeclarationKind
from kitescope.index.session import DocumentSession, DocumentState
from kitescope.index.workspace import WorkspaceHost, WorkspaceView
from kitescope.protocol import (
    LinkedEditingRanges,
    Position,
    PrepareRenameResult,
    WorkspaceEdit,
)
from kitescope.refactor.edits import replace_spans
from kitescope.refactor.occurrences import (
    Target,
    collect_cross_file_occurrences,
    collect_occurrences,
    find_target,
)

log = get_logger(__name__)

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_LINKED_KINDS = frozenset(
    (
        DeclarationKind.VARIABLE,
        DeclarationKind.LOOP_VARIABLE,
        DeclarationKind.COMPREHENSION_VARIABLE,
        DeclarationKind.PARAMETER,
    )
)


def validate_new_name(name: str) -> None:
    """Raise RefactorError unless ``name`` can replace an identifier."""
    if not _IDENTIFIER_RE.match(name):
        raise RefactorError.invalid_new_name(name, "must be a letter or '_' followed by letters, digits or '_'")
    if name in KEYWORDS:
        raise RefactorError.invalid_new_name(name, "is a reserved keyword")
    if name in BUILTIN_TYPES:
        raise RefactorError.invalid_new_name(name, "is a built-in type")


class RefactorOps:
    """Scope-aware rename and linked editing for open documents.

    Args:
        session: Open-document cache
        host: Workspace access for cross-file renames
        extension: Source file extension
    """

    def __init__(self, session: DocumentSession, host: WorkspaceHost, extension: str = ".kite") -> None:
        self._session = session
        self._host = host
        self._extension = extension

    def _view(self) -> WorkspaceView:
        return WorkspaceView(self._host, self._extension)

    def _target(self, state: DocumentState, offset: int, view: WorkspaceView | None) -> Target | None:
        return find_target(state.index, state.document.path, offset, view)

    def prepare_rename(self, uri: str, position: Position) -> PrepareRenameResult | None:
        """Range and placeholder of a renameable identifier, or None.

        Keywords, built-in types, decorator names, comments and plain string
        content are not renameable.
        """
        state = self._session.require(uri)
        document = state.document
        offset = document.offset_at(position)
        word = word_at(document.text, offset)
        if word is None:
            return None
        name, start, end = word
        if name in KEYWORDS or name in BUILTIN_TYPES:
            return None
        if self._target(state, offset, self._view()) is None:
            return None
        return PrepareRenameResult(document.range_of(start, end), name)

    def rename(self, uri: str, position: Position, new_name: str) -> WorkspaceEdit | None:
        """Edits renaming the symbol at ``position`` in every file that sees it.

        Raises:
            RefactorError: ``new_name`` is not a valid identifier.
        """
        validate_new_name(new_name)
        state = self._session.require(uri)
        view = self._view()
        target = self._target(state, state.document.offset_at(position), view)
        if target is None:
            return None
        edit = WorkspaceEdit()
        if target.name == new_name:
            return edit
        for occurrences in collect_cross_file_occurrences(view, target):
            document = self._document_for(occurrences.path, occurrences.index.text)
            for text_edit in replace_spans(document, occurrences.spans, new_name):
                edit.add(document.uri, text_edit)
        log.info(
            "refactor.rename",
            symbol=target.name,
            new_name=new_name,
            kind=target.declaration.kind.value,
            files=len(edit.changes),
            edits=edit.edit_count,
        )
        return edit

    def linked_editing_ranges(self, uri: str, position: Position) -> LinkedEditingRanges | None:
        """Ranges to edit together for a local binding (loop, parameter, local variable)."""
        state = self._session.require(uri)
        document = state.document
        target = self._target(state, document.offset_at(position), None)
        if target is None:
            return None
        decl = target.declaration
        if decl.kind not in _LINKED_KINDS or decl.is_exported:
            return None
        spans = collect_occurrences(state.index, decl)
        if len(spans) < 2:
            return None
        return LinkedEditingRanges(tuple(document.range_of(s, e) for s, e in spans))

    def _document_for(self, path: Path, text: str) -> TextDocument:
        return TextDocument.from_path(path, text)
