"""Per-document index cache with explicit lifecycle hooks.

The session is the only owner of mutable engine state. Each open document
maps to its latest snapshot and index; the index is rebuilt in full on
every change and dropped on close.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from kitescope.core.errors import DocumentError
from kitescope.core.logging import get_logger
from kitescope.document import TextDocument, path_to_uri
from kitescope.index.indexer import empty_index, index_document
from kitescope.index.models import Declaration, DocumentIndex

log = get_logger(__name__)


@dataclass(frozen=True)
class DocumentState:
    document: TextDocument
    index: DocumentIndex


class DocumentSession:
    """Open documents keyed by URI."""

    def __init__(self) -> None:
        self._documents: dict[str, DocumentState] = {}

    def __contains__(self, uri: str) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def on_open(self, uri: str, text: str, version: int = 0) -> DocumentState:
        state = self._build(uri, text, version)
        self._documents[uri] = state
        log.debug("session.document_opened", uri=uri, version=version)
        return state

    def on_change(self, uri: str, text: str, version: int) -> DocumentState:
        """Replace a document's content; stale versions are ignored."""
        current = self._documents.get(uri)
        if current is not None and version < current.document.version:
            log.debug(
                "session.stale_change_ignored",
                uri=uri,
                version=version,
                current=current.document.version,
            )
            return current
        state = self._build(uri, text, version)
        self._documents[uri] = state
        return state

    def on_close(self, uri: str) -> None:
        if self._documents.pop(uri, None) is not None:
            log.debug("session.document_closed", uri=uri)

    def get(self, uri: str) -> DocumentState | None:
        return self._documents.get(uri)

    def require(self, uri: str) -> DocumentState:
        state = self._documents.get(uri)
        if state is None:
            raise DocumentError.document_not_open(uri)
        return state

    def get_declarations(self, uri: str) -> list[Declaration] | None:
        state = self._documents.get(uri)
        return None if state is None else state.index.declarations

    def text_for_path(self, path: Path) -> str | None:
        """Open-buffer content for ``path``, if the document is open."""
        state = self._documents.get(path_to_uri(path))
        return None if state is None else state.document.text

    def _build(self, uri: str, text: str, version: int) -> DocumentState:
        document = TextDocument(uri=uri, text=text, version=version)
        try:
            index = index_document(text)
        except Exception:
            log.exception("session.index_failed", uri=uri, version=version)
            index = empty_index(text)
        return DocumentState(document, index)
