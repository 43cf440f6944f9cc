"""Lexical scanning, scope indexing and import resolution for Kite documents."""

from kitescope.index.imports import extract_imports, is_symbol_imported, resolve_import_path
from kitescope.index.indexer import index_document
from kitescope.index.models import Declaration, DeclarationKind, DocumentIndex, Scope, ScopeKind
from kitescope.index.resolver import find_shadowed, resolve
from kitescope.index.session import DocumentSession
from kitescope.index.workspace import LocalWorkspace, WorkspaceHost, WorkspaceView

__all__ = [
    "Declaration",
    "DeclarationKind",
    "DocumentIndex",
    "DocumentSession",
    "LocalWorkspace",
    "Scope",
    "ScopeKind",
    "WorkspaceHost",
    "WorkspaceView",
    "extract_imports",
    "find_shadowed",
    "index_document",
    "is_symbol_imported",
    "resolve",
    "resolve_import_path",
]
