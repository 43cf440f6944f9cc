"""Workspace access and cross-file declaration lookup.

The engine reads other files only through a ``WorkspaceHost``. Nothing is
indexed ahead of time: each request builds a ``WorkspaceView`` that indexes
candidate files on demand and forgets them when the request ends.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from kitescope.config.models import WorkspaceConfig
from kitescope.core.logging import get_logger
from kitescope.document import path_to_uri
from kitescope.index.imports import (
    imports_file,
    is_symbol_imported,
    normalize_path,
    resolve_import_path,
)
from kitescope.index.indexer import index_document
from kitescope.index.models import Declaration, DeclarationKind, DocumentIndex, Import

if TYPE_CHECKING:
    from kitescope.index.session import DocumentSession

log = get_logger(__name__)

# Never traversed
HARDCODED_DIRS: frozenset[str] = frozenset((".git", ".svn", ".hg", ".bzr", ".kitescope"))

# Dependency and build output directories
DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        "node_modules",
        ".venv",
        "venv",
        "__pycache__",
        ".terraform",
        "dist",
        "build",
        ".idea",
        ".vscode",
    )
)

# Declaration kinds searched for a cross-file name, in priority order
_LOOKUP_ORDER: tuple[DeclarationKind, ...] = (
    DeclarationKind.SCHEMA,
    DeclarationKind.COMPONENT_DEFINITION,
    DeclarationKind.FUNCTION,
    DeclarationKind.TYPE_ALIAS,
    DeclarationKind.RESOURCE_INSTANCE,
    DeclarationKind.COMPONENT_INSTANCE,
    DeclarationKind.VARIABLE,
)


class WorkspaceHost(Protocol):
    """Capabilities the host supplies to every cross-file feature."""

    def find_files_in_workspace(self) -> list[Path]:
        """Candidate source files, in host-defined order."""
        ...

    def get_file_content(self, path: Path, from_document_uri: str | None = None) -> str | None:
        """Current content of ``path``; open buffers win over disk."""
        ...

    def get_declarations(self, uri: str) -> list[Declaration] | None:
        """Declarations cached for an open document."""
        ...


class LocalWorkspace:
    """``WorkspaceHost`` over a directory tree, overlaid with open buffers."""

    def __init__(
        self,
        root: Path,
        session: DocumentSession | None = None,
        config: WorkspaceConfig | None = None,
    ) -> None:
        self.root = root.resolve()
        self.session = session
        self.config = config or WorkspaceConfig()
        self._pruned = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS | set(self.config.exclude_dirs)

    def find_files_in_workspace(self) -> list[Path]:
        files: list[Path] = []
        limit = self.config.max_file_size_kb * 1024
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = [d for d in dirnames if d not in self._pruned]
            for filename in filenames:
                if not filename.endswith(self.config.extension):
                    continue
                path = Path(dirpath) / filename
                try:
                    if path.stat().st_size > limit:
                        log.debug("workspace.file_too_large", path=str(path))
                        continue
                except OSError:
                    continue
                files.append(path)
        return files

    def get_file_content(self, path: Path, from_document_uri: str | None = None) -> str | None:  # noqa: ARG002
        if self.session is not None:
            text = self.session.text_for_path(path)
            if text is not None:
                return text
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            log.debug("workspace.read_failed", path=str(path), error=str(e))
            return None

    def get_declarations(self, uri: str) -> list[Declaration] | None:
        if self.session is None:
            return None
        return self.session.get_declarations(uri)


@dataclass(frozen=True)
class CrossFileMatch:
    """A declaration found in another workspace file."""

    path: Path
    index: DocumentIndex
    declaration: Declaration

    @property
    def uri(self) -> str:
        return path_to_uri(self.path)


class WorkspaceView:
    """Request-scoped, read-through view of the workspace.

    Files are listed and indexed at most once per view.
    """

    def __init__(self, host: WorkspaceHost, extension: str = ".kite") -> None:
        self.host = host
        self.extension = extension
        self._files: list[Path] | None = None
        self._indexes: dict[Path, DocumentIndex | None] = {}

    def files(self) -> list[Path]:
        if self._files is None:
            self._files = [normalize_path(p) for p in self.host.find_files_in_workspace()]
        return self._files

    def index(self, path: Path, from_document_uri: str | None = None) -> DocumentIndex | None:
        """Index of ``path``, or None when it cannot be read or indexed."""
        path = normalize_path(path)
        if path in self._indexes:
            return self._indexes[path]
        index: DocumentIndex | None = None
        text = self.host.get_file_content(path, from_document_uri)
        if text is not None:
            try:
                index = index_document(text)
            except Exception:
                log.warning("workspace.index_failed", path=str(path), exc_info=True)
        self._indexes[path] = index
        return index

    def others(self, current: Path) -> Iterator[tuple[Path, DocumentIndex]]:
        """Indexed workspace files other than ``current``."""
        current = normalize_path(current)
        for path in self.files():
            if path == current:
                continue
            index = self.index(path)
            if index is not None:
                yield path, index

    def find_declaration(
        self, name: str, current_path: Path, imports: list[Import]
    ) -> CrossFileMatch | None:
        """First exported ``name`` in another file that the current file imports.

        A declaration that exists but is not imported is not returned.
        """
        if not imports:
            return None
        for path, index in self.others(current_path):
            if not is_symbol_imported(imports, name, path, current_path, self.extension):
                continue
            candidates = [d for d in index.exported() if d.name == name]
            for kind in _LOOKUP_ORDER:
                for decl in candidates:
                    if decl.kind is kind:
                        log.debug("workspace.cross_file_hit", name=name, path=str(path))
                        return CrossFileMatch(path, index, decl)
        return None

    def find_unimported(self, name: str, current_path: Path) -> CrossFileMatch | None:
        """An exported ``name`` elsewhere in the workspace, imported or not."""
        for path, index in self.others(current_path):
            for decl in index.exported():
                if decl.name == name:
                    return CrossFileMatch(path, index, decl)
        return None

    def importers(self, defining_path: Path) -> Iterator[tuple[Path, DocumentIndex]]:
        """Files with at least one import resolving to ``defining_path``."""
        for path, index in self.others(defining_path):
            if any(imports_file(imp, defining_path, path, self.extension) for imp in index.imports):
                yield path, index

    def resolve_import(self, imp: Import, current_path: Path) -> Path:
        return resolve_import_path(imp.path, current_path.parent, self.extension)
