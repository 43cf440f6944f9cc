"""Navigation operations built on scope and cross-file resolution."""

from __future__ import annotations

import re
from pathlib import Path

from kitescope.core.logging import get_logger
from kitescope.document import TextDocument
from kitescope.index.imports import is_symbol_imported, normalize_path
from kitescope.index.models import EXPORTED_KINDS, Declaration, DeclarationKind, DocumentIndex
from kitescope.index.resolver import resolve
from kitescope.index.session import DocumentSession
from kitescope.index.workspace import WorkspaceHost, WorkspaceView
from kitescope.protocol import (
    CodeLens,
    Command,
    DocumentHighlight,
    DocumentHighlightKind,
    Location,
    Position,
)
from kitescope.refactor.occurrences import (
    CONTAINER_KINDS,
    INSTANCE_KINDS,
    Target,
    collect_cross_file_occurrences,
    collect_occurrences,
    find_target,
)

log = get_logger(__name__)

_TYPE_KINDS = frozenset(
    (
        DeclarationKind.SCHEMA,
        DeclarationKind.TYPE_ALIAS,
        DeclarationKind.COMPONENT_DEFINITION,
    )
)

# Top-level declarations that get a reference-count lens
_LENS_KINDS = EXPORTED_KINDS

# ``=`` or a compound assignment right after a name, but not ``==``
_ASSIGNMENT_RE = re.compile(r"[ \t]*[+\-*/]?=(?!=)")


def _location(path: Path, index: DocumentIndex, start: int, end: int) -> Location:
    document = TextDocument.from_path(path, index.text)
    return Location(document.uri, document.range_of(start, end))


def declaration_location(target: Target) -> Location:
    decl = target.declaration
    return _location(target.path, target.index, decl.start, decl.end)


class NavigationOps:
    """Definition, type definition, references and implementations."""

    def __init__(self, session: DocumentSession, host: WorkspaceHost, extension: str = ".kite") -> None:
        self._session = session
        self._host = host
        self._extension = extension

    def _target(self, uri: str, position: Position, view: WorkspaceView) -> Target | None:
        state = self._session.require(uri)
        offset = state.document.offset_at(position)
        return find_target(state.index, state.document.path, offset, view)

    def find_definition(self, uri: str, position: Position) -> Location | None:
        view = WorkspaceView(self._host, self._extension)
        target = self._target(uri, position, view)
        return None if target is None else declaration_location(target)

    def find_type_definition(self, uri: str, position: Position) -> Location | None:
        """Where the declared type of the symbol at ``position`` is defined.

        Only schemas, type aliases and component definitions are type
        definitions; built-in types have none.
        """
        view = WorkspaceView(self._host, self._extension)
        target = self._target(uri, position, view)
        if target is None:
            return None
        decl = target.declaration
        if decl.kind in _TYPE_KINDS:
            return declaration_location(target)
        if not decl.type_name:
            return None
        type_name = decl.type_name.removesuffix("[]")
        local = resolve(target.index, decl.start, type_name)
        if local is not None:
            return (
                _location(target.path, target.index, local.start, local.end)
                if local.kind in _TYPE_KINDS
                else None
            )
        match = view.find_declaration(type_name, target.path, target.index.imports)
        if match is None or match.declaration.kind not in _TYPE_KINDS:
            return None
        return _location(match.path, match.index, match.declaration.start, match.declaration.end)

    def find_references(
        self, uri: str, position: Position, include_declaration: bool = True
    ) -> list[Location]:
        """Every occurrence of the symbol at ``position`` across the workspace."""
        view = WorkspaceView(self._host, self._extension)
        target = self._target(uri, position, view)
        if target is None:
            return []
        decl = target.declaration
        locations: list[Location] = []
        for occurrences in collect_cross_file_occurrences(view, target):
            for start, end in occurrences.spans:
                if (
                    not include_declaration
                    and occurrences.path == target.path
                    and start == decl.start
                ):
                    continue
                locations.append(_location(occurrences.path, occurrences.index, start, end))
        return locations

    def find_implementations(self, uri: str, position: Position) -> list[Location]:
        """Instances of the schema or component definition at ``position``.

        Each location spans the whole instance, keyword through closing
        brace. The defining file comes first, then importing files; within a
        file, instances appear in declaration order.
        """
        view = WorkspaceView(self._host, self._extension)
        target = self._target(uri, position, view)
        if target is None or target.declaration.kind not in CONTAINER_KINDS:
            return []
        container = target.declaration
        wanted_kind = (
            DeclarationKind.RESOURCE_INSTANCE
            if container.kind is DeclarationKind.SCHEMA
            else DeclarationKind.COMPONENT_INSTANCE
        )
        locations = [
            _location(target.path, target.index, *inst.extent)
            for inst in self._instances(target.index, container, wanted_kind)
            if inst.extent is not None and resolve(target.index, inst.extent[0], container.name) is container
        ]
        if not container.is_exported:
            return locations
        for path, index in view.importers(target.path):
            if not is_symbol_imported(index.imports, container.name, target.path, path, self._extension):
                continue
            locations.extend(
                _location(path, index, *inst.extent)
                for inst in self._instances(index, container, wanted_kind)
                if inst.extent is not None and resolve(index, inst.extent[0], container.name) is None
            )
        return locations

    def document_highlights(self, uri: str, position: Position) -> list[DocumentHighlight]:
        """Occurrences of the symbol at ``position`` within ``uri`` only.

        Binding sites and assignment targets are WRITE, everything else READ.
        """
        state = self._session.require(uri)
        view = WorkspaceView(self._host, self._extension)
        target = find_target(state.index, state.document.path, state.document.offset_at(position), view)
        if target is None:
            return []
        if target.index is state.index:
            spans = collect_occurrences(state.index, target.declaration)
        else:
            here = normalize_path(state.document.path)
            spans = next(
                (o.spans for o in collect_cross_file_occurrences(view, target) if normalize_path(o.path) == here),
                [],
            )
        binding_starts = {d.start for d in state.index.declarations}
        return [
            DocumentHighlight(
                state.document.range_of(start, end),
                DocumentHighlightKind.WRITE
                if start in binding_starts or _ASSIGNMENT_RE.match(state.index.text, end)
                else DocumentHighlightKind.READ,
            )
            for start, end in spans
        ]

    def code_lenses(self, uri: str) -> list[CodeLens]:
        """A reference count above each top-level declaration.

        Counts span the workspace and exclude the declaration itself.
        """
        state = self._session.require(uri)
        view = WorkspaceView(self._host, self._extension)
        lenses: list[CodeLens] = []
        for decl in state.index.declarations:
            if not decl.is_top_level or decl.kind not in _LENS_KINDS:
                continue
            target = Target(state.document.path, state.index, decl)
            count = sum(len(o.spans) for o in collect_cross_file_occurrences(view, target)) - 1
            name_range = state.document.range_of(decl.start, decl.end)
            title = "1 reference" if count == 1 else f"{count} references"
            command = Command(
                title,
                "editor.action.showReferences",
                (uri, name_range.start.to_dict(), []),
            )
            lenses.append(CodeLens(name_range, command))
        log.debug("navigation.code_lenses", uri=uri, count=len(lenses))
        return lenses

    @staticmethod
    def _instances(
        index: DocumentIndex, container: Declaration, kind: DeclarationKind
    ) -> list[Declaration]:
        return [
            d
            for d in index.declarations
            if d.kind is kind and d.kind in INSTANCE_KINDS and d.type_name == container.name
        ]
