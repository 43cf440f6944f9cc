"""Occurrence collection for rename, linked editing and references.

An occurrence is an identifier span bound to a target declaration. Tokens
are found lexically (comments and plain string content never match,
interpolation does) and kept only when resolution lands on the target, so
same-named bindings in unrelated or shadowing scopes are excluded.

Members (schema properties, component inputs and outputs) are not scope
references at their use sites. They are matched through the instances
whose type is the owning schema or component: ``name = value`` keys in
instance bodies, and ``instance.name`` accesses.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from kitescope.document import path_to_uri
from kitescope.index.imports import is_symbol_imported
from kitescope.index.lexical import word_at
from kitescope.index.models import (
    KEYWORDS,
    Declaration,
    DeclarationKind,
    DocumentIndex,
    ScopeKind,
)
from kitescope.index.resolver import resolve
from kitescope.index.workspace import WorkspaceView

Span = tuple[int, int]

INSTANCE_KINDS = frozenset((DeclarationKind.RESOURCE_INSTANCE, DeclarationKind.COMPONENT_INSTANCE))
CONTAINER_KINDS = frozenset((DeclarationKind.SCHEMA, DeclarationKind.COMPONENT_DEFINITION))
MEMBER_KINDS = frozenset((DeclarationKind.PROPERTY, DeclarationKind.INPUT, DeclarationKind.OUTPUT))


@dataclass(frozen=True)
class Target:
    """A declaration together with the file that defines it."""

    path: Path
    index: DocumentIndex
    declaration: Declaration

    @property
    def uri(self) -> str:
        return path_to_uri(self.path)

    @property
    def name(self) -> str:
        return self.declaration.name


@dataclass
class FileOccurrences:
    path: Path
    index: DocumentIndex
    spans: list[Span] = field(default_factory=list)

    @property
    def uri(self) -> str:
        return path_to_uri(self.path)


def container_of(index: DocumentIndex, member: Declaration) -> Declaration | None:
    """The schema or component definition whose body declares ``member``."""
    scope = member.scope
    if scope.kind not in (ScopeKind.SCHEMA, ScopeKind.COMPONENT):
        return None
    for decl in index.declarations:
        if decl.kind in CONTAINER_KINDS and decl.body is not None and decl.body[0] == scope.start:
            return decl
    return None


def member_of(index: DocumentIndex, container: Declaration, name: str) -> Declaration | None:
    if container.body is None:
        return None
    member = index.scope_at(container.body[0]).bindings.get(name)
    if member is not None and member.kind in MEMBER_KINDS:
        return member
    return None


def instance_type(
    index: DocumentIndex, path: Path, instance: Declaration, view: WorkspaceView | None
) -> Target | None:
    """The schema or component definition an instance is declared with."""
    if not instance.type_name or instance.extent is None:
        return None
    local = resolve(index, instance.extent[0], instance.type_name)
    if local is not None:
        return Target(path, index, local) if local.kind in CONTAINER_KINDS else None
    if view is None:
        return None
    match = view.find_declaration(instance.type_name, path, index.imports)
    if match is None or match.declaration.kind not in CONTAINER_KINDS:
        return None
    return Target(match.path, match.index, match.declaration)


def _member_target(
    index: DocumentIndex, path: Path, offset: int, name: str, view: WorkspaceView | None
) -> Target | None:
    instance: Declaration | None = None
    for key in index.property_keys:
        if key.start <= offset <= key.end:
            instance = key.instance
            break
    else:
        for access in index.member_accesses:
            if access.start <= offset <= access.end:
                obj = resolve(index, access.object_start, access.object_name)
                if obj is not None and obj.kind in INSTANCE_KINDS:
                    instance = obj
                break
    if instance is None:
        return None
    container = instance_type(index, path, instance, view)
    if container is None:
        return None
    member = member_of(container.index, container.declaration, name)
    return None if member is None else Target(container.path, container.index, member)


def find_target(
    index: DocumentIndex, path: Path, offset: int, view: WorkspaceView | None = None
) -> Target | None:
    """The declaration the identifier at ``offset`` binds or refers to."""
    word = word_at(index.text, offset)
    if word is None:
        return None
    name, start, _ = word
    if name in KEYWORDS or not index.lexmap.is_referable(start):
        return None
    if start > 0 and index.text[start - 1] == "@":
        return None
    for decl in index.declarations:
        if decl.start == start:
            return Target(path, index, decl)
    if start in index.excluded_starts:
        return _member_target(index, path, start, name, view)
    local = resolve(index, start, name)
    if local is not None:
        return Target(path, index, local)
    if view is not None:
        match = view.find_declaration(name, path, index.imports)
        if match is not None:
            return Target(match.path, match.index, match.declaration)
    return None


def _member_spans(index: DocumentIndex, name: str, owns: Callable[[Declaration], bool]) -> list[Span]:
    spans: list[Span] = []
    for key in index.property_keys:
        if key.name == name and owns(key.instance):
            spans.append((key.start, key.end))
    for access in index.member_accesses:
        if access.name != name:
            continue
        obj = resolve(index, access.object_start, access.object_name)
        if obj is not None and obj.kind in INSTANCE_KINDS and owns(obj):
            spans.append((access.start, access.end))
    return spans


def collect_occurrences(index: DocumentIndex, target: Declaration) -> list[Span]:
    """Spans in ``index`` bound to ``target``, which must belong to ``index``.

    Only tokens inside the target's scope span are considered.
    """
    scope_start, scope_end = target.span
    spans: list[Span] = [
        (token.start, token.end)
        for token in index.name_tokens(target.name)
        if scope_start <= token.start < scope_end
        and resolve(index, token.start, token.name) is target
    ]
    if target.kind in MEMBER_KINDS:
        container = container_of(index, target)
        if container is not None:

            def owns(instance: Declaration) -> bool:
                return (
                    instance.type_name == container.name
                    and instance.extent is not None
                    and resolve(index, instance.extent[0], container.name) is container
                )

            spans.extend(_member_spans(index, target.name, owns))
    return sorted(set(spans))


def _imported_here(
    index: DocumentIndex, path: Path, name: str, defining_path: Path, extension: str
) -> bool:
    return is_symbol_imported(index.imports, name, defining_path, path, extension)


def collect_cross_file_occurrences(view: WorkspaceView, target: Target) -> list[FileOccurrences]:
    """Occurrences in the defining file and in every file importing it.

    In an importing file, a token counts when it does not resolve locally
    and the file imports the target's name from the defining file.
    """
    results = [FileOccurrences(target.path, target.index, collect_occurrences(target.index, target.declaration))]
    decl = target.declaration
    container = container_of(target.index, decl) if decl.kind in MEMBER_KINDS else None
    exported = decl.is_exported
    if not exported and not (container is not None and container.is_exported):
        return results

    for path, index in view.importers(target.path):
        spans: list[Span] = []
        if exported and _imported_here(index, path, decl.name, target.path, view.extension):
            spans.extend(
                (token.start, token.end)
                for token in index.name_tokens(decl.name)
                if resolve(index, token.start, token.name) is None
            )
        if container is not None and _imported_here(
            index, path, container.name, target.path, view.extension
        ):

            def owns(instance: Declaration, index: DocumentIndex = index) -> bool:
                return (
                    instance.type_name == container.name
                    and instance.extent is not None
                    and resolve(index, instance.extent[0], container.name) is None
                )

            spans.extend(_member_spans(index, decl.name, owns))
        if spans:
            results.append(FileOccurrences(path, index, sorted(set(spans))))
    return results
