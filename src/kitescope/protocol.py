"""Editor-protocol result shapes.

Everything the engine hands back to a host is one of these dataclasses.
``to_dict()`` produces the camelCase JSON the Language Server Protocol uses,
so an LSP adapter can forward results without reshaping them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based line and character."""

    line: int
    character: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True, slots=True, order=True)
class Range:
    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        return self.start <= position <= self.end

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True, slots=True)
class Location:
    uri: str
    range: Range

    def to_dict(self) -> dict[str, Any]:
        return {"uri": self.uri, "range": self.range.to_dict()}


@dataclass(frozen=True, slots=True)
class TextEdit:
    range: Range
    new_text: str

    @classmethod
    def replace(cls, range: Range, new_text: str) -> TextEdit:
        return cls(range=range, new_text=new_text)

    @classmethod
    def delete(cls, range: Range) -> TextEdit:
        return cls(range=range, new_text="")

    @classmethod
    def insert(cls, position: Position, new_text: str) -> TextEdit:
        return cls(range=Range(position, position), new_text=new_text)

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "newText": self.new_text}


@dataclass(slots=True)
class WorkspaceEdit:
    """Map from document URI to its ordered list of edits."""

    changes: dict[str, list[TextEdit]] = field(default_factory=dict)

    def add(self, uri: str, edit: TextEdit) -> None:
        self.changes.setdefault(uri, []).append(edit)

    @property
    def edit_count(self) -> int:
        return sum(len(edits) for edits in self.changes.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "changes": {
                uri: [edit.to_dict() for edit in edits] for uri, edits in self.changes.items()
            }
        }


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class DiagnosticTag(IntEnum):
    UNNECESSARY = 1
    DEPRECATED = 2


@dataclass(slots=True)
class Diagnostic:
    range: Range
    message: str
    severity: DiagnosticSeverity
    code: str | None = None
    source: str = "kite"
    tags: tuple[DiagnosticTag, ...] = ()
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "range": self.range.to_dict(),
            "message": self.message,
            "severity": int(self.severity),
            "source": self.source,
        }
        if self.code is not None:
            result["code"] = self.code
        if self.tags:
            result["tags"] = [int(tag) for tag in self.tags]
        if self.data is not None:
            result["data"] = self.data
        return result


class CodeActionKind:
    QUICKFIX = "quickfix"
    REFACTOR_REWRITE = "refactor.rewrite"
    SOURCE_ORGANIZE_IMPORTS = "source.organizeImports"
    SOURCE_SORT_IMPORTS = "source.sortImports"


@dataclass(slots=True)
class CodeAction:
    title: str
    kind: str
    edit: WorkspaceEdit
    diagnostics: list[Diagnostic] = field(default_factory=list)
    is_preferred: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "title": self.title,
            "kind": self.kind,
            "edit": self.edit.to_dict(),
        }
        if self.diagnostics:
            result["diagnostics"] = [d.to_dict() for d in self.diagnostics]
        if self.is_preferred:
            result["isPreferred"] = True
        return result


@dataclass(frozen=True, slots=True)
class LinkedEditingRanges:
    ranges: tuple[Range, ...]
    word_pattern: str = r"[a-zA-Z_][a-zA-Z0-9_]*"

    def to_dict(self) -> dict[str, Any]:
        return {
            "ranges": [r.to_dict() for r in self.ranges],
            "wordPattern": self.word_pattern,
        }


@dataclass(frozen=True, slots=True)
class PrepareRenameResult:
    range: Range
    placeholder: str

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "placeholder": self.placeholder}


class DocumentHighlightKind(IntEnum):
    TEXT = 1
    READ = 2
    WRITE = 3


@dataclass(frozen=True, slots=True)
class DocumentHighlight:
    range: Range
    kind: DocumentHighlightKind = DocumentHighlightKind.TEXT

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "kind": int(self.kind)}


@dataclass(frozen=True, slots=True)
class Command:
    title: str
    command: str
    arguments: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "command": self.command, "arguments": list(self.arguments)}


@dataclass(frozen=True, slots=True)
class CodeLens:
    range: Range
    command: Command

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range.to_dict(), "command": self.command.to_dict()}


class SymbolKind(IntEnum):
    """The subset of LSP symbol kinds Kite declarations map to."""

    CLASS = 5
    PROPERTY = 7
    FUNCTION = 12
    VARIABLE = 13
    OBJECT = 19
    STRUCT = 23
    EVENT = 24
    TYPE_PARAMETER = 26


@dataclass(slots=True)
class DocumentSymbol:
    """Outline entry; ``range`` covers the construct, ``selection_range`` its name."""

    name: str
    kind: SymbolKind
    range: Range
    selection_range: Range
    detail: str | None = None
    children: list[DocumentSymbol] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "kind": int(self.kind),
            "range": self.range.to_dict(),
            "selectionRange": self.selection_range.to_dict(),
        }
        if self.detail is not None:
            result["detail"] = self.detail
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass(frozen=True, slots=True)
class SymbolInformation:
    name: str
    kind: SymbolKind
    location: Location
    container_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "kind": int(self.kind),
            "location": self.location.to_dict(),
        }
        if self.container_name is not None:
            result["containerName"] = self.container_name
        return result


@dataclass(frozen=True, slots=True)
class CallHierarchyItem:
    name: str
    kind: SymbolKind
    uri: str
    range: Range
    selection_range: Range
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "kind": int(self.kind),
            "uri": self.uri,
            "range": self.range.to_dict(),
            "selectionRange": self.selection_range.to_dict(),
        }
        if self.detail is not None:
            result["detail"] = self.detail
        return result


@dataclass(frozen=True, slots=True)
class CallHierarchyIncomingCall:
    caller: CallHierarchyItem
    from_ranges: tuple[Range, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.caller.to_dict(), "fromRanges": [r.to_dict() for r in self.from_ranges]}


@dataclass(frozen=True, slots=True)
class CallHierarchyOutgoingCall:
    callee: CallHierarchyItem
    from_ranges: tuple[Range, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"to": self.callee.to_dict(), "fromRanges": [r.to_dict() for r in self.from_ranges]}
