"""Document outline and workspace symbol search."""

from __future__ import annotations

from kitescope.document import TextDocument
from kitescope.index.models import Declaration, DeclarationKind, DocumentIndex
from kitescope.index.workspace import WorkspaceView
from kitescope.protocol import DocumentSymbol, Location, SymbolInformation, SymbolKind

SYMBOL_KINDS: dict[DeclarationKind, SymbolKind] = {
    DeclarationKind.SCHEMA: SymbolKind.STRUCT,
    DeclarationKind.COMPONENT_DEFINITION: SymbolKind.CLASS,
    DeclarationKind.COMPONENT_INSTANCE: SymbolKind.OBJECT,
    DeclarationKind.RESOURCE_INSTANCE: SymbolKind.OBJECT,
    DeclarationKind.FUNCTION: SymbolKind.FUNCTION,
    DeclarationKind.TYPE_ALIAS: SymbolKind.TYPE_PARAMETER,
    DeclarationKind.VARIABLE: SymbolKind.VARIABLE,
    DeclarationKind.INPUT: SymbolKind.PROPERTY,
    DeclarationKind.OUTPUT: SymbolKind.EVENT,
    DeclarationKind.PROPERTY: SymbolKind.PROPERTY,
}

_MEMBER_KINDS = frozenset((DeclarationKind.PROPERTY, DeclarationKind.INPUT, DeclarationKind.OUTPUT))


def signature(decl: Declaration) -> str:
    """``(number a, b) -> string`` for a function declaration."""
    params = ", ".join(f"{p.type_name} {p.name}" if p.type_name else p.name for p in decl.parameters)
    return f"({params}) -> {decl.return_type or 'void'}"


def _detail(decl: Declaration) -> str | None:
    if decl.kind is DeclarationKind.FUNCTION:
        return signature(decl)
    return decl.type_name


def _symbol(document: TextDocument, decl: Declaration, children: list[DocumentSymbol]) -> DocumentSymbol:
    start, end = decl.extent or (decl.start, decl.end)
    return DocumentSymbol(
        name=decl.name,
        kind=SYMBOL_KINDS[decl.kind],
        range=document.range_of(start, end),
        selection_range=document.range_of(decl.start, decl.end),
        detail=_detail(decl),
        children=children,
    )


def document_symbols(document: TextDocument, index: DocumentIndex) -> list[DocumentSymbol]:
    """Top-level declarations in source order.

    Schemas list their properties and component definitions their inputs
    and outputs as children.
    """
    symbols: list[DocumentSymbol] = []
    for decl in index.declarations:
        if not decl.is_top_level or decl.kind not in SYMBOL_KINDS:
            continue
        children: list[DocumentSymbol] = []
        if decl.body is not None and decl.kind in (DeclarationKind.SCHEMA, DeclarationKind.COMPONENT_DEFINITION):
            members = index.scope_at(decl.body[0]).bindings.values()
            children = [
                _symbol(document, member, [])
                for member in sorted(members, key=lambda d: d.start)
                if member.kind in _MEMBER_KINDS
            ]
        symbols.append(_symbol(document, decl, children))
    return symbols


def workspace_symbols(view: WorkspaceView, query: str) -> list[SymbolInformation]:
    """Top-level declarations of every workspace file whose name contains ``query``.

    Matching is a case-insensitive substring test; an empty query matches all.
    """
    needle = query.lower()
    results: list[SymbolInformation] = []
    for path in view.files():
        index = view.index(path)
        if index is None:
            continue
        document = TextDocument.from_path(path, index.text)
        for decl in index.declarations:
            if not decl.is_top_level or decl.kind not in SYMBOL_KINDS:
                continue
            if needle and needle not in decl.name.lower():
                continue
            results.append(
                SymbolInformation(
                    name=decl.name,
                    kind=SYMBOL_KINDS[decl.kind],
                    location=Location(document.uri, document.range_of(decl.start, decl.end)),
                    container_name=path.name,
                )
            )
    return results
