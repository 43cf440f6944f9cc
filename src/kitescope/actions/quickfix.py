"""Quick fixes for diagnostics that carry enough data to repair themselves."""

from __future__ import annotations

from collections.abc import Callable

from kitescope.document import TextDocument
from kitescope.index.imports import ImportEntry
from kitescope.index.models import DeclarationKind, DocumentIndex
from kitescope.protocol import (
    CodeAction,
    CodeActionKind,
    Diagnostic,
    Position,
    TextEdit,
    WorkspaceEdit,
)
from kitescope.refactor.edits import delete_lines, remove_import_symbol

_RENAME_TO_UNDERSCORE = frozenset(
    (
        DeclarationKind.LOOP_VARIABLE,
        DeclarationKind.COMPREHENSION_VARIABLE,
        DeclarationKind.PARAMETER,
    )
)


def _action(document: TextDocument, title: str, edit: TextEdit, diagnostic: Diagnostic) -> CodeAction:
    workspace_edit = WorkspaceEdit()
    workspace_edit.add(document.uri, edit)
    return CodeAction(
        title=title,
        kind=CodeActionKind.QUICKFIX,
        edit=workspace_edit,
        diagnostics=[diagnostic],
        is_preferred=True,
    )


def _unused_variable(document: TextDocument, index: DocumentIndex, diagnostic: Diagnostic) -> list[CodeAction]:
    decl = index.declaration_at(document.offset_at(diagnostic.range.start))
    if decl is None:
        return []
    if decl.kind in _RENAME_TO_UNDERSCORE:
        edit = TextEdit.replace(document.range_of(decl.start, decl.end), "_")
        return [_action(document, "Rename to '_'", edit, diagnostic)]
    start, end = decl.extent or (decl.start, decl.end)
    edit = delete_lines(document, document.line_of(start), document.line_of(max(start, end - 1)))
    return [_action(document, f"Remove unused {decl.kind.value.replace('-', ' ')} '{decl.name}'", edit, diagnostic)]


def _unused_function(document: TextDocument, index: DocumentIndex, diagnostic: Diagnostic) -> list[CodeAction]:
    decl = index.declaration_at(document.offset_at(diagnostic.range.start))
    if decl is None or decl.kind is not DeclarationKind.FUNCTION or decl.extent is None:
        return []
    start, end = decl.extent
    edit = delete_lines(document, document.line_of(start), document.line_of(end - 1))
    return [_action(document, f"Remove unused function '{decl.name}'", edit, diagnostic)]


def _unused_import(document: TextDocument, index: DocumentIndex, diagnostic: Diagnostic) -> list[CodeAction]:
    data = diagnostic.data or {}
    line = data.get("importLineStart")
    imp = next((i for i in index.imports if i.start_line == line), None)
    if imp is None:
        return []
    symbol = data.get("symbol")
    if symbol is None:
        edit = delete_lines(document, imp.start_line, imp.end_line)
        return [_action(document, f'Remove unused import from "{imp.path}"', edit, diagnostic)]
    edit = remove_import_symbol(document, imp, symbol)
    return [_action(document, f"Remove unused import '{symbol}'", edit, diagnostic)]


def _missing_import(document: TextDocument, index: DocumentIndex, diagnostic: Diagnostic) -> list[CodeAction]:
    """Add the symbol to an existing import of the same file, or a new import line."""
    data = diagnostic.data or {}
    if data.get("type") != "missing-import":
        return []
    symbol, path = data["symbol"], data["importPath"]
    title = f'Import \'{symbol}\' from "{path}"'
    for imp in index.imports:
        if imp.path == path and not imp.is_wildcard:
            entry = ImportEntry(imp.path, imp.quote, (*imp.symbol_names, symbol))
            edit = TextEdit.replace(document.range_of(imp.start, imp.end), entry.render())
            return [_action(document, title, edit, diagnostic)]
    statement = ImportEntry(path, symbols=(symbol,)).render()
    if index.imports:
        last = max(index.imports, key=lambda i: i.end_line)
        end = document.line_span(last.end_line)[1]
        edit = TextEdit.insert(document.position_at(end), "\n" + statement)
    else:
        edit = TextEdit.insert(Position(0, 0), statement + "\n")
    return [_action(document, title, edit, diagnostic)]


QUICK_FIXES: dict[str, Callable[[TextDocument, DocumentIndex, Diagnostic], list[CodeAction]]] = {
    "unused-variable": _unused_variable,
    "unused-function": _unused_function,
    "unused-import": _unused_import,
    "undefined-symbol": _missing_import,
}


def quick_fixes(document: TextDocument, index: DocumentIndex, diagnostic: Diagnostic) -> list[CodeAction]:
    fix = QUICK_FIXES.get(diagnostic.code or "")
    if fix is None:
        return []
    return fix(document, index, diagnostic)
