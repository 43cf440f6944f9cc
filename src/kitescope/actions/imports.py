"""Import block rewrites: organize, sort, and wildcard to named conversion."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path

from kitescope.document import TextDocument
from kitescope.index.imports import DEFAULT_EXTENSION, ImportEntry, canonicalize_imports
from kitescope.index.models import DocumentIndex, Import
from kitescope.index.resolver import references
from kitescope.index.workspace import WorkspaceView
from kitescope.protocol import TextEdit
from kitescope.refactor.edits import delete_lines


def import_block(document: TextDocument, index: DocumentIndex) -> tuple[list[Import], list[str]]:
    """Imports of the leading block and the comment lines inside it.

    The block is the run of import, blank and ``//`` comment lines at the
    top of the file. Comments before the first import are not part of it.
    """
    by_line = {imp.start_line: imp for imp in index.imports}
    block: list[Import] = []
    comments: list[str] = []
    pending: list[str] = []
    line = 0
    while line < document.line_count:
        stripped = document.line_text(line).strip()
        imp = by_line.get(line)
        if imp is not None:
            block.append(imp)
            comments.extend(pending)
            pending = []
            line = imp.end_line + 1
            continue
        if not stripped:
            line += 1
            continue
        if stripped.startswith("//"):
            if block:
                pending.append(document.line_text(line).rstrip())
            line += 1
            continue
        break
    return block, comments


def _block_span(document: TextDocument, block: list[Import]) -> tuple[int, int]:
    start = document.line_starts[block[0].start_line]
    return start, document.line_span(block[-1].end_line)[1]


def organize_imports(
    document: TextDocument,
    index: DocumentIndex,
    unused: Collection[str] = (),
    extension: str = DEFAULT_EXTENSION,
) -> TextEdit | None:
    """Merge, filter and sort the leading import block.

    Comment lines found between imports are kept, above the imports.
    Returns None when the block is already canonical.
    """
    block, comments = import_block(document, index)
    if not block:
        return None
    entries = canonicalize_imports(block, unused, document.path.parent, extension)
    start, end = _block_span(document, block)
    new_text = "\n".join([*comments, *(entry.render() for entry in entries)])
    if new_text == document.text[start:end]:
        return None
    if not new_text:
        return delete_lines(document, block[0].start_line, block[-1].end_line)
    return TextEdit.replace(document.range_of(start, end), new_text)


def sort_imports(document: TextDocument, index: DocumentIndex) -> TextEdit | None:
    """Order the leading import statements by path, case-insensitively.

    Statements are kept verbatim; nothing is merged. Returns None with fewer
    than two imports or when they are already in order.
    """
    block, comments = import_block(document, index)
    if len(block) < 2:
        return None
    ordered = sorted(block, key=lambda imp: (imp.path.lower(), imp.path))
    if ordered == block:
        return None
    start, end = _block_span(document, block)
    statements = [document.text[imp.start : imp.end] for imp in ordered]
    return TextEdit.replace(document.range_of(start, end), "\n".join([*comments, *statements]))


def wildcard_import_at(index: DocumentIndex, line: int) -> Import | None:
    for imp in index.imports:
        if imp.is_wildcard and imp.start_line <= line <= imp.end_line:
            return imp
    return None


def convert_wildcard_import(
    document: TextDocument, index: DocumentIndex, view: WorkspaceView, imp: Import
) -> TextEdit | None:
    """Replace ``import *`` with the symbols this file actually uses.

    Returns None when the imported file cannot be read or none of its
    exported symbols are used.
    """
    target = view.index(view.resolve_import(imp, Path(document.path)))
    if target is None:
        return None
    exported = {decl.name for decl in target.exported()}
    used = {
        ref.name
        for ref in references(index)
        if ref.declaration is None and ref.name in exported and not index.in_import(ref.start)
    }
    if not used:
        return None
    entry = ImportEntry(imp.path, imp.quote, tuple(sorted(used, key=lambda s: (s.lower(), s))))
    return TextEdit.replace(document.range_of(imp.start, imp.end), entry.render())
