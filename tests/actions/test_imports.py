"""Tests for organize, sort and wildcard conversion of import blocks."""

from __future__ import annotations

from pathlib import Path

import pytest

from kitescope.actions.imports import (
    convert_wildcard_import,
    import_block,
    organize_imports,
    sort_imports,
    wildcard_import_at,
)
from kitescope.document import TextDocument
from kitescope.index.indexer import index_document
from kitescope.index.models import DocumentIndex
from kitescope.index.workspace import LocalWorkspace, WorkspaceView


def _doc(tmp_path: Path, text: str) -> tuple[TextDocument, DocumentIndex]:
    return TextDocument.from_path(tmp_path / "main.kite", text), index_document(text)


def _organized(tmp_path: Path, text: str, unused: set[str] | None = None) -> str | None:
    document, index = _doc(tmp_path, text)
    edit = organize_imports(document, index, unused or set())
    return None if edit is None else document.apply_edits([edit])


class TestImportBlock:
    def test_comments_between_imports_collected(self, tmp_path: Path) -> None:
        text = '// header\nimport A from "a.kite"\n\n// note\nimport B from "b.kite"\nvar x = 1\n'
        document, index = _doc(tmp_path, text)
        block, comments = import_block(document, index)
        assert [imp.path for imp in block] == ["a.kite", "b.kite"]
        assert comments == ["// note"]

    def test_block_ends_at_first_code_line(self, tmp_path: Path) -> None:
        text = 'import A from "a.kite"\nvar x = 1\nimport B from "b.kite"\n'
        document, index = _doc(tmp_path, text)
        block, _ = import_block(document, index)
        assert [imp.path for imp in block] == ["a.kite"]


class TestOrganizeImports:
    """Merging, filtering and sorting the import block."""

    def test_same_path_symbols_merge(self, tmp_path: Path) -> None:
        text = 'import Config from "common.kite"\nimport Config, Utils from "common.kite"\n'
        assert _organized(tmp_path, text) == 'import Config, Utils from "common.kite"\n'

    def test_wildcard_dominates_named(self, tmp_path: Path) -> None:
        text = 'import * from "a.kite"\nimport X from "a.kite"\n'
        assert _organized(tmp_path, text) == 'import * from "a.kite"\n'

    def test_paths_and_symbols_sorted_case_insensitively(self, tmp_path: Path) -> None:
        text = 'import Z from "b.kite"\nimport y, X from "A.kite"\nvar q = 1\n'
        assert _organized(tmp_path, text) == 'import X, y from "A.kite"\nimport Z from "b.kite"\nvar q = 1\n'

    def test_equivalent_literals_merge_keeping_first(self, tmp_path: Path) -> None:
        text = 'import A from "./c.kite"\nimport B from "c.kite"\n'
        assert _organized(tmp_path, text) == 'import A, B from "./c.kite"\n'

    def test_unused_symbols_dropped(self, tmp_path: Path) -> None:
        text = 'import Config, Utils from "c.kite"\n'
        assert _organized(tmp_path, text, {"Utils"}) == 'import Config from "c.kite"\n'

    def test_import_left_empty_is_removed(self, tmp_path: Path) -> None:
        text = 'import A from "c.kite"\nvar x = 1\n'
        assert _organized(tmp_path, text, {"A"}) == "var x = 1\n"

    def test_comments_hoisted_above_imports(self, tmp_path: Path) -> None:
        text = 'import B from "b.kite"\n// keep me\nimport A from "a.kite"\n'
        assert _organized(tmp_path, text) == '// keep me\nimport A from "a.kite"\nimport B from "b.kite"\n'

    @pytest.mark.parametrize(
        "text",
        [
            "import A from 'c.kite'\n",
            'import A, B from "a.kite"\nimport * from "b.kite"\n',
            "var x = 1\n",
        ],
    )
    def test_canonical_block_needs_no_edit(self, tmp_path: Path, text: str) -> None:
        assert _organized(tmp_path, text) is None


class TestSortImports:
    def test_reorders_statements_verbatim(self, tmp_path: Path) -> None:
        text = 'import * from "b.kite"\nimport C, A from "a.kite"\n'
        document, index = _doc(tmp_path, text)
        edit = sort_imports(document, index)
        assert edit is not None
        assert document.apply_edits([edit]) == 'import C, A from "a.kite"\nimport * from "b.kite"\n'

    @pytest.mark.parametrize(
        "text",
        [
            'import A from "a.kite"\n',
            'import A from "a.kite"\nimport B from "B.kite"\n',
        ],
    )
    def test_nothing_to_sort(self, tmp_path: Path, text: str) -> None:
        document, index = _doc(tmp_path, text)
        assert sort_imports(document, index) is None


class TestConvertWildcard:
    """Replacing ``import *`` with the names in use."""

    @pytest.fixture
    def view(self, tmp_path: Path) -> WorkspaceView:
        (tmp_path / "types.kite").write_text("schema Config {}\nschema Other {}\nfun build() {\n}\n")
        return WorkspaceView(LocalWorkspace(tmp_path))

    def _convert(self, tmp_path: Path, view: WorkspaceView, text: str) -> str | None:
        document, index = _doc(tmp_path, text)
        imp = wildcard_import_at(index, 0)
        assert imp is not None
        edit = convert_wildcard_import(document, index, view, imp)
        return None if edit is None else document.apply_edits([edit])

    def test_used_names_become_named_import(self, tmp_path: Path, view: WorkspaceView) -> None:
        text = 'import * from "types.kite"\nresource Config c {}\nvar b = build()\n'
        assert self._convert(tmp_path, view, text) == (
            'import build, Config from "types.kite"\nresource Config c {}\nvar b = build()\n'
        )

    def test_nothing_used_returns_none(self, tmp_path: Path, view: WorkspaceView) -> None:
        assert self._convert(tmp_path, view, 'import * from "types.kite"\nvar x = 1') is None

    def test_unreadable_target_returns_none(self, tmp_path: Path, view: WorkspaceView) -> None:
        assert self._convert(tmp_path, view, 'import * from "gone.kite"\nvar x = Config') is None

    def test_wildcard_import_at(self, tmp_path: Path) -> None:
        _, index = _doc(tmp_path, 'import A from "a.kite"\nimport * from "b.kite"\n')
        assert wildcard_import_at(index, 0) is None
        found = wildcard_import_at(index, 1)
        assert found is not None and found.path == "b.kite"
