"""Tests for rename, prepare-rename and linked editing."""

from __future__ import annotations

from pathlib import Path

import pytest

from kitescope.core.errors import RefactorError
from kitescope.document import TextDocument, path_to_uri, uri_to_path
from kitescope.index.session import DocumentSession
from kitescope.index.workspace import LocalWorkspace
from kitescope.protocol import Position, WorkspaceEdit
from kitescope.refactor.ops import RefactorOps, validate_new_name


class _Workspace:
    """A tmp_path workspace with some files open in a session."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.session = DocumentSession()
        self.ops = RefactorOps(self.session, LocalWorkspace(root, self.session))

    def add(self, name: str, text: str, open_: bool = True) -> str:
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        uri = path_to_uri(path)
        if open_:
            self.session.on_open(uri, text)
        return uri

    def position(self, uri: str, offset: int) -> Position:
        return self.session.require(uri).document.position_at(offset)

    def applied(self, edit: WorkspaceEdit, uri: str) -> str:
        document = self.session.get(uri)
        text = document.document.text if document else uri_to_path(uri).read_text()
        return TextDocument(uri, text).apply_edits(edit.changes.get(uri, []))


@pytest.fixture
def ws(tmp_path: Path) -> _Workspace:
    return _Workspace(tmp_path)


class TestValidateNewName:
    """Identifier validation."""

    @pytest.mark.parametrize("name", ["x", "_private", "server2", "Config"])
    def test_valid(self, name: str) -> None:
        validate_new_name(name)

    @pytest.mark.parametrize("name", ["", "2x", "my-name", "a b", "var", "resource", "string", "number"])
    def test_invalid(self, name: str) -> None:
        with pytest.raises(RefactorError):
            validate_new_name(name)


class TestRenameLocal:
    """Scope-aware rename inside one file."""

    def test_loop_variable_rename_touches_only_loop(self, ws: _Workspace) -> None:
        # Given
        text = "for item in items { process(item) }"
        uri = ws.add("main.kite", text)

        # When
        edit = ws.ops.rename(uri, ws.position(uri, text.index("item")), "x")

        # Then
        assert edit is not None
        assert edit.edit_count == 2
        assert ws.applied(edit, uri) == "for x in items { process(x) }"

    def test_outer_variable_is_untouched(self, ws: _Workspace) -> None:
        # Given
        text = 'var item = "outside"\nfor item in items { process(item) }\nvar y = item'
        uri = ws.add("main.kite", text)
        loop_item = text.index("for item") + len("for ")

        # When
        edit = ws.ops.rename(uri, ws.position(uri, loop_item), "x")

        # Then
        assert edit is not None
        assert edit.edit_count == 2
        assert ws.applied(edit, uri) == 'var item = "outside"\nfor x in items { process(x) }\nvar y = item'

    def test_comments_and_strings_untouched_interpolation_renamed(self, ws: _Workspace) -> None:
        text = 'var name = "x"\n// name\nvar s = "name: ${name} / $name"\n'
        uri = ws.add("main.kite", text)
        edit = ws.ops.rename(uri, ws.position(uri, 4), "label")
        assert edit is not None
        assert ws.applied(edit, uri) == 'var label = "x"\n// name\nvar s = "name: ${label} / $label"\n'

    def test_rename_from_reference_site(self, ws: _Workspace) -> None:
        text = "fun double(number n) number {\n  return n * 2\n}\n"
        uri = ws.add("main.kite", text)
        edit = ws.ops.rename(uri, ws.position(uri, text.rindex("n *")), "value")
        assert edit is not None
        assert ws.applied(edit, uri) == "fun double(number value) number {\n  return value * 2\n}\n"

    def test_schema_property_renames_keys_and_member_accesses(self, ws: _Workspace) -> None:
        # Given
        text = (
            "schema Config {\n  string host\n}\n"
            'resource Config db {\n  host = "a"\n}\n'
            "var h = db.host\n"
        )
        uri = ws.add("main.kite", text)

        # When
        edit = ws.ops.rename(uri, ws.position(uri, text.index("host")), "hostname")

        # Then
        assert edit is not None
        assert edit.edit_count == 3
        assert "db.hostname" in ws.applied(edit, uri)

    def test_same_name_is_a_no_op(self, ws: _Workspace) -> None:
        uri = ws.add("main.kite", "var a = 1\nvar b = a\n")
        edit = ws.ops.rename(uri, ws.position(uri, 4), "a")
        assert edit is not None and edit.edit_count == 0

    def test_invalid_name_raises(self, ws: _Workspace) -> None:
        uri = ws.add("main.kite", "var a = 1\n")
        with pytest.raises(RefactorError):
            ws.ops.rename(uri, ws.position(uri, 4), "for")

    def test_nothing_at_position(self, ws: _Workspace) -> None:
        uri = ws.add("main.kite", "var a = 1\n")
        assert ws.ops.rename(uri, ws.position(uri, 8), "b") is None

    def test_rename_round_trip_restores_text(self, ws: _Workspace) -> None:
        """Renaming a to b and back again yields the original text."""
        text = "var a = 1\nfun f(number x) number {\n  return a + x\n}\nvar c = f(a)\n"
        uri = ws.add("main.kite", text)
        first = ws.ops.rename(uri, ws.position(uri, 4), "b")
        assert first is not None
        renamed = ws.applied(first, uri)
        ws.session.on_change(uri, renamed, version=1)
        second = ws.ops.rename(uri, ws.position(uri, 4), "a")
        assert second is not None
        assert ws.applied(second, uri) == text


class TestRenameCrossFile:
    """Exported symbols are renamed in importing files."""

    def test_schema_rename_updates_importers(self, ws: _Workspace) -> None:
        # Given
        common = ws.add("common.kite", "schema Config {\n  string host\n}\n")
        main = ws.add("main.kite", 'import Config from "common.kite"\nresource Config db {\n}\n')
        ws.add("other.kite", "schema Config {\n}\n", open_=False)

        # When
        edit = ws.ops.rename(common, ws.position(common, len("schema ")), "Settings")

        # Then
        assert edit is not None
        assert set(edit.changes) == {common, main}
        assert ws.applied(edit, main) == 'import Settings from "common.kite"\nresource Settings db {\n}\n'

    def test_rename_from_importing_file(self, ws: _Workspace) -> None:
        common = ws.add("common.kite", "fun greet(string who) string {\n  return who\n}\n")
        text = 'import * from "common.kite"\nvar msg = greet("x")\n'
        main = ws.add("main.kite", text)
        edit = ws.ops.rename(main, ws.position(main, text.index("greet")), "hello")
        assert edit is not None
        assert set(edit.changes) == {common, main}

    def test_local_shadow_in_importer_is_untouched(self, ws: _Workspace) -> None:
        common = ws.add("common.kite", "var region = 1\n")
        main = ws.add(
            "main.kite",
            'import region from "common.kite"\nfun f(string region) {\n  println(region)\n}\nvar r = region\n',
        )
        edit = ws.ops.rename(common, ws.position(common, 4), "zone")
        assert edit is not None
        assert ws.applied(edit, main) == (
            'import zone from "common.kite"\nfun f(string region) {\n  println(region)\n}\nvar r = zone\n'
        )


class TestPrepareRename:
    """What can be renamed."""

    @pytest.mark.parametrize(
        ("text", "needle"),
        [
            ("var a = 1\n", "var"),
            ("var string a = 1\n", "string"),
            ("// a comment\nvar a = 1\n", "comment"),
            ('var a = "plain text"\n', "plain"),
            ("@count(2)\nresource VM.Instance a {\n}\n", "count"),
        ],
    )
    def test_not_renameable(self, ws: _Workspace, text: str, needle: str) -> None:
        uri = ws.add("main.kite", text)
        assert ws.ops.prepare_rename(uri, ws.position(uri, text.index(needle) + 1)) is None

    def test_renameable(self, ws: _Workspace) -> None:
        text = "var total = 1\nvar b = total\n"
        uri = ws.add("main.kite", text)
        result = ws.ops.prepare_rename(uri, ws.position(uri, text.rindex("total") + 2))
        assert result is not None
        assert result.placeholder == "total"
        assert result.range.start == Position(1, 8)


class TestLinkedEditing:
    """Linked ranges for local bindings."""

    def test_loop_variable(self, ws: _Workspace) -> None:
        text = "for item in items {\n  process(item)\n}\n"
        uri = ws.add("main.kite", text)
        ranges = ws.ops.linked_editing_ranges(uri, ws.position(uri, 5))
        assert ranges is not None
        assert [r.start for r in ranges.ranges] == [Position(0, 4), Position(1, 10)]

    def test_exported_variable_has_none(self, ws: _Workspace) -> None:
        uri = ws.add("main.kite", "var a = 1\nvar b = a\n")
        assert ws.ops.linked_editing_ranges(uri, ws.position(uri, 4)) is None

    def test_single_occurrence_has_none(self, ws: _Workspace) -> None:
        uri = ws.add("main.kite", "fun f(number unused) {\n}\n")
        assert ws.ops.linked_editing_ranges(uri, ws.position(uri, 14)) is None
