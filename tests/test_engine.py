"""End-to-end tests for the KiteScope facade."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from kitescope.config.models import KiteScopeConfig, WorkspaceConfig
from kitescope.core.errors import DocumentError, ErrorCode, RefactorError
from kitescope.document import path_to_uri
from kitescope.engine import KiteScope
from kitescope.protocol import Position


def _open(engine: KiteScope, name: str, text: str) -> str:
    path = engine.root / name
    path.write_text(text)
    uri = path_to_uri(path)
    engine.open(uri, text)
    return uri


class TestDocumentLifecycle:
    def test_change_reindexes(self, engine: KiteScope) -> None:
        uri = _open(engine, "main.kite", "var a = 1\n")
        engine.change(uri, "var a = 1\nvar b = a\n", version=2)
        assert len(engine.references(uri, Position(0, 4))) == 2

    def test_closed_document_is_not_served(self, engine: KiteScope) -> None:
        uri = _open(engine, "main.kite", "var a = 1\n")
        engine.close(uri)
        with pytest.raises(DocumentError):
            engine.diagnostics(uri)


class TestRequests:
    """Each feature runs as one request."""

    def test_request_id_set_and_cleared(self, engine: KiteScope) -> None:
        uri = _open(engine, "main.kite", "var a = 1\n")
        with (
            patch("kitescope.engine.set_request_id") as set_id,
            patch("kitescope.engine.clear_request_id") as clear_id,
        ):
            engine.definition(uri, Position(0, 4))
        set_id.assert_called_once()
        clear_id.assert_called_once()

    def test_request_id_cleared_on_error(self, engine: KiteScope) -> None:
        uri = _open(engine, "main.kite", "var a = 1\n")
        with patch("kitescope.engine.clear_request_id") as clear_id, pytest.raises(RefactorError):
            engine.rename(uri, Position(0, 4), "1bad")
        clear_id.assert_called_once()

    def test_refactor_error_reaches_caller(self, engine: KiteScope) -> None:
        uri = _open(engine, "main.kite", "var a = 1\n")
        with pytest.raises(RefactorError) as info:
            engine.rename(uri, Position(0, 4), "1bad")
        assert info.value.code is ErrorCode.REFACTOR_INVALID_NAME
        assert info.value.details["name"] == "1bad"

    @pytest.mark.parametrize(
        "call",
        [
            lambda e, uri: e.definition(uri, Position(0, 0)),
            lambda e, uri: e.document_highlights(uri, Position(0, 0)),
            lambda e, uri: e.code_lenses(uri),
            lambda e, uri: e.document_symbols(uri),
            lambda e, uri: e.prepare_call_hierarchy(uri, Position(0, 0)),
        ],
    )
    def test_unknown_document_raises_document_error(self, engine: KiteScope, call: Any) -> None:
        with pytest.raises(DocumentError) as info:
            call(engine, "file:///nowhere/main.kite")
        assert info.value.code is ErrorCode.DOCUMENT_NOT_OPEN

    def test_all_features_on_one_workspace(self, engine: KiteScope) -> None:
        # Given
        _open(engine, "common.kite", "schema Config {\n  string host\n}\n")
        main = _open(
            engine,
            "main.kite",
            'import * from "common.kite"\nresource Config db {\n  host = "h"\n}\nvar unused = db.host\n',
        )

        # When
        diagnostics = engine.diagnostics(main)
        definition = engine.definition(main, Position(1, 10))
        rename = engine.rename(main, Position(2, 3), "hostname")
        prepare = engine.prepare_rename(main, Position(4, 5))

        # Then
        assert [d.code for d in diagnostics.diagnostics] == ["unused-variable"]
        assert definition is not None and definition.uri.endswith("common.kite")
        assert rename is not None and rename.edit_count == 3
        assert prepare is not None and prepare.placeholder == "unused"


class TestConfig:
    def test_config_loaded_from_root(self, tmp_path: Path) -> None:
        (tmp_path / ".kitescope").mkdir()
        (tmp_path / ".kitescope" / "config.yaml").write_text(
            "diagnostics:\n  disabled_rules: [unused-variable]\n"
        )
        with patch("kitescope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "missing.yaml"):
            engine = KiteScope(tmp_path)
        uri = _open(engine, "main.kite", "var a = 1\n")
        assert engine.diagnostics(uri).diagnostics == []

    def test_workspace_extension_setting(self, tmp_path: Path) -> None:
        config = KiteScopeConfig(workspace=WorkspaceConfig(extension=".kt2"))
        engine = KiteScope(tmp_path, config=config)
        (tmp_path / "lib.kt2").write_text("fun helper() {\n}\n")
        uri = _open(engine, "main.kt2", 'import * from "lib.kt2"\nhelper()\n')
        assert engine.definition(uri, Position(1, 2)) is not None
