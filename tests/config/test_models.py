"""Tests for config models and their validators."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kitescope.config.models import (
    RULE_NAMES,
    DiagnosticsConfig,
    KiteScopeConfig,
    LogOutputConfig,
    WorkspaceConfig,
)


class TestLogOutputConfig:
    """Destination validation."""

    @pytest.mark.parametrize("destination", ["stderr", "stdout", "/var/log/kitescope.log"])
    def test_accepts_streams_and_absolute_paths(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_rejects_relative_file(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/kitescope.log")


class TestWorkspaceConfig:
    """Workspace discovery settings."""

    def test_defaults(self) -> None:
        config = WorkspaceConfig()
        assert config.extension == ".kite"
        assert config.max_file_size_kb > 0
        assert config.exclude_dirs == []

    @pytest.mark.parametrize("extension", ["kite", ".", ""])
    def test_rejects_extension_without_dot(self, extension: str) -> None:
        with pytest.raises(ValidationError):
            WorkspaceConfig(extension=extension)

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValidationError):
            WorkspaceConfig(max_file_size_kb=0)


class TestDiagnosticsConfig:
    """Rule selection."""

    def test_every_rule_enabled_by_default(self) -> None:
        config = DiagnosticsConfig()
        assert all(config.is_enabled(rule) for rule in RULE_NAMES)

    def test_disabled_rule(self) -> None:
        config = DiagnosticsConfig(disabled_rules=["unused-function"])
        assert not config.is_enabled("unused-function")
        assert config.is_enabled("unused-variable")

    def test_master_switch(self) -> None:
        config = DiagnosticsConfig(enabled=False)
        assert not config.is_enabled("unused-variable")

    def test_unknown_rule_rejected(self) -> None:
        with pytest.raises(ValidationError, match="no-such-rule"):
            DiagnosticsConfig(disabled_rules=["no-such-rule"])


class TestKiteScopeConfig:
    def test_nested_sections_from_dict(self) -> None:
        config = KiteScopeConfig.model_validate(
            {"workspace": {"exclude_dirs": ["generated"]}, "diagnostics": {"unused_output_as_hint": False}}
        )
        assert config.workspace.exclude_dirs == ["generated"]
        assert config.diagnostics.unused_output_as_hint is False
