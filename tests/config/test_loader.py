"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence and error mapping
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from kitescope.config.loader import REPO_CONFIG_NAME, _deep_merge, _load_yaml, load_config
from kitescope.core.errors import ConfigError, ErrorCode


@pytest.fixture
def no_global_config(tmp_path: Path):
    """Point the global config path at a file that does not exist."""
    with patch("kitescope.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global-missing.yaml"):
        yield


def _write_repo_config(root: Path, text: str) -> None:
    path = root / REPO_CONFIG_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("logging:\n  level: DEBUG\n")
        assert _load_yaml(yaml_file) == {"logging": {"level": "DEBUG"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert _load_yaml(yaml_file) == {}

    def test_raises_parse_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("logging: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_parse_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_dicts_merge(self) -> None:
        base = {"workspace": {"extension": ".kite", "max_file_size_kb": 10}}
        override = {"workspace": {"max_file_size_kb": 20}}
        assert _deep_merge(base, override) == {"workspace": {"extension": ".kite", "max_file_size_kb": 20}}

    def test_base_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


@pytest.mark.usefixtures("no_global_config")
class TestLoadConfig:
    """Tests for load_config precedence."""

    def test_defaults_without_any_source(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.workspace.extension == ".kite"
        assert config.diagnostics.enabled is True
        assert config.logging.level == "WARNING"

    def test_repo_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "diagnostics:\n  disabled_rules: [undefined-symbol]\n")
        config = load_config(tmp_path)
        assert config.diagnostics.disabled_rules == ["undefined-symbol"]
        assert not config.diagnostics.is_enabled("undefined-symbol")

    def test_env_overrides_repo_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Given
        _write_repo_config(tmp_path, "workspace:\n  max_file_size_kb: 64\n")
        monkeypatch.setenv("KITESCOPE__WORKSPACE__MAX_FILE_SIZE_KB", "128")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.workspace.max_file_size_kb == 128

    def test_kwargs_override_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KITESCOPE__LOGGING__LEVEL", "INFO")
        config = load_config(tmp_path, logging={"level": "DEBUG"})
        assert config.logging.level == "DEBUG"

    def test_invalid_value_becomes_config_error(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "workspace:\n  extension: kite\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE

    def test_yaml_syntax_error_becomes_parse_error(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "workspace: {extension: \n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR
