"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (KITESCOPE__SECTION__KEY)
3. Repo YAML (.kitescope/config.yaml)
4. Global YAML (~/.config/kitescope/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    KITESCOPE__<SECTION>__<KEY>=<VALUE>

Examples:
    KITESCOPE__LOGGING__LEVEL=DEBUG
    KITESCOPE__WORKSPACE__MAX_FILE_SIZE_KB=512
    KITESCOPE__DIAGNOSTICS__ENABLED=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

RULE_NAMES: frozenset[str] = frozenset(
    (
        "unused-variable",
        "unused-import",
        "unused-function",
        "variable-shadowing",
        "duplicate-parameter",
        "duplicate-declaration",
        "missing-return",
        "return-type-mismatch",
        "type-mismatch",
        "undefined-symbol",
        "unclosed-string",
        "duplicate-import",
        "invalid-import-path",
        "circular-import",
    )
)


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        KITESCOPE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every index rebuild and cross-file lookup.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class WorkspaceConfig(BaseModel):
    """Workspace file discovery.

    Env vars:
        KITESCOPE__WORKSPACE__EXTENSION: Source file extension
        KITESCOPE__WORKSPACE__MAX_FILE_SIZE_KB: Skip files larger than this
    """

    extension: str = Field(
        default=".kite",
        description="Source file extension, including the leading dot.",
    )
    max_file_size_kb: int = Field(
        default=1024,
        description="Skip files larger than this (KB) when scanning the workspace. "
        "Every cross-file request reads candidate files, so large files slow all of them.",
    )
    exclude_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directory names to prune, on top of the built-in VCS/dependency set.",
    )

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Extension must start with '.': {v}")
        return v

    @field_validator("max_file_size_kb")
    @classmethod
    def validate_max_file_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"max_file_size_kb must be positive, got {v}")
        return v


class DiagnosticsConfig(BaseModel):
    """Diagnostic rule selection.

    Env vars:
        KITESCOPE__DIAGNOSTICS__ENABLED: Master switch for all rules
    """

    enabled: bool = Field(default=True, description="Run diagnostics at all.")
    disabled_rules: list[str] = Field(
        default_factory=list,
        description="Rule names to skip, e.g. ['undefined-symbol'].",
    )
    unused_output_as_hint: bool = Field(
        default=True,
        description="Report unused outputs as hints; outputs are usually consumed externally.",
    )

    @field_validator("disabled_rules")
    @classmethod
    def validate_rules(cls, v: list[str]) -> list[str]:
        unknown = sorted(set(v) - RULE_NAMES)
        if unknown:
            raise ValueError(f"Unknown diagnostic rules: {', '.join(unknown)}")
        return v

    def is_enabled(self, rule: str) -> bool:
        return self.enabled and rule not in self.disabled_rules


class KiteScopeConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
