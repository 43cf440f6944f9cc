"""Config module exports."""

from kitescope.config.loader import load_config
from kitescope.config.models import (
    DiagnosticsConfig,
    KiteScopeConfig,
    LoggingConfig,
    LogOutputConfig,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "DiagnosticsConfig",
    "KiteScopeConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "WorkspaceConfig",
]
