"""Core module exports."""

from kitescope.core.errors import (
    ConfigError,
    DocumentError,
    ErrorCode,
    KiteScopeError,
    RefactorError,
)
from kitescope.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "DocumentError",
    "ErrorCode",
    "KiteScopeError",
    "RefactorError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
