"""kitescope error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Document
- 4xxx: Refactor

Malformed Kite source never raises; these errors are reserved for misuse of
the engine (bad configuration, unknown documents, invalid rename targets).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Document (3xxx)
    DOCUMENT_NOT_OPEN = 3001

    # Refactor (4xxx)
    REFACTOR_INVALID_NAME = 4001


@dataclass(frozen=True)
class KiteScopeError(Exception):
    """Base error with structured context for editor and CLI responses.

    Not slotted: the interpreter and contextlib assign ``__traceback__`` on
    instances, which a slotted frozen dataclass cannot accept.
    """

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(KiteScopeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class DocumentError(KiteScopeError):
    """Requests against documents the session does not hold."""

    @classmethod
    def document_not_open(cls, uri: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_NOT_OPEN,
            message=f"Document is not open: {uri}",
            details={"uri": uri},
        )


class RefactorError(KiteScopeError):
    """Rename and edit-synthesis errors."""

    @classmethod
    def invalid_new_name(cls, name: str, reason: str) -> "RefactorError":
        return cls(
            code=ErrorCode.REFACTOR_INVALID_NAME,
            message=f"'{name}' is not a valid name: {reason}",
            details={"name": name, "reason": reason},
        )
