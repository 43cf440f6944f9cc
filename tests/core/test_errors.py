"""Tests for error types and codes."""

from collections.abc import Iterator
from contextlib import contextmanager

import pytest

from kitescope.core.errors import (
    ConfigError,
    DocumentError,
    ErrorCode,
    KiteScopeError,
    RefactorError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.DOCUMENT_NOT_OPEN, 3000),
            (ErrorCode.REFACTOR_INVALID_NAME, 4000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestKiteScopeError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = KiteScopeError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        error = KiteScopeError(code=ErrorCode.DOCUMENT_NOT_OPEN, message="Something broke")
        assert str(error) == "[3001] DOCUMENT_NOT_OPEN: Something broke"

    def test_error_is_raisable(self) -> None:
        with pytest.raises(KiteScopeError):
            raise DocumentError.document_not_open("file:///a.kite")

    @pytest.mark.parametrize(
        "error",
        [
            DocumentError.document_not_open("file:///a.kite"),
            RefactorError.invalid_new_name("1x", "must start with a letter"),
        ],
    )
    def test_error_keeps_type_through_context_manager(self, error: KiteScopeError) -> None:
        """Leaving a generator context manager sets __traceback__ on the error."""

        @contextmanager
        def scope() -> Iterator[None]:
            yield

        with pytest.raises(type(error)) as info, scope():
            raise error
        assert info.value is error
        assert info.value.__traceback__ is not None


class TestFactories:
    """Factory method tests."""

    def test_config_parse_error(self) -> None:
        error = ConfigError.parse_error("/x/config.yaml", "bad indent")
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert error.details == {"path": "/x/config.yaml", "reason": "bad indent"}

    def test_config_invalid_value(self) -> None:
        error = ConfigError.invalid_value("workspace.extension", "kite", "must start with '.'")
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "workspace.extension" in error.message

    def test_document_not_open(self) -> None:
        error = DocumentError.document_not_open("file:///a.kite")
        assert error.code == ErrorCode.DOCUMENT_NOT_OPEN
        assert error.details["uri"] == "file:///a.kite"

    def test_refactor_invalid_name(self) -> None:
        error = RefactorError.invalid_new_name("1x", "starts with a digit")
        assert error.code == ErrorCode.REFACTOR_INVALID_NAME
        assert error.message == "'1x' is not a valid name: starts with a digit"
