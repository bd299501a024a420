"""Tests for skinmanager.utils.exceptions and helpers."""

from __future__ import annotations

import asyncio

from skinmanager.utils.exceptions import (
    ConfigurationError,
    DuplicatePluginError,
    DuplicateRegistrationError,
    ErrorCategory,
    NotFoundError,
    PluginError,
    PluginLifecycleError,
    SkinManagerError,
    ValidationError,
    classify_exception,
    describe_exception,
    sanitize_error_message,
)
from skinmanager.utils.helpers import format_size


class TestExceptionClasses:
    def test_base_error_to_dict(self) -> None:
        exc = SkinManagerError("test message", code="TEST_CODE")
        assert exc.to_dict() == {
            "error": "TEST_CODE",
            "message": "test message",
            "category": ErrorCategory.FATAL.value,
            "details": {},
        }
        assert str(exc) == "[TEST_CODE] test message"

    def test_validation_error_with_field(self) -> None:
        exc = ValidationError("Invalid input", field="pluginId")
        assert exc.code == "VALIDATION_ERROR"
        assert exc.category == ErrorCategory.VALIDATION
        assert exc.details == {"field": "pluginId"}

    def test_not_found_error(self) -> None:
        exc = NotFoundError("Plugin", "abc")
        assert exc.message == "Plugin not found: abc"
        assert exc.category == ErrorCategory.NOT_FOUND

    def test_duplicate_registration_is_configuration_error(self) -> None:
        exc = DuplicateRegistrationError("UNLOAD_ALL", "plugin:a", "plugin:b")
        assert isinstance(exc, ConfigurationError)
        assert exc.category == ErrorCategory.CONFIGURATION
        assert exc.details["owner"] == "plugin:a"

    def test_plugin_errors(self) -> None:
        exc = PluginError("p1", "broke", is_retryable=True)
        assert exc.message == "Plugin 'p1' error: broke"
        assert exc.category == ErrorCategory.RETRYABLE
        assert DuplicatePluginError("p1", "/a").code == "DUPLICATE_PLUGIN_ID"
        lifecycle = PluginLifecycleError("p1", "stopped", "active")
        assert lifecycle.current == "stopped" and lifecycle.target == "active"


class TestSanitizeAndClassify:
    def test_sanitize_secrets(self) -> None:
        text = sanitize_error_message("failed with token=abc123 and Bearer xyz.987")
        assert "abc123" not in text
        assert "xyz.987" not in text
        assert "[REDACTED]" in text

    def test_sanitize_leaves_plain_identifiers(self) -> None:
        mod_id = "sk-" + "a1" * 12
        assert sanitize_error_message(f"mod {mod_id} not found") == f"mod {mod_id} not found"

    def test_classify(self) -> None:
        assert classify_exception(ValidationError("x"))[0] == "VALIDATION_ERROR"
        assert classify_exception(FileNotFoundError("f"))[1] == ErrorCategory.NOT_FOUND
        assert classify_exception(asyncio.TimeoutError())[2] is True
        assert classify_exception(NotImplementedError("later"))[0] == "NOT_IMPLEMENTED"
        assert classify_exception(RuntimeError("weird"))[0] == "INTERNAL_ERROR"

    def test_describe_exception(self) -> None:
        assert describe_exception(NotFoundError("Plugin", "x")) == "Plugin not found: x"
        assert describe_exception(RuntimeError("password=hunter2")) == "[REDACTED]"
        assert describe_exception(RuntimeError()) == "RuntimeError"


def test_format_size() -> None:
    assert format_size(0) == "0 B"
    assert format_size(512) == "512 B"
    assert format_size(1536) == "1.5 KB"
    assert format_size(1024 * 1024) == "1 MB"
    assert format_size(int(2.25 * 1024**3)) == "2.25 GB"
