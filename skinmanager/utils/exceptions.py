"""
Exception hierarchy and error handling utilities for skinmanager.

Provides:
- Custom exception classes with error codes
- Error categorization (validation, configuration, plugin, ...)
- Safe error message formatting (no sensitive data leak)
- The human-readable message placed into error envelopes
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"


class SkinManagerError(Exception):
    """Base exception for all skinmanager errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(SkinManagerError):
    """Input validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class NotFoundError(SkinManagerError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            code="NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConfigurationError(SkinManagerError):
    """Composition or configuration error; fatal at startup."""

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message, code=code, category=ErrorCategory.CONFIGURATION, details=details)


class DuplicateRegistrationError(ConfigurationError):
    """Two handlers claimed the same message type."""

    def __init__(self, message_type: str, owner: str, claimant: str):
        super().__init__(
            f"Message type '{message_type}' is already handled by {owner}; {claimant} cannot claim it",
            code="DUPLICATE_MESSAGE_TYPE",
            details={"message_type": message_type, "owner": owner, "claimant": claimant},
        )
        self.message_type = message_type


class PluginError(SkinManagerError):
    """Plugin execution error."""

    def __init__(self, plugin_id: str, message: str, code: str = "PLUGIN_ERROR", is_retryable: bool = False):
        category = ErrorCategory.RETRYABLE if is_retryable else ErrorCategory.FATAL
        super().__init__(
            f"Plugin '{plugin_id}' error: {message}",
            code=code,
            category=category,
            details={"plugin_id": plugin_id, "is_retryable": is_retryable},
        )
        self.plugin_id = plugin_id


class PluginLifecycleError(PluginError):
    """Illegal plugin lifecycle transition."""

    def __init__(self, plugin_id: str, current: str, target: str):
        super().__init__(
            plugin_id,
            f"cannot move from {current} to {target}",
            code="PLUGIN_LIFECYCLE_ERROR",
        )
        self.current = current
        self.target = target


class DuplicatePluginError(PluginError):
    """A plugin with the same id is already registered."""

    def __init__(self, plugin_id: str, existing_source: str | None = None):
        message = "duplicate plugin id"
        if existing_source:
            message += f" (already registered from {existing_source})"
        super().__init__(plugin_id, message, code="DUPLICATE_PLUGIN_ID")


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


# First match wins; JSONDecodeError must precede ValueError.
_BUILTIN_CLASSES: tuple[tuple[type[BaseException], str, ErrorCategory], ...] = (
    (FileNotFoundError, "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND),
    (PermissionError, "PERMISSION_DENIED", ErrorCategory.PERMISSION),
    (asyncio.TimeoutError, "TIMEOUT", ErrorCategory.TIMEOUT),
    (json.JSONDecodeError, "JSON_PARSE_ERROR", ErrorCategory.VALIDATION),
    (ValueError, "INVALID_VALUE", ErrorCategory.VALIDATION),
    (KeyError, "MISSING_KEY", ErrorCategory.VALIDATION),
    (TypeError, "TYPE_ERROR", ErrorCategory.VALIDATION),
    (NotImplementedError, "NOT_IMPLEMENTED", ErrorCategory.FATAL),
)


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory, bool]:
    """Return (error_code, category, should_retry) for any exception."""
    if isinstance(exc, SkinManagerError):
        return exc.code, exc.category, exc.category == ErrorCategory.RETRYABLE
    for exc_type, code, category in _BUILTIN_CLASSES:
        if isinstance(exc, exc_type):
            return code, category, category == ErrorCategory.TIMEOUT
    text = str(exc).lower()
    if "timeout" in text or "timed out" in text:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True
    if "not found" in text:
        return "NOT_FOUND", ErrorCategory.NOT_FOUND, False
    return "INTERNAL_ERROR", ErrorCategory.FATAL, False


def describe_exception(exc: BaseException) -> str:
    """Human-readable message for an error envelope."""
    if isinstance(exc, SkinManagerError):
        return exc.message
    text = sanitize_error_message(str(exc)).strip()
    return text or type(exc).__name__
