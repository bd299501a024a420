"""Utility functions for skinmanager."""

from skinmanager.utils.helpers import format_size
from skinmanager.utils.exceptions import (
    SkinManagerError,
    ValidationError,
    NotFoundError,
    ConfigurationError,
    DuplicateRegistrationError,
    PluginError,
    PluginLifecycleError,
    DuplicatePluginError,
    ErrorCategory,
    classify_exception,
    describe_exception,
    sanitize_error_message,
)

__all__ = [
    "format_size",
    "SkinManagerError",
    "ValidationError",
    "NotFoundError",
    "ConfigurationError",
    "DuplicateRegistrationError",
    "PluginError",
    "PluginLifecycleError",
    "DuplicatePluginError",
    "ErrorCategory",
    "classify_exception",
    "describe_exception",
    "sanitize_error_message",
]
