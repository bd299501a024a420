"""Shared plugin types."""

from .types import (
    ALLOWED_TRANSITIONS,
    PluginDescriptor,
    PluginHostError,
    PluginLifecycleState,
    PluginRecord,
    can_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "PluginDescriptor",
    "PluginHostError",
    "PluginLifecycleState",
    "PluginRecord",
    "can_transition",
]
