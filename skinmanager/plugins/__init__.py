"""Plugins package: discovery, lifecycle and the context handed to plugins."""

from .builtin import StubMessagePlugin, builtin_plugins
from .context import LogLevel, PluginContext, build_plugin_context
from .core.types import PluginDescriptor, PluginHostError, PluginLifecycleState, PluginRecord
from .events import PluginEventArgs, PluginEventBus, PluginEventType
from .lifecycle import PluginEntry, PluginRegistry
from .loader import LoadedPlugin, PluginLoader, PluginLoadResult

__all__ = [
    "LoadedPlugin",
    "LogLevel",
    "PluginContext",
    "PluginDescriptor",
    "PluginEntry",
    "PluginEventArgs",
    "PluginEventBus",
    "PluginEventType",
    "PluginHostError",
    "PluginLifecycleState",
    "PluginLoadResult",
    "PluginLoader",
    "PluginRecord",
    "PluginRegistry",
    "StubMessagePlugin",
    "build_plugin_context",
    "builtin_plugins",
]
