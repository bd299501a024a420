"""Plugin registry: identity, lifecycle state and sequential init/shutdown."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from loguru import logger

from skinmanager.messaging.contracts import MessagePlugin
from skinmanager.utils.exceptions import DuplicatePluginError, NotFoundError, PluginLifecycleError, describe_exception

from .core.types import PluginDescriptor, PluginLifecycleState, PluginRecord, can_transition

ContextFactory = Callable[[PluginDescriptor], Any]


def _release_context(context: Any) -> None:
    release = getattr(context, "release", None)
    if callable(release):
        release()


@dataclass(slots=True)
class PluginEntry:
    """One registered plugin instance and everything the host tracks about it."""

    plugin: MessagePlugin
    descriptor: PluginDescriptor
    origin: str = "builtin"
    source: str = ""
    capabilities: list[str] = field(default_factory=list)
    state: PluginLifecycleState = PluginLifecycleState.DISCOVERED
    error: str | None = None
    context: Any = None

    def transition(self, target: PluginLifecycleState) -> None:
        if not can_transition(self.state, target):
            raise PluginLifecycleError(self.descriptor.id, self.state.value, target.value)
        logger.debug("Plugin {}: {} -> {}", self.descriptor.id, self.state.value, target.value)
        self.state = target

    def to_record(self) -> PluginRecord:
        d = self.descriptor
        return PluginRecord(
            id=d.id,
            name=d.name,
            source=self.source,
            origin=self.origin,
            state=self.state.value,
            enabled=self.state == PluginLifecycleState.ACTIVE,
            version=d.version,
            description=d.description or None,
            author=d.author or None,
            capabilities=list(self.capabilities),
            message_types=sorted(d.message_types),
            error=self.error,
        )


class PluginRegistry:
    """Owns every discovered plugin instance, keyed by unique plugin id.

    Initialization and shutdown run one plugin at a time, in registration
    order. A plugin that fails to initialize is marked FAILED and is never
    offered to the router.
    """

    def __init__(self) -> None:
        self._entries: dict[str, PluginEntry] = {}

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def add(
        self,
        plugin: MessagePlugin,
        *,
        origin: str = "builtin",
        source: str = "",
        capabilities: list[str] | None = None,
    ) -> PluginEntry:
        """Register a discovered plugin; a second plugin with the same id is rejected."""
        descriptor = PluginDescriptor.from_plugin(plugin)
        existing = self._entries.get(descriptor.id)
        if existing is not None:
            raise DuplicatePluginError(descriptor.id, existing.source or existing.origin)
        entry = PluginEntry(
            plugin=plugin,
            descriptor=descriptor,
            origin=origin,
            source=source,
            capabilities=list(capabilities or []),
        )
        self._entries[descriptor.id] = entry
        logger.debug("Registered plugin {} ({}) from {}", descriptor.id, descriptor.version, origin)
        return entry

    def get(self, plugin_id: str) -> PluginEntry:
        entry = self._entries.get(plugin_id)
        if entry is None:
            raise NotFoundError("Plugin", plugin_id)
        return entry

    def entries(self) -> list[PluginEntry]:
        return list(self._entries.values())

    def records(self) -> list[PluginRecord]:
        return [entry.to_record() for entry in self._entries.values()]

    def active_plugins(self) -> list[MessagePlugin]:
        return [e.plugin for e in self._entries.values() if e.state == PluginLifecycleState.ACTIVE]

    async def initialize_all(self, context_factory: ContextFactory) -> list[dict[str, Any]]:
        """Initialize every DISCOVERED plugin sequentially; return diagnostics for failures."""
        diagnostics: list[dict[str, Any]] = []
        for entry in list(self._entries.values()):
            if entry.state != PluginLifecycleState.DISCOVERED:
                continue
            diag = await self.initialize(entry, context_factory)
            if diag:
                diagnostics.append(diag)
        return diagnostics

    async def initialize(self, entry: PluginEntry, context_factory: ContextFactory) -> dict[str, Any] | None:
        plugin_id = entry.descriptor.id
        entry.transition(PluginLifecycleState.INITIALIZING)
        context = None
        try:
            context = context_factory(entry.descriptor)
            await entry.plugin.initialize(context)
        except Exception as exc:
            # drop anything the plugin registered before failing
            _release_context(context)
            entry.error = describe_exception(exc)
            entry.transition(PluginLifecycleState.FAILED)
            logger.warning("Plugin {} failed to initialize: {}", plugin_id, entry.error)
            return {
                "level": "error",
                "code": "PLUGIN_INIT_FAILED",
                "pluginId": plugin_id,
                "message": entry.error,
            }
        entry.context = context
        entry.transition(PluginLifecycleState.ACTIVE)
        logger.info("Plugin {} {} active", plugin_id, entry.descriptor.version)
        return None

    async def shutdown(self, plugin_id: str) -> bool:
        """Shut one ACTIVE plugin down; failures are logged and reported, never raised."""
        entry = self.get(plugin_id)
        if entry.state != PluginLifecycleState.ACTIVE:
            return False
        entry.transition(PluginLifecycleState.SHUTTING_DOWN)
        try:
            await entry.plugin.shutdown()
        except Exception as exc:
            entry.error = describe_exception(exc)
            entry.transition(PluginLifecycleState.FAILED)
            logger.warning("Plugin {} failed to shut down: {}", plugin_id, entry.error)
            return False
        finally:
            _release_context(entry.context)
        entry.transition(PluginLifecycleState.STOPPED)
        logger.info("Plugin {} stopped", plugin_id)
        return True

    async def shutdown_all(self) -> None:
        for plugin_id, entry in list(self._entries.items()):
            if entry.state == PluginLifecycleState.ACTIVE:
                await self.shutdown(plugin_id)
