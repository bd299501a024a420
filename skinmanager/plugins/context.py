"""Capability-scoped context handed to each plugin at initialize time."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from loguru import logger

from .core.types import PluginHostError
from .events import EventHandler, PluginEventArgs, PluginEventBus, PluginEventType

GRANT_DATA = "data"
GRANT_EVENTS = "events"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class PluginContext:
    """What a plugin may touch on the host.

    Logging is always available. Named services, a per-plugin data directory
    and the event bus exist only when the host explicitly granted them; asking
    for anything else raises PluginHostError instead of reaching into the host.
    """

    def __init__(
        self,
        plugin_id: str,
        *,
        services: Mapping[str, Any] | None = None,
        data_root: Path | None = None,
        event_bus: PluginEventBus | None = None,
        config: Mapping[str, Any] | None = None,
    ):
        if not plugin_id or not plugin_id.strip():
            raise ValueError("plugin_id is required")
        self.plugin_id = plugin_id
        self._services = MappingProxyType(dict(services or {}))
        self._data_root = data_root
        self._event_bus = event_bus
        self._config = MappingProxyType(dict(config or {}))
        self._logger = logger.bind(plugin_id=plugin_id)
        self._registrations: list[str] = []

    @property
    def config(self) -> Mapping[str, Any]:
        """This plugin's own `plugins.entries[id].config` block."""
        return self._config

    @property
    def granted_services(self) -> list[str]:
        return sorted(self._services)

    def log(self, level: LogLevel | str, message: str, exc: BaseException | None = None) -> None:
        name = level.value if isinstance(level, LogLevel) else str(level).upper()
        if name not in LogLevel.__members__:
            name = LogLevel.INFO.value
        if exc is not None:
            self._logger.opt(exception=exc).log(name, "[{}] {}", self.plugin_id, message)
        else:
            self._logger.log(name, "[{}] {}", self.plugin_id, message)

    def has_service(self, name: str) -> bool:
        return name in self._services

    def get_service(self, name: str) -> Any:
        if name not in self._services:
            raise PluginHostError(
                "SERVICE_NOT_GRANTED",
                f"service '{name}' was not granted to plugin {self.plugin_id}",
            )
        return self._services[name]

    def get_plugin_data_path(self) -> Path:
        if self._data_root is None:
            raise PluginHostError("DATA_NOT_GRANTED", f"plugin {self.plugin_id} has no data directory grant")
        path = self._data_root / "plugins" / self.plugin_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _require_bus(self) -> PluginEventBus:
        if self._event_bus is None:
            raise PluginHostError("EVENTS_NOT_GRANTED", f"plugin {self.plugin_id} has no event bus grant")
        return self._event_bus

    def register_event_handler(self, event_type: PluginEventType, handler: EventHandler) -> str:
        registration_id = self._require_bus().register_handler(event_type, handler)
        self._registrations.append(registration_id)
        return registration_id

    def unregister_event_handler(self, registration_id: str) -> None:
        self._require_bus().unregister_handler(registration_id)
        if registration_id in self._registrations:
            self._registrations.remove(registration_id)

    async def emit_event(self, event_name: str, data: Any = None) -> None:
        await self._require_bus().emit(
            PluginEventArgs(event_type=PluginEventType.CUSTOM_EVENT, event_name=event_name, data=data)
        )

    def release(self) -> None:
        """Drop every event registration made through this context."""
        if self._event_bus is None:
            return
        for registration_id in self._registrations:
            self._event_bus.unregister_handler(registration_id)
        self._registrations.clear()


def build_plugin_context(
    plugin_id: str,
    grants: list[str] | tuple[str, ...],
    *,
    services: Mapping[str, Any] | None = None,
    data_root: Path | None = None,
    event_bus: PluginEventBus | None = None,
    config: Mapping[str, Any] | None = None,
) -> PluginContext:
    """Build a context exposing only what `grants` names.

    `grants` may contain GRANT_DATA, GRANT_EVENTS, and service names from
    `services`; unknown service names are logged and ignored.
    """
    available = dict(services or {})
    granted: dict[str, Any] = {}
    for grant in grants:
        if grant in (GRANT_DATA, GRANT_EVENTS):
            continue
        if grant in available:
            granted[grant] = available[grant]
        else:
            logger.warning("Plugin {} was granted unknown service {}", plugin_id, grant)
    return PluginContext(
        plugin_id,
        services=granted,
        data_root=data_root if GRANT_DATA in grants else None,
        event_bus=event_bus if GRANT_EVENTS in grants else None,
        config=config,
    )
