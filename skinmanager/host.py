"""Composition root: builds facades, plugins and the router, and owns their lifetime."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from loguru import logger

from skinmanager.config.schema import Config
from skinmanager.dispatch.router import DispatchRouter
from skinmanager.facades.base import BaseFacade
from skinmanager.facades.migoto import D3DMigotoFacade
from skinmanager.facades.plugins import PluginsFacade
from skinmanager.facades.warehouse import WarehouseFacade
from skinmanager.messaging.contracts import MessagePlugin
from skinmanager.messaging.envelope import MessageRequest, MessageResponse
from skinmanager.plugins.builtin import builtin_plugins
from skinmanager.plugins.context import PluginContext, build_plugin_context
from skinmanager.plugins.core.types import PluginDescriptor, PluginRecord
from skinmanager.plugins.events import PluginEventArgs, PluginEventBus, PluginEventType
from skinmanager.plugins.lifecycle import PluginRegistry
from skinmanager.plugins.loader import PluginLoader
from skinmanager.services.contracts import ConfigStore, FileStore, ProcessRunner
from skinmanager.services.local import JsonConfigStore, LocalFileStore, SubprocessRunner
from skinmanager.utils.exceptions import DuplicatePluginError

HOST_NOT_RUNNING = "Host is not running"


class SkinManagerHost:
    """Wires every handler into one router and drives plugin lifecycles.

    Startup: register plugins (built-in, then discovered), initialize them one
    at a time, then build the router from facades plus ACTIVE plugins. A
    message-type collision aborts startup. Teardown shuts plugins down one at a
    time and keeps going past failures.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        facades: Iterable[BaseFacade] | None = None,
        plugins: Iterable[MessagePlugin] | None = None,
        loader: PluginLoader | None = None,
        services: Mapping[str, Any] | None = None,
    ):
        self.config = config or Config()
        self.services: dict[str, Any] = dict(services or {})
        self.registry = PluginRegistry()
        self.event_bus = PluginEventBus()
        self.loader = loader if loader is not None else PluginLoader()
        self.diagnostics: list[dict[str, Any]] = []
        self._extra_plugins = list(plugins or [])
        self._facades = list(facades) if facades is not None else self._default_facades()
        self._router: DispatchRouter | None = None
        self._load_errors: list[PluginRecord] = []

    @property
    def running(self) -> bool:
        return self._router is not None

    @property
    def router(self) -> DispatchRouter | None:
        return self._router

    def _default_facades(self) -> list[BaseFacade]:
        facades: list[BaseFacade] = [WarehouseFacade(), PluginsFacade(self.plugin_records)]
        config_store = self.services.get("config_store")
        file_store = self.services.get("file_store")
        process_runner = self.services.get("process_runner")
        if (
            isinstance(config_store, ConfigStore)
            and isinstance(file_store, FileStore)
            and isinstance(process_runner, ProcessRunner)
        ):
            facades.append(
                D3DMigotoFacade(self.config.data_path / "3dmigoto", config_store, file_store, process_runner)
            )
        else:
            logger.debug("3DMigoto facade disabled: file/config/process services not provided")
        return facades

    def plugin_records(self) -> list[PluginRecord]:
        return [*self.registry.records(), *self._load_errors]

    def _context_for(self, descriptor: PluginDescriptor) -> PluginContext:
        entry = self.config.plugin_entry(descriptor.id)
        return build_plugin_context(
            descriptor.id,
            entry.grants,
            services=self.services,
            data_root=self.config.data_path,
            event_bus=self.event_bus,
            config=entry.config,
        )

    def _register(self, plugin: MessagePlugin, origin: str, source: str, capabilities: list[str]) -> None:
        try:
            self.registry.add(plugin, origin=origin, source=source, capabilities=capabilities)
        except DuplicatePluginError as exc:
            logger.warning("Rejected plugin from {}: {}", source or origin, exc.message)
            self.diagnostics.append(
                {"level": "error", "code": exc.code, "pluginId": exc.plugin_id, "message": exc.message}
            )
        except Exception as exc:
            plugin_id = str(getattr(plugin, "id", "-"))
            logger.warning("Rejected plugin {}: {}", plugin_id, exc)
            self.diagnostics.append(
                {"level": "error", "code": "PLUGIN_REGISTER_FAILED", "pluginId": plugin_id, "message": str(exc)}
            )

    def _collect_plugins(self) -> None:
        plugins_cfg = self.config.model_dump()["plugins"]
        if self.config.plugins.builtin:
            for plugin in builtin_plugins(plugins_cfg):
                self._register(plugin, "builtin", "skinmanager.plugins.builtin", [])
        for plugin in self._extra_plugins:
            self._register(plugin, "embedded", type(plugin).__module__, [])
        if not self.config.plugins.enabled:
            return
        result = self.loader.load(self.config.data_path, {"plugins": plugins_cfg})
        self.diagnostics.extend(result.diagnostics)
        self._load_errors.extend(result.records)
        for loaded in result.plugins:
            self._register(loaded.plugin, "native", loaded.source, loaded.capabilities)

    async def start(self) -> None:
        """Discover, initialize and route. Raises ConfigurationError on a type collision."""
        if self._router is not None:
            return
        # a restart rebuilds everything; stopped entries would shadow the new instances
        self.registry = PluginRegistry()
        self.diagnostics = []
        self._load_errors = []
        self._collect_plugins()
        self.diagnostics.extend(await self.registry.initialize_all(self._context_for))
        handlers = [*self._facades, *self.registry.active_plugins()]
        try:
            router = DispatchRouter(handlers)
        except Exception:
            await self.registry.shutdown_all()
            raise
        self._router = router
        logger.info(
            "Host started: {} message types, {} active plugins",
            len(router),
            len(self.registry.active_plugins()),
        )
        await self.event_bus.emit(PluginEventArgs(event_type=PluginEventType.APPLICATION_STARTED))

    async def dispatch(self, request: MessageRequest) -> MessageResponse:
        router = self._router
        if router is None:
            return MessageResponse.create_error(request.id, HOST_NOT_RUNNING)
        return await router.dispatch(request)

    async def unload_plugin(self, plugin_id: str) -> bool:
        """Shut a plugin down and stop routing to it; its types become unknown."""
        entry = self.registry.get(plugin_id)
        if self._router is not None:
            self._router = self._router.without(entry.plugin)
        return await self.registry.shutdown(plugin_id)

    async def shutdown(self) -> None:
        if self._router is None:
            return
        await self.event_bus.emit(PluginEventArgs(event_type=PluginEventType.APPLICATION_SHUTDOWN))
        self._router = None
        await self.registry.shutdown_all()
        logger.info("Host stopped")

    async def __aenter__(self) -> SkinManagerHost:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()


def local_services(data_dir: Path) -> dict[str, Any]:
    """Disk-backed services for running the host from the command line."""
    return {
        "config_store": JsonConfigStore(data_dir / "settings.json"),
        "file_store": LocalFileStore(),
        "process_runner": SubprocessRunner(),
    }
