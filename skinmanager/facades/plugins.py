"""PLUGINS_* messages: read-only view of the plugin registry."""

from __future__ import annotations

from typing import Any, Callable

from skinmanager.messaging.envelope import MessageRequest
from skinmanager.messaging.payload import get_required_string
from skinmanager.plugins.core.types import PluginRecord
from skinmanager.utils.exceptions import NotFoundError

from .base import BaseFacade, Route

RecordsProvider = Callable[[], list[PluginRecord]]


def plugin_info(record: PluginRecord) -> dict[str, Any]:
    capabilities = ["MessageHandler", *[c for c in record.capabilities if c != "MessageHandler"]]
    return {
        "id": record.id,
        "name": record.name,
        "version": record.version or "",
        "description": record.description or "",
        "author": record.author or "",
        "isEnabled": record.enabled,
        "state": record.state,
        "origin": record.origin,
        "capabilities": capabilities,
        "messageTypes": list(record.message_types),
        "error": record.error,
    }


class PluginsFacade(BaseFacade):
    module_name = "PluginsFacade"

    def __init__(self, records_provider: RecordsProvider):
        self._records_provider = records_provider
        super().__init__()

    def routes(self) -> dict[str, Route]:
        return {
            "PLUGINS_GET_ALL": self.get_all_plugins,
            "PLUGINS_GET_INFO": self.get_plugin_info,
            "PLUGINS_ENABLE": self.enable_plugin,
            "PLUGINS_DISABLE": self.disable_plugin,
        }

    async def get_all_plugins(self, request: MessageRequest) -> list[dict[str, Any]]:
        return [plugin_info(r) for r in self._records_provider()]

    async def get_plugin_info(self, request: MessageRequest) -> dict[str, Any]:
        plugin_id = get_required_string(request, "pluginId")
        for record in self._records_provider():
            if record.id == plugin_id or record.name == plugin_id:
                return plugin_info(record)
        raise NotFoundError("Plugin", plugin_id)

    async def enable_plugin(self, request: MessageRequest) -> bool:
        get_required_string(request, "pluginId")
        # TODO: persist plugins.entries[id].enabled and restart the plugin in place.
        raise NotImplementedError("Plugin enable/disable not yet implemented")

    async def disable_plugin(self, request: MessageRequest) -> bool:
        get_required_string(request, "pluginId")
        raise NotImplementedError("Plugin enable/disable not yet implemented")
