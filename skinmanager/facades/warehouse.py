"""WAREHOUSE_* messages: online mod warehouse (not available yet)."""

from __future__ import annotations

from typing import Any

from skinmanager.messaging.envelope import MessageRequest

from .base import BaseFacade, Route

WAREHOUSE_UNAVAILABLE = "Mod warehouse feature not yet implemented"


class WarehouseFacade(BaseFacade):
    module_name = "WarehouseFacade"

    def routes(self) -> dict[str, Route]:
        return {
            "WAREHOUSE_SEARCH": self.search,
            "WAREHOUSE_DOWNLOAD": self.download,
        }

    async def search(self, request: MessageRequest) -> Any:
        raise NotImplementedError(WAREHOUSE_UNAVAILABLE)

    async def download(self, request: MessageRequest) -> Any:
        raise NotImplementedError(WAREHOUSE_UNAVAILABLE)
