"""In-process event bus plugins use to observe application events."""

from __future__ import annotations

import asyncio
import inspect
import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

from loguru import logger


class PluginEventType(str, Enum):
    APPLICATION_STARTED = "application_started"
    APPLICATION_SHUTDOWN = "application_shutdown"
    MOD_LOADED = "mod_loaded"
    MOD_UNLOADED = "mod_unloaded"
    MOD_DELETED = "mod_deleted"
    MOD_IMPORTED = "mod_imported"
    MODS_REFRESHED = "mods_refreshed"
    CLASSIFICATION_TREE_CHANGED = "classification_tree_changed"
    CUSTOM_EVENT = "custom_event"


@dataclass(slots=True)
class PluginEventArgs:
    """Event payload. `event_name` is only meaningful for CUSTOM_EVENT."""

    event_type: PluginEventType
    event_name: str | None = None
    data: Any = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[PluginEventArgs], Awaitable[None] | None]


class PluginEventBus:
    """Registration-id keyed handlers; emit fans out to every handler of the event type."""

    def __init__(self) -> None:
        self._handlers: dict[str, tuple[PluginEventType, EventHandler]] = {}
        self._counter = itertools.count(1)

    def register_handler(self, event_type: PluginEventType, handler: EventHandler) -> str:
        if not callable(handler):
            raise ValueError("event handler must be callable")
        registration_id = f"{event_type.value}_{next(self._counter)}_{uuid.uuid4().hex[:8]}"
        self._handlers[registration_id] = (event_type, handler)
        return registration_id

    def unregister_handler(self, registration_id: str) -> bool:
        return self._handlers.pop(registration_id, None) is not None

    def handler_count(self, event_type: PluginEventType | None = None) -> int:
        if event_type is None:
            return len(self._handlers)
        return sum(1 for kind, _ in self._handlers.values() if kind == event_type)

    async def emit(self, args: PluginEventArgs) -> None:
        """Invoke matching handlers concurrently; a failing handler never affects the others."""
        matching = [handler for kind, handler in list(self._handlers.values()) if kind == args.event_type]
        if not matching:
            return
        await asyncio.gather(*(self._safe_invoke(handler, args) for handler in matching))

    @staticmethod
    async def _safe_invoke(handler: EventHandler, args: PluginEventArgs) -> None:
        try:
            result = handler(args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Plugin event handler failed for {}", args.event_type.value)
