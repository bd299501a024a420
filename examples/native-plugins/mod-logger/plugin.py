"""Example plugin: records mod events to a log file and serves it back."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any

from skinmanager.messaging import MessageRequest, MessageResponse
from skinmanager.plugins.context import LogLevel, PluginContext
from skinmanager.plugins.events import PluginEventArgs, PluginEventType

LOG_FILENAME = "mod_operations.log"


def _sha(data: Any) -> str:
    if isinstance(data, dict):
        return str(data.get("sha") or data.get("SHA") or "unknown")
    return "unknown"


class ModLoggerPlugin:
    """Needs the "data" and "events" grants in plugins.entries."""

    id = "com.d3dxskinmanager.modlogger"
    name = "Mod Logger"
    version = "1.0.0"
    description = "Logs all mod operations to console and file"
    author = "D3dxSkinManager Team"

    def __init__(self) -> None:
        self._context: PluginContext | None = None
        self._log_path: Path | None = None
        self._lock = asyncio.Lock()

    async def initialize(self, context: PluginContext | None) -> None:
        if context is None:
            raise ValueError("context is required")
        self._context = context
        self._log_path = context.get_plugin_data_path() / LOG_FILENAME
        context.log(LogLevel.INFO, f"[{self.name}] Initialized")
        context.log(LogLevel.INFO, f"[{self.name}] Log file: {self._log_path}")
        context.register_event_handler(PluginEventType.APPLICATION_STARTED, self._on_application_started)
        for event_type in (
            PluginEventType.MOD_LOADED,
            PluginEventType.MOD_UNLOADED,
            PluginEventType.MOD_DELETED,
        ):
            context.register_event_handler(event_type, self._on_mod_event)
        context.register_event_handler(PluginEventType.MOD_IMPORTED, self._on_mod_imported)
        await self._write("=== Mod Logger Plugin Started ===")

    async def shutdown(self) -> None:
        await self._write("=== Mod Logger Plugin Shutdown ===")
        if self._context is not None:
            self._context.log(LogLevel.INFO, f"[{self.name}] Shut down")

    def get_handled_message_types(self) -> set[str]:
        return {"GET_MOD_LOG", "CLEAR_MOD_LOG"}

    async def handle_message(self, request: MessageRequest) -> MessageResponse:
        try:
            if request.type == "GET_MOD_LOG":
                return MessageResponse.create_success(request.id, {"log": await self._read()})
            if request.type == "CLEAR_MOD_LOG":
                if self._log_path is None:
                    return MessageResponse.create_error(request.id, "Log file not initialized")
                async with self._lock:
                    self._log_path.write_text("", encoding="utf-8")
                await self._write("=== Log Cleared ===")
                return MessageResponse.create_success(request.id, {"success": True})
            return MessageResponse.create_error(request.id, f"Unknown message type: {request.type}")
        except OSError as exc:
            return MessageResponse.create_error(request.id, str(exc))

    async def _on_application_started(self, args: PluginEventArgs) -> None:
        await self._write(f"Application started at {args.timestamp:%Y-%m-%d %H:%M:%S}")

    async def _on_mod_event(self, args: PluginEventArgs) -> None:
        message = f"[{args.event_type.name}] SHA: {_sha(args.data)}"
        if self._context is not None:
            self._context.log(LogLevel.INFO, f"[{self.name}] {message}")
        await self._write(message)

    async def _on_mod_imported(self, args: PluginEventArgs) -> None:
        if not isinstance(args.data, dict):
            return
        mod = args.data
        message = (
            f"[MOD_IMPORTED] Name: {mod.get('name')}, Object: {mod.get('category')}, SHA: {_sha(mod)}"
        )
        if self._context is not None:
            self._context.log(LogLevel.INFO, f"[{self.name}] {message}")
        await self._write(message)

    async def _read(self) -> str:
        if self._log_path is None or not self._log_path.exists():
            return ""
        async with self._lock:
            return self._log_path.read_text(encoding="utf-8")

    async def _write(self, message: str) -> None:
        if self._log_path is None:
            return
        line = f"[{datetime.now():%Y-%m-%d %H:%M:%S}] {message}\n"
        async with self._lock:
            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(line)
