"""Plugins shipped with the host.

Each one owns its message types but has no behaviour yet: every request is
answered with a "Not yet implemented" error envelope.
"""

from __future__ import annotations

from typing import Any

from skinmanager.messaging.envelope import MessageRequest, MessageResponse

from .context import LogLevel, PluginContext
from .loader import plugin_enabled

NOT_IMPLEMENTED = "Not yet implemented"
BUILTIN_AUTHOR = "D3dxSkinManager"


class StubMessagePlugin:
    """Base for plugins that claim message types without implementing them."""

    id: str = ""
    name: str = ""
    version: str = "1.0.0"
    description: str = ""
    author: str = BUILTIN_AUTHOR
    message_types: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._context: PluginContext | None = None

    async def initialize(self, context: PluginContext | None) -> None:
        if context is None:
            raise ValueError("context is required")
        self._context = context
        context.log(LogLevel.INFO, f"[{self.name}] Initialized")

    async def shutdown(self) -> None:
        if self._context is not None:
            self._context.log(LogLevel.INFO, f"[{self.name}] Shut down")

    def get_handled_message_types(self) -> set[str]:
        return set(self.message_types)

    async def handle_message(self, request: MessageRequest) -> MessageResponse:
        if self._context is not None:
            self._context.log(LogLevel.WARNING, f"[{self.name}] Message handler not implemented: {request.type}")
        return MessageResponse.create_error(request.id, NOT_IMPLEMENTED)


class UnloadObjectModsPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.unloadobjectmods"
    name = "Unload Object Mods"
    description = "Bulk unload operations by object or category"
    message_types = ("UNLOAD_OBJECT", "UNLOAD_CATEGORY", "UNLOAD_ALL")


class ModifyObjectNamePlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.modifyobjectname"
    name = "Modify Object Name"
    description = "Rename object categories and update associated mods"
    message_types = ("RENAME_OBJECT", "VALIDATE_OBJECT_NAME")


class ModifyKeySwapPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.modifykeyswap"
    name = "Modify Key Swap"
    description = "Advanced merged mod key binding editor"
    message_types = ("GET_KEY_BINDINGS", "SET_KEY_BINDING", "VALIDATE_KEY_CONFIG")


class CheckModsAccidentPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.checkmodsaccident"
    name = "Check Mods Accident"
    description = "Detect and fix corrupted mod files"
    message_types = ("SCAN_CORRUPTED_MODS", "FIX_CORRUPTED_MOD")


class ViewIniConfigPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.viewiniconfig"
    name = "View INI Config"
    description = "Browse and view INI configuration files"
    message_types = ("VIEW_INI_FILES", "GET_INI_CONTENT")


class SearchClassAndObjectPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.searchclassandobject"
    name = "Search Class And Object"
    description = "Real-time search and filtering with negation support"
    message_types = ("SEARCH_MODS", "FILTER_BY_CLASS", "FILTER_BY_OBJECT")


class BatchProcessingToolsPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.batchprocessingtools"
    name = "Batch Processing Tools"
    description = "Bulk mod operations framework"
    message_types = ("BATCH_DELETE", "BATCH_EXPORT", "BATCH_IMPORT", "BATCH_LOAD", "BATCH_UNLOAD")


class ExportModFilePlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.exportmodfile"
    name = "Export Mod File"
    description = "Export mods to zip/7z packages for distribution"
    message_types = ("EXPORT_MOD_ZIP", "EXPORT_MOD_7Z", "EXPORT_WITH_PREVIEW")


class MultiplePreviewPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.multiplepreview"
    name = "Multiple Preview"
    description = "Support for multiple preview images per mod"
    message_types = ("GET_PREVIEW_IMAGES", "ADD_PREVIEW_IMAGE", "DELETE_PREVIEW_IMAGE")


class AutoLoginPlugin(StubMessagePlugin):
    id = "com.d3dxskinmanager.autologin"
    name = "Auto Login"
    description = "Automated user login and program launch system"
    message_types = ("ENABLE_AUTO_LOGIN", "DISABLE_AUTO_LOGIN", "LAUNCH_PROGRAM")


BUILTIN_PLUGIN_TYPES: tuple[type[StubMessagePlugin], ...] = (
    UnloadObjectModsPlugin,
    ModifyObjectNamePlugin,
    ModifyKeySwapPlugin,
    CheckModsAccidentPlugin,
    ViewIniConfigPlugin,
    SearchClassAndObjectPlugin,
    BatchProcessingToolsPlugin,
    ExportModFilePlugin,
    MultiplePreviewPlugin,
    AutoLoginPlugin,
)


def builtin_plugins(plugins_cfg: dict[str, Any] | None = None) -> list[StubMessagePlugin]:
    """Fresh instances of every built-in plugin enabled by `plugins_cfg`."""
    cfg = plugins_cfg or {}
    return [cls() for cls in BUILTIN_PLUGIN_TYPES if plugin_enabled(cls.id, cfg)]
