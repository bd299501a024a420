"""Python plugin loader: manifest + entrypoint per plugin root."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any

from loguru import logger

from skinmanager.messaging.contracts import MessagePlugin

from .architecture_guard import collect_plugin_isolation_violations
from .core.types import PluginLifecycleState, PluginRecord
from .discovery import MANIFEST_FILENAME, get_plugin_roots

DEFAULT_ENTRY = "plugin.py:plugin"


def _safe_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _diagnostic(code: str, plugin_id: str, message: str, level: str = "error") -> dict[str, Any]:
    return {"level": level, "code": code, "pluginId": plugin_id or "-", "message": message}


def _manifest_capabilities(manifest: dict[str, Any]) -> list[str]:
    caps = manifest.get("capabilities")
    if isinstance(caps, dict):
        return [str(k) for k, v in caps.items() if bool(v)]
    if isinstance(caps, list):
        return [str(x) for x in caps if str(x).strip()]
    return []


def plugin_enabled(plugin_id: str, plugins_cfg: dict[str, Any]) -> bool:
    """Apply enabled / deny / allow / entries[id].enabled, in that order."""
    if not plugins_cfg.get("enabled", True) or plugin_id in (plugins_cfg.get("deny") or ()):
        return False
    allow = plugins_cfg.get("allow") or ()
    if allow and plugin_id not in allow:
        return False
    entry = _safe_dict(_safe_dict(plugins_cfg.get("entries")).get(plugin_id))
    return bool(entry.get("enabled", True))


def _import_file(plugin_root: Path, file_ref: str) -> ModuleType:
    module_path = (plugin_root / file_ref).resolve()
    if not module_path.is_file():
        raise FileNotFoundError(f"entry file not found: {module_path}")
    slug = "".join(ch if ch.isalnum() else "_" for ch in plugin_root.name)
    spec = importlib.util.spec_from_file_location(
        f"skinmanager_plugin_{slug}_{abs(hash(str(module_path)))}", module_path
    )
    if spec is None or spec.loader is None:
        raise ImportError(f"failed to load spec for {module_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _evict_root_modules(plugin_root: Path) -> None:
    root = plugin_root.resolve()
    for name, module in list(sys.modules.items()):
        origin = getattr(module, "__file__", None)
        if origin and Path(origin).resolve().is_relative_to(root):
            sys.modules.pop(name, None)


def _import_module(plugin_root: Path, dotted: str) -> ModuleType:
    """Import a dotted module with the plugin root temporarily on sys.path.

    Modules loaded from the root are dropped from sys.modules afterwards, so two
    roots shipping the same module name each get their own copy.
    """
    root = str(plugin_root)
    sys.path.insert(0, root)
    importlib.invalidate_caches()
    try:
        return importlib.import_module(dotted)
    finally:
        if root in sys.path:
            sys.path.remove(root)
        _evict_root_modules(plugin_root)


@dataclass(slots=True)
class LoadedPlugin:
    """A plugin object that satisfied the plugin contract."""

    plugin: MessagePlugin
    source: str
    capabilities: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PluginLoadResult:
    """Outcome of one discovery pass."""

    plugins: list[LoadedPlugin] = field(default_factory=list)
    records: list[PluginRecord] = field(default_factory=list)
    diagnostics: list[dict[str, Any]] = field(default_factory=list)
    loaded_at_ms: int = 0


class PluginLoader:
    """Loads python plugins from manifest + entrypoint.

    Nothing here initializes a plugin; the registry does that. A broken plugin
    produces an error record and a diagnostic and never stops the others.
    """

    def _scan(self, data_dir: str | Path | None, config: dict[str, Any]) -> list[tuple[Path, dict[str, Any] | None, str]]:
        """(root, manifest, error) per plugin root; manifest is None when it cannot be used."""
        rows: list[tuple[Path, dict[str, Any] | None, str]] = []
        for root in get_plugin_roots(data_dir, config):
            try:
                parsed = json.loads((root / MANIFEST_FILENAME).read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Unreadable plugin manifest in {}: {}", root, exc)
                rows.append((root, None, f"unreadable manifest {root / MANIFEST_FILENAME}: {exc}"))
                continue
            if not isinstance(parsed, dict):
                rows.append((root, None, f"manifest {root / MANIFEST_FILENAME} must be a JSON object"))
                continue
            rows.append((root, parsed, ""))
        return rows

    def discover(self, data_dir: str | Path | None, config: dict[str, Any]) -> list[tuple[Path, dict[str, Any]]]:
        return [(root, manifest) for root, manifest, _ in self._scan(data_dir, config) if manifest is not None]

    def _load_entry(self, plugin_root: Path, entry: str) -> Any:
        """Resolve "module_or_file:object"; classes are instantiated with no arguments."""
        module_ref, _, object_name = (part.strip() for part in entry.partition(":"))
        if not module_ref:
            raise ValueError("entry module is required")
        if module_ref.endswith(".py"):
            module = _import_file(plugin_root, module_ref)
        else:
            module = _import_module(plugin_root, module_ref)
        object_name = object_name or "plugin"
        try:
            target = getattr(module, object_name)
        except AttributeError:
            raise AttributeError(f"entry object not found: {object_name}") from None
        return target() if inspect.isclass(target) else target

    def _instantiate(self, root: Path, manifest: dict[str, Any], plugin_id: str) -> MessagePlugin:
        plugin_obj = self._load_entry(root, str(manifest.get("entry") or DEFAULT_ENTRY))
        if not isinstance(plugin_obj, MessagePlugin):
            raise TypeError("entry object does not implement the message plugin contract")
        if str(plugin_obj.id) != plugin_id:
            raise ValueError(f"plugin id {plugin_obj.id!r} does not match manifest id {plugin_id!r}")
        return plugin_obj

    @staticmethod
    def _failed_record(root: Path, manifest: dict[str, Any], plugin_id: str, error: str) -> PluginRecord:
        return PluginRecord(
            id=plugin_id,
            name=str(manifest.get("name") or plugin_id),
            source=str(root),
            origin="native",
            state=PluginLifecycleState.FAILED.value,
            enabled=False,
            version=str(manifest.get("version") or "") or None,
            description=str(manifest.get("description") or "") or None,
            capabilities=_manifest_capabilities(manifest),
            error=error,
        )

    def load(self, data_dir: str | Path | None, config: dict[str, Any]) -> PluginLoadResult:
        plugins_cfg = _safe_dict(config.get("plugins"))
        result = PluginLoadResult(loaded_at_ms=int(time.time() * 1000))
        sources_by_id: dict[str, str] = {}
        owners_by_type: dict[str, str] = {}
        for root, manifest, error in self._scan(data_dir, config):
            if manifest is None:
                result.records.append(self._failed_record(root, {}, root.name, error))
                result.diagnostics.append(_diagnostic("PLUGIN_MANIFEST_INVALID", root.name, error))
                continue
            plugin_id = str(manifest.get("id") or "").strip()
            if not plugin_id:
                result.diagnostics.append(
                    _diagnostic("PLUGIN_MANIFEST_INVALID", "-", f"missing id in {root / MANIFEST_FILENAME}")
                )
                continue
            if not plugin_enabled(plugin_id, plugins_cfg):
                logger.debug("Plugin {} disabled by config", plugin_id)
                continue
            if plugin_id in sources_by_id:
                result.diagnostics.append(
                    _diagnostic(
                        "PLUGIN_DUPLICATE_ID",
                        plugin_id,
                        f"plugin id already loaded from {sources_by_id[plugin_id]}; ignoring {root}",
                    )
                )
                continue
            try:
                plugin_obj = self._instantiate(root, manifest, plugin_id)
                declared = sorted(plugin_obj.get_handled_message_types() or ())
            except Exception as exc:
                logger.warning("Failed to load plugin {} from {}: {}", plugin_id, root, exc)
                result.records.append(self._failed_record(root, manifest, plugin_id, str(exc)))
                result.diagnostics.append(_diagnostic("PLUGIN_LOAD_FAILED", plugin_id, str(exc)))
                continue
            for message_type in declared:
                owner = owners_by_type.setdefault(message_type, plugin_id)
                if owner != plugin_id:
                    result.diagnostics.append(
                        _diagnostic(
                            "PLUGIN_CONFLICT_MESSAGE_TYPE",
                            plugin_id,
                            f"message type conflict: {message_type} already owned by {owner}",
                        )
                    )
            sources_by_id[plugin_id] = str(root)
            result.plugins.append(
                LoadedPlugin(plugin=plugin_obj, source=str(root), capabilities=_manifest_capabilities(manifest))
            )
        return result

    def doctor(self, data_dir: str | Path | None, config: dict[str, Any]) -> dict[str, Any]:
        """Discovery report without initializing anything; adds PLUGIN_ISOLATION warnings."""
        discovered = self.discover(data_dir=data_dir, config=config)
        result = self.load(data_dir=data_dir, config=config)
        diagnostics = list(result.diagnostics)
        for root, manifest in discovered:
            plugin_id = str(manifest.get("id") or "-")
            diagnostics.extend(
                _diagnostic("PLUGIN_ISOLATION", plugin_id, violation, level="warning")
                for violation in collect_plugin_isolation_violations(root)
            )
        rows = [
            {"id": p.plugin.id, "state": "loaded", "origin": "native", "source": p.source, "error": None}
            for p in result.plugins
        ]
        rows.extend(
            {"id": r.id, "state": r.state, "origin": r.origin, "source": r.source, "error": r.error}
            for r in result.records
        )
        return {
            "checks": {
                "dataDirExists": bool(data_dir) and Path(data_dir).expanduser().exists(),
                "discoveredCount": len(discovered),
                "loadedCount": len(result.plugins),
                "errorCount": len(result.records),
            },
            "plugins": rows,
            "diagnostics": diagnostics,
        }
