"""Plugin root discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Any

MANIFEST_FILENAME = "skinmanager.plugin.json"


def _safe_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _configured_paths(config: Any) -> list[str]:
    if hasattr(config, "plugins"):
        load_cfg = getattr(getattr(config, "plugins", None), "load", None)
        return [str(p) for p in (getattr(load_cfg, "paths", []) or [])]
    if isinstance(config, dict):
        load_cfg = _safe_dict(_safe_dict(config.get("plugins")).get("load"))
        return [str(x).strip() for x in (load_cfg.get("paths") or []) if str(x).strip()]
    return []


def get_plugin_roots(data_dir: Path | str | None, config: Any) -> list[Path]:
    """
    Return plugin root directories in a consistent order, deduplicated by resolve().
    Accepts config as object (with .plugins.load.paths) or dict (with ["plugins"]["load"]["paths"]).
    Order: config load.paths, then <data_dir>/plugins.

    A candidate may be a manifest file, a directory holding a manifest, or a
    directory whose immediate children hold manifests.
    """
    candidates: list[Path] = [Path(p).expanduser() for p in _configured_paths(config) if p.strip()]
    if data_dir:
        candidates.append(Path(data_dir).expanduser() / "plugins")
    roots: list[Path] = []
    seen: set[str] = set()

    def _add(root: Path) -> None:
        resolved = root.resolve()
        key = str(resolved)
        if key not in seen:
            seen.add(key)
            roots.append(resolved)

    for candidate in candidates:
        if not candidate.exists():
            continue
        if candidate.is_file() and candidate.name == MANIFEST_FILENAME:
            _add(candidate.parent)
        elif candidate.is_dir() and (candidate / MANIFEST_FILENAME).exists():
            _add(candidate)
        elif candidate.is_dir():
            for child in sorted(candidate.iterdir()):
                if child.is_dir() and (child / MANIFEST_FILENAME).exists():
                    _add(child)
    return roots
