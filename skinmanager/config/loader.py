"""Read and write ~/.skinmanager/config.json (camelCase on disk, snake_case in Config)."""

import json
from pathlib import Path
from typing import Any, Callable

from skinmanager.config.schema import Config

# Maps whose keys are identifiers (plugin ids, plugin-owned settings), not field names.
_VERBATIM_KEY_MAPS = ("entries", "config")


def get_config_path() -> Path:
    return Path.home() / ".skinmanager" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """Load config from `config_path` (default location when None).

    A missing file yields defaults. A file that is not a JSON object, or that
    fails validation, raises ValueError naming the file.
    """
    path = config_path or get_config_path()
    if not path.exists():
        return Config()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("config root must be a JSON object")
        return Config.model_validate(convert_keys(_migrate_config(raw)))
    except (json.JSONDecodeError, ValueError) as e:
        raise ValueError(
            f"Failed to load config from {path}: {e}. "
            "Fix the file or remove it to regenerate defaults."
        ) from e


def save_config(config: Config, config_path: Path | None = None) -> None:
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = convert_to_camel(config.model_dump())
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _migrate_config(data: dict) -> dict:
    """Upgrade older layouts in place."""
    plugins = data.get("plugins")
    if not isinstance(plugins, dict):
        return data
    if "loadPaths" in plugins and "load" not in plugins:
        legacy = plugins.pop("loadPaths")
        if isinstance(legacy, list):
            plugins["load"] = {"paths": [str(p) for p in legacy]}
    entries = plugins.get("entries")
    for entry in (entries.values() if isinstance(entries, dict) else ()):
        if not isinstance(entry, dict):
            continue
        entry.setdefault("enabled", True)
        if not isinstance(entry.get("config"), dict):
            entry["config"] = {}
    return data


def _rename_keys(data: Any, rename: Callable[[str], str]) -> Any:
    if isinstance(data, list):
        return [_rename_keys(item, rename) for item in data]
    if not isinstance(data, dict):
        return data
    out: dict[str, Any] = {}
    for key, value in data.items():
        new_key = rename(key)
        if new_key in _VERBATIM_KEY_MAPS and isinstance(value, dict):
            # entries keep their ids but their bodies are still converted; config bodies stay as written
            out[new_key] = {
                k: (_rename_keys(v, rename) if new_key == "entries" else v) for k, v in value.items()
            }
        else:
            out[new_key] = _rename_keys(value, rename)
    return out


def convert_keys(data: Any) -> Any:
    """camelCase -> snake_case for Pydantic, leaving plugin ids and plugin config untouched."""
    return _rename_keys(data, camel_to_snake)


def convert_to_camel(data: Any) -> Any:
    """Inverse of convert_keys."""
    return _rename_keys(data, snake_to_camel)


def camel_to_snake(name: str) -> str:
    return "".join(f"_{ch.lower()}" if ch.isupper() and i else ch.lower() for i, ch in enumerate(name))


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
