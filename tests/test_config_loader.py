from __future__ import annotations

import json
from pathlib import Path

import pytest

from skinmanager.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    load_config,
    save_config,
    snake_to_camel,
)
from skinmanager.config.schema import Config


def test_missing_file_gives_defaults(tmp_path: Path):
    cfg = load_config(tmp_path / "absent.json")
    assert cfg.plugins.enabled is True
    assert cfg.plugins.builtin is True
    assert cfg.plugins.load.paths == []
    assert cfg.logging.level == "INFO"


def test_load_camel_case_and_preserve_plugin_ids(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "dataDir": str(tmp_path / "data"),
                "plugins": {
                    "entries": {
                        "com.example.myPlugin": {"grants": ["data"], "config": {"someKey": 1}},
                    }
                },
                "logging": {"level": "DEBUG"},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.data_dir == str(tmp_path / "data")
    entry = cfg.plugin_entry("com.example.myPlugin")
    assert entry.grants == ["data"]
    assert entry.config == {"someKey": 1}
    assert entry.enabled is True
    assert cfg.logging.level == "DEBUG"


def test_legacy_load_paths_migrated(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"plugins": {"loadPaths": ["/opt/plugins"]}}), encoding="utf-8")
    assert load_config(path).plugins.load.paths == ["/opt/plugins"]


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_invalid_file_raises_value_error(tmp_path: Path, content: str):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to load config from"):
        load_config(path)


def test_save_then_load(tmp_path: Path):
    path = tmp_path / "nested" / "config.json"
    cfg = Config(data_dir="/srv/skins")
    cfg.plugins.deny = ["com.example.off"]
    save_config(cfg, path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["dataDir"] == "/srv/skins"
    assert load_config(path).plugins.deny == ["com.example.off"]


def test_env_override(monkeypatch):
    monkeypatch.setenv("SKINMANAGER_LOGGING__LEVEL", "WARNING")
    assert Config().logging.level == "WARNING"


def test_key_conversion_helpers():
    assert camel_to_snake("dataDir") == "data_dir"
    assert snake_to_camel("data_dir") == "dataDir"
    data = {"plugins": {"entries": {"a.bC": {"config": {"keepMe": 1}}}}}
    snake = convert_keys(data)
    assert snake["plugins"]["entries"]["a.bC"]["config"] == {"keepMe": 1}
    assert convert_to_camel(snake) == data
