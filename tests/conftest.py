"""Pytest hooks and fixtures."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

import pytest

from skinmanager.config.schema import Config
from skinmanager.plugins.discovery import MANIFEST_FILENAME


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    """Keep SKINMANAGER_* variables from the developer shell out of Config()."""
    for key in list(os.environ):
        if key.startswith("SKINMANAGER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config rooted in a throwaway data dir."""
    return Config(data_dir=str(tmp_path / "data"))


@pytest.fixture
def write_native_plugin(tmp_path: Path) -> Callable[..., Path]:
    """Write a plugin root (manifest + plugin.py) and return its directory."""

    def _write(name: str, manifest: dict[str, Any], source: str, *, parent: Path | None = None) -> Path:
        root = (parent or tmp_path / "native") / name
        root.mkdir(parents=True, exist_ok=True)
        (root / MANIFEST_FILENAME).write_text(json.dumps(manifest), encoding="utf-8")
        (root / "plugin.py").write_text(source, encoding="utf-8")
        return root

    return _write
