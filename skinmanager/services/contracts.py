"""Capability interfaces facades depend on; implementations are injected."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class FileEntry:
    path: str
    size_bytes: int


@runtime_checkable
class ConfigStore(Protocol):
    def get_value(self, key: str) -> str | None: ...
    async def set_value(self, key: str, value: str) -> None: ...


@runtime_checkable
class FileStore(Protocol):
    def list_files(self, directory: str, suffixes: tuple[str, ...] = ()) -> list[FileEntry]: ...
    def exists(self, path: str) -> bool: ...
    async def extract_archive(self, archive_path: str, destination: str) -> bool: ...
    async def clear_directory(self, directory: str, keep_suffixes: tuple[str, ...] = ()) -> None: ...


@runtime_checkable
class ProcessRunner(Protocol):
    async def launch(self, executable: str, args: list[str] | None = None, cwd: str | None = None) -> None: ...
