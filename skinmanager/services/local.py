"""Local-disk implementations of the capability interfaces used by the CLI."""

from __future__ import annotations

import asyncio
import json
import shutil
from pathlib import Path

from loguru import logger

from .contracts import FileEntry


class JsonConfigStore:
    """Flat key/value settings kept in one JSON file."""

    def __init__(self, path: Path):
        self.path = path
        self._values: dict[str, str] = {}
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Ignoring unreadable settings file {}: {}", path, exc)
                raw = {}
            if isinstance(raw, dict):
                self._values = {str(k): str(v) for k, v in raw.items() if v is not None}

    def get_value(self, key: str) -> str | None:
        return self._values.get(key)

    async def set_value(self, key: str, value: str) -> None:
        self._values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")


class LocalFileStore:
    def list_files(self, directory: str, suffixes: tuple[str, ...] = ()) -> list[FileEntry]:
        root = Path(directory)
        if not root.is_dir():
            return []
        wanted = tuple(s.lower() for s in suffixes)
        entries: list[FileEntry] = []
        for path in sorted(root.iterdir(), key=lambda p: p.name):
            if not path.is_file():
                continue
            if wanted and path.suffix.lower() not in wanted:
                continue
            entries.append(FileEntry(path=str(path), size_bytes=path.stat().st_size))
        return entries

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    async def extract_archive(self, archive_path: str, destination: str) -> bool:
        Path(destination).mkdir(parents=True, exist_ok=True)
        try:
            await asyncio.to_thread(shutil.unpack_archive, archive_path, destination)
        except (shutil.ReadError, ValueError, OSError) as exc:
            logger.warning("Could not extract {}: {}", archive_path, exc)
            return False
        return True

    async def clear_directory(self, directory: str, keep_suffixes: tuple[str, ...] = ()) -> None:
        root = Path(directory)
        root.mkdir(parents=True, exist_ok=True)
        keep = tuple(s.lower() for s in keep_suffixes)
        for path in root.iterdir():
            if not path.is_file() or path.suffix.lower() in keep:
                continue
            try:
                path.unlink()
            except OSError as exc:
                logger.warning("Could not delete {}: {}", path, exc)


class SubprocessRunner:
    """Starts detached tools; a background task waits on each so none is left a zombie."""

    def __init__(self) -> None:
        self._reapers: set[asyncio.Task[int]] = set()

    async def launch(self, executable: str, args: list[str] | None = None, cwd: str | None = None) -> None:
        logger.info("Launching {}", executable)
        proc = await asyncio.create_subprocess_exec(executable, *(args or []), cwd=cwd)
        task = asyncio.create_task(self._reap(executable, proc))
        self._reapers.add(task)
        task.add_done_callback(self._reapers.discard)

    @staticmethod
    async def _reap(executable: str, proc: asyncio.subprocess.Process) -> int:
        code = await proc.wait()
        logger.debug("{} (pid {}) exited with {}", executable, proc.pid, code)
        return code

    async def wait_all(self) -> list[int]:
        """Wait for every launched process still running; returns their exit codes."""
        if not self._reapers:
            return []
        return list(await asyncio.gather(*self._reapers))
