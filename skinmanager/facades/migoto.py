"""D3DMIGOTO_* messages: versioned 3DMigoto loader management."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from skinmanager.messaging.envelope import MessageRequest
from skinmanager.messaging.payload import get_required_string
from skinmanager.services.contracts import ConfigStore, FileStore, ProcessRunner
from skinmanager.utils.exceptions import describe_exception
from skinmanager.utils.helpers import format_size

from .base import BaseFacade, Route

ARCHIVE_SUFFIXES = (".zip", ".7z", ".rar")
KEEP_ON_DEPLOY_SUFFIXES = (".ini", ".txt")
LOADER_NAMES = ("3DMigotoLoader.exe", "3DMigoto Loader.exe", "d3dx.exe")
WORK_DIRECTORY_KEY = "d3dmigoto.work_directory"
CURRENT_VERSION_KEY = "d3dmigoto.current_version"


@dataclass(slots=True)
class DeploymentResult:
    success: bool
    message: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "error": self.error}


class D3DMigotoFacade(BaseFacade):
    """Lists version archives, deploys one into the work directory, launches its loader.

    Storage, extraction and process launching all go through the injected
    collaborators; this class only decides what to do with them.
    """

    module_name = "D3DMigotoFacade"

    def __init__(
        self,
        versions_dir: Path | str,
        config_store: ConfigStore,
        file_store: FileStore,
        process_runner: ProcessRunner,
    ):
        self.versions_dir = str(versions_dir)
        self._config = config_store
        self._files = file_store
        self._processes = process_runner
        super().__init__()

    def routes(self) -> dict[str, Route]:
        return {
            "D3DMIGOTO_GET_VERSIONS": self._get_versions,
            "D3DMIGOTO_GET_CURRENT": self._get_current,
            "D3DMIGOTO_DEPLOY": self._deploy,
            "D3DMIGOTO_LAUNCH": self._launch,
        }

    async def _get_versions(self, request: MessageRequest) -> list[dict[str, Any]]:
        return self.get_available_versions()

    async def _get_current(self, request: MessageRequest) -> str | None:
        return self.get_current_version()

    async def _deploy(self, request: MessageRequest) -> dict[str, Any]:
        result = await self.deploy_version(get_required_string(request, "versionName"))
        return result.to_dict()

    async def _launch(self, request: MessageRequest) -> bool:
        return await self.launch()

    def get_available_versions(self) -> list[dict[str, Any]]:
        current = (self.get_current_version() or "").lower()
        versions: list[dict[str, Any]] = []
        for entry in self._files.list_files(self.versions_dir, ARCHIVE_SUFFIXES):
            name = Path(entry.path).stem
            versions.append(
                {
                    "name": name,
                    "filePath": entry.path,
                    "sizeBytes": entry.size_bytes,
                    "sizeFormatted": format_size(entry.size_bytes),
                    "isDeployed": bool(current) and name.lower() == current,
                }
            )
        versions.sort(key=lambda v: Path(v["filePath"]).name)
        logger.info("[{}] Found {} available versions", self.module_name, len(versions))
        return versions

    def get_current_version(self) -> str | None:
        value = self._config.get_value(CURRENT_VERSION_KEY)
        return value.strip() if value and value.strip() else None

    def _find_archive(self, version_name: str) -> str | None:
        for suffix in ARCHIVE_SUFFIXES:
            candidate = str(Path(self.versions_dir) / f"{version_name}{suffix}")
            if self._files.exists(candidate):
                return candidate
        return None

    async def deploy_version(self, version_name: str) -> DeploymentResult:
        logger.info("[{}] Deploying version: {}", self.module_name, version_name)
        work_dir = self._config.get_value(WORK_DIRECTORY_KEY)
        if not work_dir:
            return DeploymentResult(False, error="Work directory not configured. Please set it in Settings.")
        if not version_name.strip() or any(part in version_name for part in ("/", "\\", "..")):
            return DeploymentResult(False, error=f"Invalid version name: {version_name}")
        archive = self._find_archive(version_name)
        if archive is None:
            return DeploymentResult(False, error=f"Version archive not found: {version_name}")
        try:
            await self._files.clear_directory(work_dir, KEEP_ON_DEPLOY_SUFFIXES)
            logger.info("[{}] Extracting {} to {}", self.module_name, archive, work_dir)
            if not await self._files.extract_archive(archive, work_dir):
                return DeploymentResult(False, error="Failed to extract 3DMigoto archive")
            await self._config.set_value(CURRENT_VERSION_KEY, version_name)
        except Exception as exc:
            logger.opt(exception=exc).error("[{}] Error deploying version {}", self.module_name, version_name)
            return DeploymentResult(False, error=f"Deployment failed: {describe_exception(exc)}")
        logger.info("[{}] Successfully deployed version: {}", self.module_name, version_name)
        return DeploymentResult(True, message=f"3DMigoto {version_name} deployed successfully")

    def _find_loader(self, work_dir: str) -> str | None:
        for name in LOADER_NAMES:
            candidate = str(Path(work_dir) / name)
            if self._files.exists(candidate):
                return candidate
        executables = self._files.list_files(work_dir, (".exe",))
        return executables[0].path if executables else None

    async def launch(self) -> bool:
        work_dir = self._config.get_value(WORK_DIRECTORY_KEY)
        if not work_dir or not self._files.exists(work_dir):
            logger.warning("[{}] Work directory not configured or does not exist", self.module_name)
            return False
        loader = self._find_loader(work_dir)
        if loader is None:
            logger.warning("[{}] No 3DMigoto loader found in work directory", self.module_name)
            return False
        logger.info("[{}] Launching: {}", self.module_name, loader)
        try:
            await self._processes.launch(loader, [], cwd=str(Path(loader).parent))
        except OSError as exc:
            logger.error("[{}] Error launching 3DMigoto: {}", self.module_name, exc)
            return False
        return True
