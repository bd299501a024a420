"""Host services injected into facades and granted to plugins."""

from skinmanager.services.contracts import ConfigStore, FileEntry, FileStore, ProcessRunner
from skinmanager.services.local import JsonConfigStore, LocalFileStore, SubprocessRunner

__all__ = [
    "ConfigStore",
    "FileEntry",
    "FileStore",
    "JsonConfigStore",
    "LocalFileStore",
    "ProcessRunner",
    "SubprocessRunner",
]
