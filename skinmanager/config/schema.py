"""Configuration schema using Pydantic.

Single data model and defaults, persisted to ~/.skinmanager/config.json.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class PluginLoadConfig(BaseModel):
    """Plugin discovery load paths."""
    paths: list[str] = Field(default_factory=list)


class PluginEntryConfig(BaseModel):
    """Per-plugin state, config and host grants."""
    enabled: bool = True
    config: dict[str, object] = Field(default_factory=dict)
    grants: list[str] = Field(default_factory=list)  # "data", "events", or service names


class PluginsConfig(BaseModel):
    """Plugin discovery and enablement."""
    enabled: bool = True
    builtin: bool = True  # register the bundled plugins
    allow: list[str] = Field(default_factory=list)
    deny: list[str] = Field(default_factory=list)
    load: PluginLoadConfig = Field(default_factory=PluginLoadConfig)
    entries: dict[str, PluginEntryConfig] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    """Loguru sinks."""
    level: str = "INFO"
    file: bool = False  # also write a rotating file under <data_dir>/logs
    rotation: str = "10 MB"
    retention: str = "14 days"


class Config(BaseSettings):
    """Root configuration for skinmanager."""
    data_dir: str = "~/.skinmanager"
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def data_path(self) -> Path:
        """Get expanded data directory path."""
        return Path(self.data_dir).expanduser()

    def plugin_entry(self, plugin_id: str) -> PluginEntryConfig:
        return self.plugins.entries.get(plugin_id) or PluginEntryConfig()

    model_config = ConfigDict(
        env_prefix="SKINMANAGER_",
        env_nested_delimiter="__"
    )
