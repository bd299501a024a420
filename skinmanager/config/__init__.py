"""Configuration module for skinmanager."""

from skinmanager.config.loader import get_config_path, load_config, save_config
from skinmanager.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
