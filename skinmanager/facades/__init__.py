"""Built-in module facades."""

from skinmanager.facades.base import BaseFacade
from skinmanager.facades.migoto import D3DMigotoFacade, DeploymentResult
from skinmanager.facades.plugins import PluginsFacade
from skinmanager.facades.warehouse import WarehouseFacade

__all__ = ["BaseFacade", "D3DMigotoFacade", "DeploymentResult", "PluginsFacade", "WarehouseFacade"]
