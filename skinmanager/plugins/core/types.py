"""Types for plugin host integration."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


@dataclass(slots=True)
class PluginHostError(Exception):
    """Raised when a plugin asks the host for something it was not granted."""

    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"


class PluginLifecycleState(str, Enum):
    """Lifecycle of one plugin instance. Only ACTIVE plugins receive messages."""

    DISCOVERED = "discovered"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[PluginLifecycleState, frozenset[PluginLifecycleState]] = {
    PluginLifecycleState.DISCOVERED: frozenset({PluginLifecycleState.INITIALIZING}),
    PluginLifecycleState.INITIALIZING: frozenset({PluginLifecycleState.ACTIVE, PluginLifecycleState.FAILED}),
    PluginLifecycleState.ACTIVE: frozenset({PluginLifecycleState.SHUTTING_DOWN, PluginLifecycleState.FAILED}),
    PluginLifecycleState.SHUTTING_DOWN: frozenset({PluginLifecycleState.STOPPED, PluginLifecycleState.FAILED}),
    PluginLifecycleState.STOPPED: frozenset(),
    PluginLifecycleState.FAILED: frozenset(),
}


def can_transition(current: PluginLifecycleState, target: PluginLifecycleState) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True, slots=True)
class PluginDescriptor:
    """Identity and handled types captured once when a plugin is discovered."""

    id: str
    name: str
    version: str
    description: str = ""
    author: str = ""
    message_types: frozenset[str] = frozenset()

    @classmethod
    def from_plugin(cls, plugin: Any) -> PluginDescriptor:
        return cls(
            id=str(plugin.id),
            name=str(getattr(plugin, "name", "") or plugin.id),
            version=str(getattr(plugin, "version", "") or "0.0.0"),
            description=str(getattr(plugin, "description", "") or ""),
            author=str(getattr(plugin, "author", "") or ""),
            message_types=frozenset(plugin.get_handled_message_types() or ()),
        )


@dataclass(slots=True)
class PluginRecord:
    """Serializable plugin row returned by listings and doctor reports."""

    id: str
    name: str
    source: str
    origin: str
    state: str
    enabled: bool = True
    version: str | None = None
    description: str | None = None
    author: str | None = None
    capabilities: list[str] = field(default_factory=list)
    message_types: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        row = asdict(self)
        row["messageTypes"] = row.pop("message_types")
        return row
