"""Runtime contracts for message handlers and plugins."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .envelope import MessageRequest, MessageResponse


@runtime_checkable
class MessageHandler(Protocol):
    """Anything that answers a fixed set of message types.

    `get_handled_message_types` is queried once, at registration.
    `handle_message` reports failures through `MessageResponse.create_error`
    and must not let exceptions escape.
    """

    def get_handled_message_types(self) -> set[str]: ...
    async def handle_message(self, request: MessageRequest) -> MessageResponse: ...


@runtime_checkable
class MessagePlugin(MessageHandler, Protocol):
    """A message handler with identity and a host-driven lifecycle."""

    @property
    def id(self) -> str: ...
    @property
    def name(self) -> str: ...
    @property
    def version(self) -> str: ...
    @property
    def description(self) -> str: ...
    @property
    def author(self) -> str: ...

    async def initialize(self, context: Any) -> None: ...
    async def shutdown(self) -> None: ...


def handler_label(handler: Any) -> str:
    """Short human name for a handler, used in logs and diagnostics."""
    plugin_id = getattr(handler, "id", None)
    if isinstance(plugin_id, str) and plugin_id:
        return f"plugin:{plugin_id}"
    module_name = getattr(handler, "module_name", None)
    if isinstance(module_name, str) and module_name:
        return f"facade:{module_name}"
    return type(handler).__name__
