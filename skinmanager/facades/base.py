"""Base class for built-in module facades."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from loguru import logger

from skinmanager.messaging.envelope import MessageRequest, MessageResponse
from skinmanager.utils.exceptions import describe_exception

Route = Callable[[MessageRequest], Awaitable[Any]]


class BaseFacade(ABC):
    """A built-in handler owning a fixed, prefixed set of message types.

    Subclasses map each type to a coroutine in `routes()`; whatever it returns
    becomes the success payload and whatever it raises becomes an error
    envelope.
    """

    module_name: str = ""

    def __init__(self) -> None:
        self._routes = self.routes()

    @abstractmethod
    def routes(self) -> dict[str, Route]:
        """Message type -> coroutine handling it."""

    def get_handled_message_types(self) -> set[str]:
        return set(self._routes)

    async def handle_message(self, request: MessageRequest) -> MessageResponse:
        try:
            logger.debug("[{}] Handling message: {}", self.module_name, request.type)
            data = await self.route(request)
            return MessageResponse.create_success(request.id, data)
        except Exception as exc:
            logger.opt(exception=exc).error(
                "[{}] Error handling message '{}': {}", self.module_name, request.type, exc
            )
            return MessageResponse.create_error(request.id, describe_exception(exc))

    async def route(self, request: MessageRequest) -> Any:
        handler = self._routes.get(request.type)
        if handler is None:
            raise ValueError(f"Unknown message type: {request.type}")
        return await handler(request)
