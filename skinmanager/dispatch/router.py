"""Exact-match routing of message requests to registered handlers."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable

from loguru import logger

from skinmanager.messaging.contracts import MessageHandler, handler_label
from skinmanager.messaging.envelope import MessageRequest, MessageResponse
from skinmanager.utils.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    classify_exception,
    describe_exception,
)

MISSING_TYPE_ERROR = "missing or empty type"


@dataclass(frozen=True, slots=True)
class HandlerRegistration:
    """One message type owned by one handler."""

    message_type: str
    handler: MessageHandler

    @property
    def owner(self) -> str:
        return handler_label(self.handler)


def _declared_types(handler: Any) -> list[str]:
    getter = getattr(handler, "get_handled_message_types", None)
    if not callable(getter):
        raise ConfigurationError(f"{handler_label(handler)} does not declare message types")
    declared = getter()
    types: list[str] = []
    for message_type in sorted(declared or ()):
        if not isinstance(message_type, str) or not message_type.strip():
            raise ConfigurationError(
                f"{handler_label(handler)} declares an empty message type",
                code="EMPTY_MESSAGE_TYPE",
            )
        types.append(message_type)
    return types


class DispatchRouter:
    """Routes each request to the single handler that owns its type.

    The table is built once, eagerly, and never mutated afterwards; to change
    the handler set build a new router (see `without`). A type claimed by two
    handlers raises DuplicateRegistrationError before any dispatch can happen.
    """

    def __init__(self, handlers: Iterable[MessageHandler] = ()):
        table: dict[str, HandlerRegistration] = {}
        ordered: list[MessageHandler] = []
        for handler in handlers:
            if any(existing is handler for existing in ordered):
                continue
            for message_type in _declared_types(handler):
                current = table.get(message_type)
                if current is not None:
                    raise DuplicateRegistrationError(message_type, current.owner, handler_label(handler))
                table[message_type] = HandlerRegistration(message_type=message_type, handler=handler)
            ordered.append(handler)
        self._table = MappingProxyType(table)
        self._handlers = tuple(ordered)
        logger.debug("Dispatch router built: {} types across {} handlers", len(table), len(ordered))

    def __contains__(self, message_type: object) -> bool:
        return message_type in self._table

    def __len__(self) -> int:
        return len(self._table)

    @property
    def handlers(self) -> tuple[MessageHandler, ...]:
        return self._handlers

    def message_types(self) -> list[str]:
        return sorted(self._table)

    def registrations(self) -> list[HandlerRegistration]:
        return [self._table[t] for t in sorted(self._table)]

    def handler_for(self, message_type: str) -> MessageHandler | None:
        registration = self._table.get(message_type)
        return registration.handler if registration else None

    def without(self, handler: MessageHandler) -> DispatchRouter:
        """Return a new router lacking every type owned by `handler`."""
        return DispatchRouter(h for h in self._handlers if h is not handler)

    async def dispatch(self, request: MessageRequest) -> MessageResponse:
        """Route one request; always answers with an envelope correlated to request.id."""
        message_type = request.type
        if not isinstance(message_type, str) or not message_type.strip():
            logger.warning("Rejected request {}: {}", request.id, MISSING_TYPE_ERROR)
            return MessageResponse.create_error(request.id, MISSING_TYPE_ERROR)

        registration = self._table.get(message_type)
        if registration is None:
            logger.warning("No handler for message type {} (request {})", message_type, request.id)
            return MessageResponse.create_error(request.id, f"Unknown message type: {message_type}")

        try:
            response = await registration.handler.handle_message(request)
        except Exception as exc:
            code, _, _ = classify_exception(exc)
            logger.exception(
                "Handler {} failed on {} with {} (request {})", registration.owner, message_type, code, request.id
            )
            return MessageResponse.create_error(request.id, describe_exception(exc))

        if not isinstance(response, MessageResponse):
            logger.error(
                "Handler {} returned {} instead of MessageResponse for {}",
                registration.owner,
                type(response).__name__,
                message_type,
            )
            return MessageResponse.create_error(request.id, f"Handler returned an invalid response for {message_type}")
        if response.id != request.id:
            logger.error(
                "Handler {} answered request {} with id {}", registration.owner, request.id, response.id
            )
            return MessageResponse.create_error(request.id, f"Handler returned a mismatched response id for {message_type}")
        return response
