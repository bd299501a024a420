"""Message envelopes and handler contracts."""

from skinmanager.messaging.contracts import MessageHandler, MessagePlugin
from skinmanager.messaging.envelope import MessageRequest, MessageResponse
from skinmanager.messaging.payload import get_optional_value, get_required_string, get_required_value

__all__ = [
    "MessageHandler",
    "MessagePlugin",
    "MessageRequest",
    "MessageResponse",
    "get_optional_value",
    "get_required_string",
    "get_required_value",
]
