"""Request/response envelopes exchanged between callers and handlers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class MessageRequest:
    """One request addressed to a message type.

    `id` is an opaque caller-generated correlation token; the host never
    interprets it beyond copying it into the response.
    """

    id: str
    type: str
    payload: Any = None

    @classmethod
    def new(cls, type: str, payload: Any = None) -> MessageRequest:
        """Build a request with a fresh correlation id."""
        return cls(id=uuid.uuid4().hex, type=type, payload=payload)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "payload": self.payload}


@dataclass(frozen=True, slots=True)
class MessageResponse:
    """Uniform result of handling a request.

    Exactly one of `data` (success) or `error` (failure) is meaningful.
    Use `create_success` / `create_error` instead of the constructor.
    """

    id: str
    success: bool
    data: Any = None
    error: str | None = None
    error_details: Any = None

    def __post_init__(self) -> None:
        if self.success:
            if self.error is not None or self.error_details is not None:
                raise ValueError("successful response cannot carry an error")
        else:
            if self.data is not None:
                raise ValueError("failed response cannot carry data")
            if not isinstance(self.error, str) or not self.error:
                raise ValueError("failed response requires a non-empty error message")

    @classmethod
    def create_success(cls, id: str, data: Any = None) -> MessageResponse:
        return cls(id=id, success=True, data=data)

    @classmethod
    def create_error(cls, id: str, message: str, details: Any = None) -> MessageResponse:
        text = str(message or "").strip() or "Unknown error"
        return cls(id=id, success=False, error=text, error_details=details)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: `data` only on success, `error` only on failure."""
        if self.success:
            return {"id": self.id, "success": True, "data": self.data}
        row: dict[str, Any] = {"id": self.id, "success": False, "error": self.error}
        if self.error_details is not None:
            row["errorDetails"] = self.error_details
        return row
