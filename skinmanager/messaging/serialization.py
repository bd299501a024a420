"""JSON line codec for message envelopes."""

from __future__ import annotations

import json
from typing import Any

from skinmanager.utils.exceptions import ValidationError

from .envelope import MessageRequest, MessageResponse


def safe_dict(value: Any) -> dict[str, Any]:
    """Return the value when dict-like, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def request_from_dict(payload: Any, *, fallback_id: str = "unknown") -> MessageRequest:
    """Decode a raw dict into a MessageRequest.

    Missing or non-string `type` decodes to "" so routing answers it with an
    error envelope instead of failing here.
    """
    row = safe_dict(payload)
    raw_id = row.get("id")
    req_id = str(raw_id) if raw_id not in (None, "") else fallback_id
    raw_type = row.get("type", row.get("messageType", row.get("message_type")))
    msg_type = raw_type if isinstance(raw_type, str) else ""
    return MessageRequest(id=req_id, type=msg_type, payload=row.get("payload"))


def response_to_dict(response: MessageResponse) -> dict[str, Any]:
    return response.to_dict()


def response_from_dict(payload: Any, *, fallback_id: str = "unknown") -> MessageResponse:
    """Decode a raw dict into a normalized MessageResponse."""
    row = safe_dict(payload)
    resp_id = str(row.get("id") or fallback_id)
    if bool(row.get("success")):
        return MessageResponse.create_success(resp_id, row.get("data"))
    details = row.get("errorDetails", row.get("error_details"))
    return MessageResponse.create_error(resp_id, str(row.get("error") or "request failed"), details)


def encode_request_line(request: MessageRequest) -> str:
    """Encode a request into one line of JSON."""
    return json.dumps(request.to_dict(), ensure_ascii=False)


def encode_response_line(response: MessageResponse) -> str:
    """Encode a response into one line of JSON."""
    return json.dumps(response_to_dict(response), ensure_ascii=False, default=str)


def decode_request_line(line: str) -> MessageRequest:
    """Decode one JSON line into a request; invalid JSON raises ValidationError."""
    try:
        parsed = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid request JSON: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ValidationError("Request must be a JSON object")
    return request_from_dict(parsed)
