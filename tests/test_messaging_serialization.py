from __future__ import annotations

import json

import pytest

from skinmanager.messaging.envelope import MessageResponse
from skinmanager.messaging.serialization import (
    decode_request_line,
    encode_response_line,
    request_from_dict,
    response_from_dict,
)
from skinmanager.utils.exceptions import ValidationError


def test_request_from_dict_missing_type_decodes_to_empty():
    req = request_from_dict({"id": "r1", "payload": {"a": 1}})
    assert req.type == ""
    assert req.id == "r1"
    assert req.payload == {"a": 1}


def test_request_from_dict_accepts_message_type_alias_and_fallback_id():
    req = request_from_dict({"messageType": "PING"})
    assert req.type == "PING"
    assert req.id == "unknown"


def test_request_from_dict_non_string_type():
    assert request_from_dict({"id": 1, "type": 42}).type == ""


def test_decode_request_line_rejects_invalid_json():
    with pytest.raises(ValidationError, match="Invalid request JSON"):
        decode_request_line("{not json")


def test_decode_request_line_rejects_non_object():
    with pytest.raises(ValidationError, match="JSON object"):
        decode_request_line("[1, 2]")


def test_encode_response_line_is_single_line_json():
    line = encode_response_line(MessageResponse.create_error("r9", "Unknown message type: X"))
    assert "\n" not in line
    assert json.loads(line) == {"id": "r9", "success": False, "error": "Unknown message type: X"}


def test_response_from_dict_normalizes_failure_without_message():
    resp = response_from_dict({"id": "r", "success": False})
    assert resp.success is False
    assert resp.error == "request failed"


def test_response_from_dict_keeps_details():
    resp = response_from_dict({"id": "r", "success": False, "error": "bad", "errorDetails": {"k": 1}})
    assert resp.error_details == {"k": 1}
