"""Tests for skinmanager.messaging.envelope."""

from __future__ import annotations

import pytest

from skinmanager.messaging.envelope import MessageRequest, MessageResponse


class TestMessageRequest:
    def test_new_generates_distinct_ids(self) -> None:
        a = MessageRequest.new("PING")
        b = MessageRequest.new("PING", {"x": 1})
        assert a.id and b.id and a.id != b.id
        assert b.payload == {"x": 1}

    def test_request_is_immutable(self) -> None:
        req = MessageRequest(id="r1", type="PING")
        with pytest.raises(AttributeError):
            req.type = "OTHER"  # type: ignore[misc]

    def test_to_dict(self) -> None:
        assert MessageRequest("r1", "PING", [1]).to_dict() == {"id": "r1", "type": "PING", "payload": [1]}


class TestMessageResponse:
    def test_success_carries_data_only(self) -> None:
        resp = MessageResponse.create_success("r1", {"ok": True})
        assert resp.success is True
        assert resp.error is None
        assert resp.to_dict() == {"id": "r1", "success": True, "data": {"ok": True}}

    def test_success_without_data(self) -> None:
        resp = MessageResponse.create_success("r1")
        assert resp.success and resp.data is None

    def test_error_carries_message_only(self) -> None:
        resp = MessageResponse.create_error("r2", "boom")
        assert resp.success is False
        assert resp.data is None
        assert resp.to_dict() == {"id": "r2", "success": False, "error": "boom"}

    def test_error_details_serialized_when_present(self) -> None:
        resp = MessageResponse.create_error("r2", "boom", {"field": "x"})
        assert resp.to_dict()["errorDetails"] == {"field": "x"}

    def test_blank_error_message_gets_placeholder(self) -> None:
        assert MessageResponse.create_error("r3", "   ").error == "Unknown error"

    def test_constructor_rejects_success_with_error(self) -> None:
        with pytest.raises(ValueError):
            MessageResponse(id="r", success=True, error="nope")

    def test_constructor_rejects_failure_with_data(self) -> None:
        with pytest.raises(ValueError):
            MessageResponse(id="r", success=False, data=1, error="bad")

    def test_constructor_rejects_failure_without_message(self) -> None:
        with pytest.raises(ValueError):
            MessageResponse(id="r", success=False)
