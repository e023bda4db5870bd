"""Tests for error envelope formatting and the JSON-RPC models."""

import json

import pytest

from jsonrpc_server.errors import (
    InvalidRequest,
    MethodNotFound,
    RpcError,
    ValidationError,
    tag_error,
)
from jsonrpc_server.models.jsonrpc import JsonRpcRequest, JsonRpcResponse, request_id_of
from jsonrpc_server.rpc import ErrorFormatter


def _raised(error: Exception) -> Exception:
    """Return ``error`` after raising it, so it carries a traceback."""
    try:
        raise error
    except Exception as e:
        return e


class TestErrorFormatter:
    """Tests for ErrorFormatter."""

    def test_format_body_is_json_line(self) -> None:
        formatted = ErrorFormatter().format(MethodNotFound("books.remove"))
        assert formatted.mime_type == "application/json"
        assert formatted.body.endswith(b"\n")
        data = json.loads(formatted.body)
        assert data["jsonrpc"] == "2.0"
        assert data["error"]["code"] == "method-not-found"
        assert data["error"]["message"] == "Method [books.remove] not found."
        assert data["id"] is None

    def test_id_recovered_from_tagged_error(self) -> None:
        error = tag_error(ValidationError({"a": ["bad"]}), request_id="req-9")
        data = ErrorFormatter().envelope(error)
        assert data["id"] == "req-9"
        assert data["error"]["validations"] == {"a": ["bad"]}

    def test_trace_included_outside_production(self) -> None:
        error = _raised(RpcError("boom"))
        data = ErrorFormatter(production=False).envelope(error)
        assert "Traceback" in data["error"]["trace"]

    def test_trace_never_included_in_production(self) -> None:
        formatter = ErrorFormatter(production=True)
        for error in (_raised(RpcError("boom")), _raised(ValidationError({})), RuntimeError("x")):
            assert "trace" not in formatter.envelope(error)["error"]

    def test_validations_omitted_when_absent(self) -> None:
        data = ErrorFormatter(production=True).envelope(RpcError("boom", code="x"))
        assert data["error"] == {"code": "x", "message": "boom"}

    def test_plain_exception_normalized(self) -> None:
        data = ErrorFormatter(production=True).envelope(KeyError("title"))
        assert data["error"]["code"] == "KeyError"

    def test_http_status_reported(self) -> None:
        formatter = ErrorFormatter()
        assert formatter.format(ValidationError({})).http_status == 400
        assert formatter.format(MethodNotFound("x")).http_status == 404
        assert formatter.format(RuntimeError("x")).http_status == 500

    def test_trace_includes_original_cause(self) -> None:
        try:
            try:
                raise KeyError("title")
            except KeyError as e:
                raise RpcError("lookup failed") from e
        except RpcError as e:
            error = e
        trace = ErrorFormatter().envelope(error)["error"]["trace"]
        assert "KeyError" in trace


class TestJsonRpcModels:
    """Tests for JsonRpcRequest and JsonRpcResponse."""

    def test_success_to_dict(self) -> None:
        response = JsonRpcResponse.success(1, {"items": []})
        assert response.to_dict() == {"jsonrpc": "2.0", "result": {"items": []}, "id": 1}

    def test_success_with_null_result_keeps_result_key(self) -> None:
        assert JsonRpcResponse.success("a", None).to_dict() == {
            "jsonrpc": "2.0",
            "result": None,
            "id": "a",
        }

    def test_float_id_kept(self) -> None:
        request = JsonRpcRequest.from_payload({"method": "a", "id": 1.5})
        assert request.id == 1.5
        assert not request.is_notification

    def test_to_json_has_trailing_newline(self) -> None:
        assert JsonRpcResponse.success(1, 2).to_json().endswith("\n")

    def test_from_payload(self) -> None:
        request = JsonRpcRequest.from_payload(
            {"jsonrpc": "2.0", "method": "books.list", "params": {"page": 1}, "id": 1}
        )
        assert request.method == "books.list"
        assert request.params == {"page": 1}
        assert request.id == 1
        assert not request.is_notification

    def test_from_payload_fallback_method(self) -> None:
        request = JsonRpcRequest.from_payload({"params": {}, "id": "x"}, fallback_method="books.add")
        assert request.method == "books.add"

    def test_body_method_wins_over_fallback(self) -> None:
        request = JsonRpcRequest.from_payload({"method": "a"}, fallback_method="b")
        assert request.method == "a"

    def test_missing_params_default_to_empty_object(self) -> None:
        assert JsonRpcRequest.from_payload({"method": "a"}).params == {}

    def test_notification(self) -> None:
        assert JsonRpcRequest.from_payload({"method": "a"}).is_notification

    def test_missing_method_raises(self) -> None:
        with pytest.raises(MethodNotFound) as exc_info:
            JsonRpcRequest.from_payload({"id": 3})
        assert exc_info.value.request_id == 3

    def test_non_object_raises(self) -> None:
        with pytest.raises(InvalidRequest):
            JsonRpcRequest.from_payload([1, 2])

    def test_non_string_method_raises(self) -> None:
        with pytest.raises(InvalidRequest):
            JsonRpcRequest.from_payload({"method": 5, "id": 1})

    def test_request_id_of(self) -> None:
        assert request_id_of({"id": 0}) == 0
        assert request_id_of({"id": "a"}) == "a"
        assert request_id_of({"id": 2.5}) == 2.5
        assert request_id_of({"id": True}) is None
        assert request_id_of({"id": {"x": 1}}) is None
        assert request_id_of({}) is None
        assert request_id_of("text") is None
