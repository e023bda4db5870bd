"""JSON-RPC 2.0 request and response models.

Implements the single-call subset of the JSON-RPC 2.0 specification.
See: https://www.jsonrpc.org/specification
"""

import json
from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidRequest, MethodNotFound

JSONRPC_VERSION = "2.0"

RequestId = str | int | float | None


def request_id_of(payload: Any) -> RequestId:
    """Correlation id of a decoded payload (None if absent or not a valid id)."""
    if not isinstance(payload, dict):
        return None
    request_id = payload.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (str, int, float)):
        return None
    return request_id


@dataclass(slots=True)
class JsonRpcRequest:
    """JSON-RPC 2.0 request object.

    Attributes:
        method: Method name to invoke.
        params: Method parameters (shape defined by the handler).
        id: Request identifier for correlation; None marks a notification.
        jsonrpc: Protocol version.
    """

    method: str
    params: Any = field(default_factory=dict)
    id: RequestId = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_notification(self) -> bool:
        """True when no reply is expected."""
        return self.id is None

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        fallback_method: str | None = None,
    ) -> "JsonRpcRequest":
        """Create request from a decoded JSON body or frame.

        Args:
            payload: Decoded JSON value.
            fallback_method: Method to use when the payload names none
                (e.g., taken from the URL path).

        Returns:
            The request.

        Raises:
            InvalidRequest: If the payload is not an object or the method
                is not a string.
            MethodNotFound: If no method name can be resolved.
        """
        if not isinstance(payload, dict):
            raise InvalidRequest("Request must be an object")

        request_id = request_id_of(payload)
        method = payload.get("method") or fallback_method
        if not method:
            raise MethodNotFound(request_id=request_id)
        if not isinstance(method, str):
            raise InvalidRequest("Method must be a string", request_id=request_id)

        params = payload.get("params")
        return cls(
            method=method,
            params=params if params is not None else {},
            id=request_id,
            jsonrpc=payload.get("jsonrpc", JSONRPC_VERSION),
        )


@dataclass(slots=True)
class JsonRpcResponse:
    """JSON-RPC 2.0 success response.

    Error envelopes are built by ``ErrorFormatter`` only.

    Attributes:
        id: Request identifier (matches request).
        result: Method result.
        jsonrpc: Protocol version (always "2.0").
    """

    id: RequestId
    result: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"jsonrpc": self.jsonrpc, "result": self.result, "id": self.id}

    def to_json(self) -> str:
        """Encode as a JSON line."""
        return json.dumps(self.to_dict()) + "\n"

    @classmethod
    def success(cls, id: RequestId, result: Any) -> "JsonRpcResponse":
        """Create a success response."""
        return cls(id=id, result=result)
