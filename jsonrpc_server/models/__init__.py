"""Models for JSON-RPC requests, responses and server endpoints."""

from .health import HealthResponse
from .jsonrpc import JSONRPC_VERSION, JsonRpcRequest, JsonRpcResponse, request_id_of

__all__ = [
    "JSONRPC_VERSION",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "HealthResponse",
    "request_id_of",
]
