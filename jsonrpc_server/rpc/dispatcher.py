"""JSON-RPC method dispatcher.

Transport-independent core shared by the HTTP and WebSocket adapters:
lookup, validation, invocation and response envelope. Failures are raised
as ``RpcError`` for the calling adapter to format; the dispatcher never
writes output itself.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..errors import LEVEL_WARNING, MethodNotFound, RpcError, as_rpc_error
from ..models.jsonrpc import JsonRpcRequest, JsonRpcResponse
from .registry import MethodRegistry
from .validation import run_validator

logger = logging.getLogger("jsonrpc.dispatcher")


@dataclass(slots=True)
class RpcContext:
    """Call context passed to every handler.

    Attributes:
        user: Authenticated user for the connection or request.
        transport: Transport the request arrived on ("http" or "ws").
        extras: Additional transport-derived data.
    """

    user: str | None = None
    transport: str = "http"
    extras: dict[str, Any] = field(default_factory=dict)


class RpcDispatcher:
    """Dispatches JSON-RPC requests to registered method handlers.

    Attributes:
        registry: Registry of method name -> (handler, validator).
    """

    def __init__(self, registry: MethodRegistry | None = None) -> None:
        """Initialize dispatcher.

        Args:
            registry: Method registry (an empty one is created if omitted).
        """
        self.registry = registry if registry is not None else MethodRegistry()

    async def handle(
        self,
        request: JsonRpcRequest,
        context: RpcContext | None = None,
    ) -> JsonRpcResponse:
        """Run a request through lookup, validation and its handler.

        Args:
            request: Decoded JSON-RPC request.
            context: Transport-derived call context, passed to the handler.

        Returns:
            Success response carrying the handler's result and the request id.

        Raises:
            RpcError: On any failure, tagged with the method name. The request
                id is left for the transport adapter to attach.
        """
        method = request.method
        context = context if context is not None else RpcContext()

        entry = self.registry.lookup(method)
        if entry is None:
            logger.info("Method not found: %s", method)
            raise MethodNotFound(method)

        await run_validator(entry.validator, request.params, method)

        logger.debug("Dispatching %s (id=%r, transport=%s)", method, request.id, context.transport)
        try:
            result = await entry.handler(request.params, context)
        except Exception as e:
            error = as_rpc_error(e, method)
            _log_failure(error)
            raise error from error.__cause__

        return JsonRpcResponse.success(request.id, result)


def _log_failure(error: RpcError) -> None:
    """Log a handler failure according to its level."""
    if error.level == LEVEL_WARNING:
        logger.warning("Method %s failed with %s: %s", error.method, error.code, error.message)
    else:
        logger.error(
            "Method %s failed with %s: %s",
            error.method,
            error.code,
            error.message,
            exc_info=error.__cause__ or error,
        )
