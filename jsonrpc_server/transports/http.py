"""HTTP transport adapter.

Accepts ``POST /<prefix>`` with a full JSON-RPC body, or
``POST /<prefix>/<method>`` with ``{"params", "id"}`` and the method taken
from the path. Every request gets exactly one response.
"""

import json
import logging
from typing import Any

from starlette.responses import Response

from ..errors import NotFoundError, ParseError, as_rpc_error, tag_error
from ..models.jsonrpc import JsonRpcRequest, RequestId, request_id_of
from ..rpc.dispatcher import RpcContext, RpcDispatcher
from ..rpc.formatter import JSON_MIME_TYPE, ErrorFormatter

logger = logging.getLogger("jsonrpc.http")


class HttpTransport:
    """Translates HTTP requests into dispatcher calls.

    Attributes:
        dispatcher: Shared dispatch core.
        formatter: Error envelope formatter.
        prefix: First path segment of RPC routes.
        mirror_error_status: When True, error responses use the error's HTTP
            status; otherwise every response is 200 and the error lives in
            the body only.
    """

    def __init__(
        self,
        dispatcher: RpcDispatcher,
        formatter: ErrorFormatter,
        prefix: str = "rpc",
        mirror_error_status: bool = False,
    ) -> None:
        self.dispatcher = dispatcher
        self.formatter = formatter
        self.prefix = prefix.strip("/")
        self.mirror_error_status = mirror_error_status

    async def handle(self, path: str, body: bytes, user: str | None = None) -> Response:
        """Handle one HTTP RPC request.

        Args:
            path: Request URL path.
            body: Raw request body.
            user: Authenticated user.

        Returns:
            JSON response with a success or error envelope.
        """
        request_id: RequestId = None
        try:
            segments = [s for s in path.split("/") if s]
            if not segments or segments[0] != self.prefix:
                raise NotFoundError()

            payload = _decode_body(body)
            request_id = request_id_of(payload)
            rpc_request = JsonRpcRequest.from_payload(
                payload,
                fallback_method=segments[1] if len(segments) > 1 else None,
            )
            context = RpcContext(user=user, transport="http", extras={"path": segments})
            response = await self.dispatcher.handle(rpc_request, context)
            content = response.to_json()
        except Exception as e:
            return self._error_response(e, request_id)

        return Response(content=content, status_code=200, media_type=JSON_MIME_TYPE)

    def _error_response(self, exc: Exception, request_id: RequestId) -> Response:
        """Format a failure as an error envelope response."""
        error = tag_error(as_rpc_error(exc), request_id=request_id)
        logger.debug("HTTP RPC error %s (id=%r): %s", error.code, request_id, error.message)
        formatted = self.formatter.format(error)
        status_code = formatted.http_status if self.mirror_error_status else 200
        return Response(
            content=formatted.body,
            status_code=status_code,
            media_type=formatted.mime_type,
        )


def _decode_body(body: bytes) -> Any:
    """Decode a JSON request body; an empty body is an empty object."""
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as e:
        logger.warning("Invalid JSON body: %s", e)
        raise ParseError() from e
