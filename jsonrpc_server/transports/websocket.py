"""WebSocket transport adapter.

Each inbound frame carries one JSON-RPC request. Frames are dispatched
independently, so replies can be written in a different order than the
requests arrived; clients match them by id. Requests without an id are
notifications and never get a reply frame.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from ..errors import as_rpc_error, tag_error
from ..models.jsonrpc import JsonRpcRequest, request_id_of
from ..rpc.dispatcher import RpcContext, RpcDispatcher
from ..rpc.formatter import ErrorFormatter

logger = logging.getLogger("jsonrpc.ws")

SendText = Callable[[str], Awaitable[None]]


class WebSocketTransport:
    """Translates WebSocket frames into dispatcher calls.

    Attributes:
        dispatcher: Shared dispatch core.
        formatter: Error envelope formatter.
    """

    def __init__(self, dispatcher: RpcDispatcher, formatter: ErrorFormatter) -> None:
        self.dispatcher = dispatcher
        self.formatter = formatter

    async def serve(self, websocket: WebSocket, context: RpcContext) -> None:
        """Read frames from an accepted socket until the peer disconnects.

        Requests still in flight when the peer goes away run to completion;
        their replies are discarded.
        """
        tasks: set[asyncio.Task[None]] = set()

        async def send(text: str) -> None:
            if (
                websocket.client_state != WebSocketState.CONNECTED
                or websocket.application_state != WebSocketState.CONNECTED
            ):
                logger.debug("Socket closed, dropping reply")
                return
            await websocket.send_text(text)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                text = _frame_text(message)
                if text is None:
                    continue
                task = asyncio.create_task(self.handle_message(text, send, context))
                tasks.add(task)
                task.add_done_callback(tasks.discard)
        finally:
            logger.info("WebSocket disconnected (user=%s)", context.user)
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)

    async def handle_message(self, text: str, send: SendText, context: RpcContext) -> None:
        """Dispatch one frame and send the reply, if one is due.

        Args:
            text: Frame payload.
            send: Writes a text frame back to the peer.
            context: Connection-level call context.
        """
        try:
            payload = json.loads(text)
        except ValueError:
            logger.warning("Dropping unparsable frame: %.200s", text)
            return
        if not isinstance(payload, dict):
            logger.warning("Dropping non-object frame: %.200s", text)
            return

        request_id = request_id_of(payload)
        try:
            request = JsonRpcRequest.from_payload(payload)
            response = await self.dispatcher.handle(request, context)
        except Exception as e:
            error = tag_error(as_rpc_error(e), request_id=request_id)
            if request_id is None:
                logger.info("Notification %s failed: %s", payload.get("method"), error.message)
                return
            await self._send(send, self.formatter.format(error).body.decode("utf-8"))
            return

        if request.is_notification:
            return
        try:
            reply = response.to_json()
        except (TypeError, ValueError) as e:
            error = tag_error(as_rpc_error(e, request.method), request_id=request_id)
            reply = self.formatter.format(error).body.decode("utf-8")
        await self._send(send, reply)

    async def _send(self, send: SendText, text: str) -> None:
        try:
            await send(text)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("Failed to send reply: %s", e)


def _frame_text(message: dict) -> str | None:
    """Text of a received frame; binary frames are decoded as UTF-8."""
    if message.get("text") is not None:
        return message["text"]
    data = message.get("bytes")
    if data is None:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Dropping binary frame that is not UTF-8")
        return None
