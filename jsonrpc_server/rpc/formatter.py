"""Render errors as JSON-RPC error envelopes."""

import json
import traceback
from dataclasses import dataclass
from typing import Any

from ..errors import RpcError, as_rpc_error
from ..models.jsonrpc import JSONRPC_VERSION

JSON_MIME_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class FormattedError:
    """A rendered error envelope ready to be written by a transport.

    Attributes:
        mime_type: Content type of ``body``.
        body: UTF-8 JSON envelope followed by a newline.
        http_status: Status of the underlying error.
    """

    mime_type: str
    body: bytes
    http_status: int


class ErrorFormatter:
    """Formats any raised error into the wire error envelope.

    Attributes:
        production: When True, stack traces are never included.
    """

    def __init__(self, production: bool = False) -> None:
        self.production = production

    def envelope(self, error: BaseException) -> dict[str, Any]:
        """Build the ``{"jsonrpc", "error", "id"}`` envelope for an error."""
        rpc_error = error if isinstance(error, RpcError) else as_rpc_error(error)
        body = rpc_error.to_dict()
        if not self.production:
            body["trace"] = "".join(traceback.format_exception(rpc_error))
        return {
            "jsonrpc": JSONRPC_VERSION,
            "error": body,
            "id": rpc_error.request_id,
        }

    def format(self, error: BaseException) -> FormattedError:
        """Encode an error envelope for transmission.

        Args:
            error: Any exception; non-``RpcError`` values are normalized first.

        Returns:
            The encoded envelope with its content type and HTTP status.
        """
        rpc_error = error if isinstance(error, RpcError) else as_rpc_error(error)
        payload = json.dumps(self.envelope(rpc_error)) + "\n"
        return FormattedError(
            mime_type=JSON_MIME_TYPE,
            body=payload.encode("utf-8"),
            http_status=rpc_error.http_status,
        )
