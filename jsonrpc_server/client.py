"""HTTP client for JSON-RPC servers built with this package."""

import itertools
from typing import Any

import httpx

from .models.jsonrpc import JSONRPC_VERSION, RequestId


class RpcCallError(Exception):
    """Error envelope returned by the server.

    Attributes:
        code: Error code from the envelope.
        message: Error message.
        validations: Per-field reasons, if the server sent any.
        request_id: Id echoed by the server.
    """

    def __init__(
        self,
        code: str,
        message: str,
        validations: dict[str, list[str]] | None = None,
        request_id: RequestId = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.validations = validations
        self.request_id = request_id

    @classmethod
    def from_envelope(cls, data: dict[str, Any]) -> "RpcCallError":
        """Create from a decoded error envelope."""
        error = data.get("error") or {}
        return cls(
            code=str(error.get("code", "unknown")),
            message=str(error.get("message", "")),
            validations=error.get("validations"),
            request_id=data.get("id"),
        )


class RpcClient:
    """Calls JSON-RPC methods over HTTP.

    Usage::

        with RpcClient("http://localhost:8080") as client:
            page = client.call("books.list", {"page": 1, "per_page": 10})
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        prefix: str = "rpc",
        token: str | None = None,
        http: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Server base URL (ignored when ``http`` is given).
            prefix: RPC route prefix on the server.
            token: Bearer token, if the server requires one.
            http: Preconfigured httpx client to send requests with.
            timeout: Request timeout in seconds.
        """
        self.prefix = prefix.strip("/")
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._ids = itertools.count(1)

    def call(
        self,
        method: str,
        params: Any = None,
        *,
        extended: bool = True,
        id: RequestId = None,
    ) -> Any:
        """Call a method and return its result.

        Args:
            method: Method name.
            params: Method params.
            extended: Put the method in the URL path (``/<prefix>/<method>``)
                instead of the body.
            id: Request id (generated when omitted).

        Returns:
            The ``result`` of the response envelope.

        Raises:
            RpcCallError: If the server returned an error envelope.
            httpx.HTTPStatusError: If the server replied with a non-RPC error.
        """
        request_id = id if id is not None else next(self._ids)
        data = self._post(method, params, request_id, extended)
        if data.get("error"):
            raise RpcCallError.from_envelope(data)
        return data.get("result")

    def notify(self, method: str, params: Any = None, *, extended: bool = True) -> None:
        """Send a request without an id, ignoring any result."""
        data = self._post(method, params, None, extended)
        if data.get("error"):
            raise RpcCallError.from_envelope(data)

    def health(self) -> dict[str, Any]:
        """Fetch the server's health report (``GET /health``).

        Raises:
            httpx.HTTPStatusError: If the server did not answer with 2xx.
        """
        response = self._http.get("/health", headers=self._headers)
        response.raise_for_status()
        return response.json()

    def _post(
        self,
        method: str,
        params: Any,
        request_id: RequestId,
        extended: bool,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "params": params if params is not None else {},
        }
        if request_id is not None:
            body["id"] = request_id
        if extended:
            url = f"/{self.prefix}/{method}"
        else:
            url = f"/{self.prefix}"
            body["method"] = method

        response = self._http.post(url, json=body, headers=self._headers)
        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("application/json"):
            response.raise_for_status()
            raise RpcCallError("invalid-response", "Response is not JSON")

        data = response.json()
        if not isinstance(data, dict) or ("error" not in data and "result" not in data):
            response.raise_for_status()
            raise RpcCallError("invalid-response", "Response is not a JSON-RPC envelope")
        return data

    def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
