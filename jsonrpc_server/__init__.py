"""JSON-RPC Server Package.

Transport-agnostic JSON-RPC 2.0 dispatcher with HTTP and WebSocket
transports.
"""

__version__ = "0.3.0"

from .server import create_app, run_server  # noqa: E402

__all__ = ["create_app", "run_server", "__version__"]
