"""Transport adapters for the dispatch core."""

from .http import HttpTransport
from .websocket import WebSocketTransport

__all__ = ["HttpTransport", "WebSocketTransport"]
