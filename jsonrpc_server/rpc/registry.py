"""Method registry: method name -> (handler, validator)."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("jsonrpc.registry")

# Type aliases for registered callables
MethodHandler = Callable[[Any, Any], Awaitable[Any]]
Validator = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class MethodEntry:
    """A registered JSON-RPC method.

    Attributes:
        name: Method name (unique key).
        handler: Async function called with ``(params, context)``.
        validator: Optional function called with ``params`` before the handler.
    """

    name: str
    handler: MethodHandler
    validator: Validator | None = None


class MethodRegistry:
    """Holds the handlers available to the dispatcher.

    Registering a name twice replaces the previous entry. The registry is
    populated during setup and only read while serving requests.
    """

    def __init__(self) -> None:
        self._entries: dict[str, MethodEntry] = {}

    def register(
        self,
        name: str,
        handler: MethodHandler,
        validator: Validator | None = None,
    ) -> None:
        """Register (or replace) a method handler.

        Args:
            name: Method name (e.g., "books.list").
            handler: Async function to handle the method.
            validator: Optional params validator.
        """
        if not name:
            raise ValueError("Method name is required")
        if name in self._entries:
            logger.debug("Replacing handler for method %s", name)
        self._entries[name] = MethodEntry(name=name, handler=handler, validator=validator)

    def method(
        self,
        name: str,
        validator: Validator | None = None,
    ) -> Callable[[MethodHandler], MethodHandler]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: MethodHandler) -> MethodHandler:
            self.register(name, fn, validator)
            return fn

        return decorator

    def lookup(self, name: str) -> MethodEntry | None:
        """Find the entry for ``name``; None when not registered."""
        return self._entries.get(name)

    @property
    def methods(self) -> list[str]:
        """Registered method names."""
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
