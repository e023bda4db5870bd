"""JSON-RPC dispatch core: registry, validation, dispatcher, error formatter."""

from .dispatcher import RpcContext, RpcDispatcher
from .formatter import ErrorFormatter, FormattedError
from .registry import MethodEntry, MethodRegistry
from .validation import ValidationOutcome, normalize_outcome, run_validator

__all__ = [
    # Registry
    "MethodEntry",
    "MethodRegistry",
    # Validation
    "ValidationOutcome",
    "normalize_outcome",
    "run_validator",
    # Dispatcher
    "RpcContext",
    "RpcDispatcher",
    # Formatter
    "ErrorFormatter",
    "FormattedError",
]
