"""Error taxonomy for JSON-RPC dispatch.

Every failure that leaves the dispatcher is one of a closed set of
``RpcError`` variants, built with its full shape (code, message, HTTP
status, level, per-field validations) at construction time.
"""

from typing import Any

# Levels
LEVEL_WARNING = "warning"
LEVEL_ERROR = "error"

FieldErrors = dict[str, list[str]]


class RpcError(Exception):
    """Base class for errors rendered into a JSON-RPC error envelope.

    Attributes:
        code: Stable string error code.
        message: Human-readable description.
        http_status: Transport-level status for this kind of error.
        level: ``"warning"`` for expected, caller-caused errors, else ``"error"``.
        validations: Mapping of field name to list of reasons (optional).
        method: Method name the error was raised for, once known.
        request_id: Correlation id of the request, once known.
    """

    default_code: str | None = None
    default_message: str = "Internal error"
    http_status: int = 500
    level: str = LEVEL_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        http_status: int | None = None,
        validations: FieldErrors | None = None,
        method: str | None = None,
        request_id: str | int | float | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code or type(self).__name__
        if http_status is not None:
            self.http_status = http_status
        self.validations = validations
        self.method = method
        self.request_id = request_id
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the envelope's error body (without trace)."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.validations is not None:
            result["validations"] = self.validations
        return result


class NotFoundError(RpcError):
    """Route could not be resolved."""

    default_code = "not-found"
    default_message = "Page not found"
    http_status = 404
    level = LEVEL_WARNING


class MethodNotFound(NotFoundError):
    """No handler is registered under the requested method name."""

    default_code = "method-not-found"
    default_message = "Method not found"

    def __init__(self, method: str | None = None, **kwargs: Any) -> None:
        message = f"Method [{method}] not found." if method else None
        super().__init__(message, method=method, **kwargs)


class ValidationError(RpcError):
    """Params failed validation; carries per-field reasons."""

    default_code = "fields-validation"
    http_status = 400
    level = LEVEL_WARNING

    def __init__(
        self,
        validations: FieldErrors | None = None,
        message: str | None = None,
        code: str | None = None,
        **kwargs: Any,
    ) -> None:
        validations = dict(validations or {})
        if not message:
            fields = ", ".join(validations)
            message = f"Validation error on [{fields}]" if fields else "Validation Error"
        super().__init__(message, code=code, validations=validations, **kwargs)


class FieldValidationError(ValidationError):
    """A single field is invalid."""

    default_code = "field-validation"

    def __init__(
        self,
        field: str,
        message: str | None = None,
        code: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        message = message or f"Invalid value for field [{field}]"
        super().__init__({field: [message]}, message, code, **kwargs)


class HandlerError(RpcError):
    """Any other exception raised by a handler or validator.

    The wrapped exception is kept as ``__cause__`` so traces point at the
    original failure.
    """


class ParseError(RpcError):
    """Request body is not valid JSON."""

    default_code = "parse-error"
    default_message = "Invalid JSON"
    http_status = 400
    level = LEVEL_WARNING


class InvalidRequest(RpcError):
    """Request decoded but does not look like a JSON-RPC call."""

    default_code = "invalid-request"
    default_message = "Invalid request"
    http_status = 400
    level = LEVEL_WARNING


def field_errors_of(exc: BaseException) -> FieldErrors | None:
    """Extract per-field reasons an exception exposes, if any.

    Uses a ``validations`` mapping when present, otherwise synthesizes
    ``{field: [message]}`` from a single ``field`` attribute.
    """
    validations = getattr(exc, "validations", None)
    if isinstance(validations, dict):
        return coerce_field_errors(validations)
    field = getattr(exc, "field", None)
    if isinstance(field, str):
        return {field: [message_of(exc)]}
    return None


def coerce_field_errors(mapping: Any) -> FieldErrors:
    """Copy a field-errors mapping, wrapping scalar reasons in a list."""
    if not isinstance(mapping, dict):
        return {}
    result: FieldErrors = {}
    for field, reasons in mapping.items():
        if isinstance(reasons, (list, tuple)):
            result[str(field)] = [str(r) for r in reasons]
        else:
            result[str(field)] = [str(reasons)]
    return result


def as_rpc_error(exc: BaseException, method: str | None = None) -> RpcError:
    """Normalize any exception into the closed ``RpcError`` set.

    ``RpcError`` instances are tagged and returned. Anything else becomes a
    ``HandlerError`` that keeps the exception's own ``code``, ``http_status``
    and field information when it carries them.
    """
    if isinstance(exc, RpcError):
        return tag_error(exc, method=method)

    code = getattr(exc, "code", None)
    http_status = getattr(exc, "http_status", None)
    error = HandlerError(
        message_of(exc),
        code=code if isinstance(code, str) and code else type(exc).__name__,
        http_status=http_status if isinstance(http_status, int) else None,
        validations=field_errors_of(exc),
        method=method,
    )
    error.__cause__ = exc
    error.__traceback__ = exc.__traceback__
    return error


def tag_error(
    error: RpcError,
    *,
    method: str | None = None,
    request_id: str | int | float | None = None,
) -> RpcError:
    """Return ``error`` with method and request id filled in.

    Values already present on the error are kept. The original instance is
    left untouched; a shallow copy is returned when anything changes.
    """
    fill_method = method is not None and not error.method
    fill_id = request_id is not None and error.request_id is None
    if not (fill_method or fill_id):
        return error

    tagged = type(error).__new__(type(error))
    tagged.__dict__.update(error.__dict__)
    tagged.args = error.args
    tagged.__cause__ = error.__cause__
    tagged.__context__ = error.__context__
    tagged.__suppress_context__ = error.__suppress_context__
    tagged.__traceback__ = error.__traceback__
    if fill_method:
        tagged.method = method
    if fill_id:
        tagged.request_id = request_id
    return tagged


def message_of(exc: BaseException) -> str:
    """Message of an exception, falling back to its class name."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__
