"""Pre-invocation params validation.

Validators may report failure in several ways:

- return ``True`` (pass) or ``False`` (fail, no field detail);
- return a pair ``(is_valid, field_errors)``;
- raise an exception, optionally carrying ``validations``, ``field``,
  ``code`` or ``http_status`` attributes.

All of them are reduced to a single :class:`ValidationOutcome` by
:func:`normalize_outcome`; :func:`run_validator` turns a failed outcome
into a :class:`ValidationError`.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any

from ..errors import (
    FieldErrors,
    RpcError,
    ValidationError,
    coerce_field_errors,
    field_errors_of,
    message_of,
    tag_error,
)
from .registry import Validator

logger = logging.getLogger("jsonrpc.validation")


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Normalized result of running a validator.

    Attributes:
        ok: Whether params passed validation.
        field_errors: Field name -> list of reasons (empty when ok).
        error: Exception raised by the validator, if it raised.
    """

    ok: bool
    field_errors: FieldErrors = field(default_factory=dict)
    error: BaseException | None = None

    @classmethod
    def passed(cls) -> "ValidationOutcome":
        """Create a passing outcome."""
        return cls(ok=True)

    @classmethod
    def failed(
        cls,
        field_errors: FieldErrors | None = None,
        error: BaseException | None = None,
    ) -> "ValidationOutcome":
        """Create a failing outcome."""
        return cls(ok=False, field_errors=field_errors or {}, error=error)


def normalize_outcome(value: Any) -> ValidationOutcome:
    """Reduce whatever a validator returned or raised to a ValidationOutcome.

    Args:
        value: Validator return value, or the exception it raised.

    Returns:
        The normalized outcome. Values other than ``False``, a pair, or an
        exception count as a pass.
    """
    if isinstance(value, BaseException):
        return ValidationOutcome.failed(field_errors_of(value), error=value)
    if value is False:
        return ValidationOutcome.failed()
    if isinstance(value, (tuple, list)) and len(value) == 2:
        is_valid, field_errors = value
        if is_valid:
            return ValidationOutcome.passed()
        return ValidationOutcome.failed(coerce_field_errors(field_errors))
    return ValidationOutcome.passed()


async def run_validator(validator: Validator | None, params: Any, method: str) -> None:
    """Run a method's validator against params.

    Args:
        validator: Registered validator (None means always valid).
        params: Request params.
        method: Method name, attached to any resulting error.

    Raises:
        ValidationError: If validation fails.
    """
    if validator is None:
        return

    try:
        value = validator(params)
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        value = e

    outcome = normalize_outcome(value)
    if outcome.ok:
        return

    logger.info("Validation failed for %s: %s", method, sorted(outcome.field_errors))
    raise _validation_error(outcome, method)


def _validation_error(outcome: ValidationOutcome, method: str) -> RpcError:
    """Build the ValidationError for a failed outcome."""
    raised = outcome.error
    if isinstance(raised, ValidationError):
        # Caller-authored message and code are kept as-is
        return tag_error(raised, method=method)

    if raised is None:
        return ValidationError(outcome.field_errors, method=method)

    code = getattr(raised, "code", None)
    http_status = getattr(raised, "http_status", None)
    error = ValidationError(
        outcome.field_errors,
        message=message_of(raised),
        code=code if isinstance(code, str) and code else None,
        http_status=http_status if isinstance(http_status, int) else None,
        method=method,
    )
    error.__cause__ = raised
    return error
