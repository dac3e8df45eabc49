"""
Retry predicates for classifying failures.

Each predicate takes an error-like value and returns True when the
failure is worth retrying. Errors are read structurally: ``message``,
``type`` and ``retryable`` are looked up as attributes, or as keys when
the error is a mapping. Predicates never raise.
"""

from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any, Callable

RetryCondition = Callable[[Any], bool]

_MISSING = object()

NETWORK_MESSAGE_HINTS = ("network", "fetch", "timeout", "connection")
API_ERROR_TYPES = frozenset({"api_error", "network_error", "timeout_error"})
PROCESSING_ERROR_TYPES = frozenset({"processing_error", "memory_error", "timeout_error"})


def _field(error: Any, name: str) -> Any:
    if isinstance(error, Mapping):
        return error.get(name, _MISSING)
    try:
        return getattr(error, name, _MISSING)
    except Exception:
        return _MISSING


def _message(error: Any) -> str:
    message = _field(error, "message")
    if isinstance(message, str):
        return message
    if isinstance(error, BaseException):
        try:
            return str(error)
        except Exception:
            return ""
    return ""


def _type(error: Any) -> str:
    error_type = _field(error, "type")
    return error_type if isinstance(error_type, str) else ""


def network_errors(error: Any) -> bool:
    """True if the error message mentions a network, fetch, timeout or connection failure."""
    message = _message(error).lower()
    return any(hint in message for hint in NETWORK_MESSAGE_HINTS)


def api_errors(error: Any) -> bool:
    """True for API, network and timeout error types; validation and format errors are final."""
    return _type(error) in API_ERROR_TYPES


def processing_errors(error: Any) -> bool:
    """True for processing, memory and timeout error types."""
    return _type(error) in PROCESSING_ERROR_TYPES


def retryable_errors(error: Any) -> bool:
    """True only when the error's ``retryable`` field is exactly True."""
    return _field(error, "retryable") is True


def _safe(predicate: RetryCondition, error: Any) -> bool:
    try:
        return bool(predicate(error))
    except Exception:
        return False


def any_of(*predicates: RetryCondition) -> RetryCondition:
    """
    Combine predicates: retry if any of them says so.

    A predicate that raises counts as False.

    Example:
        >>> condition = any_of(network_errors, retryable_errors)
    """
    def condition(error: Any) -> bool:
        return any(_safe(p, error) for p in predicates)
    return condition


def all_of(*predicates: RetryCondition) -> RetryCondition:
    """Combine predicates: retry only if every one of them says so."""
    def condition(error: Any) -> bool:
        return all(_safe(p, error) for p in predicates)
    return condition


retry_conditions = SimpleNamespace(
    network_errors=network_errors,
    api_errors=api_errors,
    processing_errors=processing_errors,
    retryable_errors=retryable_errors,
)
