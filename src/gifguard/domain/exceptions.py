"""Domain exceptions for gifguard."""

from enum import Enum
from typing import Any, Optional


class GifGuardError(Exception):
    """Base exception for domain errors."""
    pass


class ErrorKind(Enum):
    """Kinds of failure reported by GIF API boundaries."""
    API = "api_error"
    NETWORK = "network_error"
    TIMEOUT = "timeout_error"
    VALIDATION = "validation_error"
    PROCESSING = "processing_error"
    MEMORY = "memory_error"
    FORMAT = "format_error"
    UNKNOWN = "unknown_error"

    @classmethod
    def from_value(cls, value: Any) -> Optional["ErrorKind"]:
        """Look up a kind by its wire value, returning None if unknown."""
        for kind in cls:
            if kind.value == value:
                return kind
        return None


_NOT_RETRYABLE = frozenset({ErrorKind.VALIDATION, ErrorKind.FORMAT})
_NOT_RECOVERABLE = frozenset({ErrorKind.FORMAT, ErrorKind.UNKNOWN})

# Checked in order; first match wins.
_MESSAGE_HINTS = (
    (("network", "fetch"), ErrorKind.NETWORK),
    (("timeout",), ErrorKind.TIMEOUT),
    (("memory",), ErrorKind.MEMORY),
    (("format", "invalid"), ErrorKind.FORMAT),
    (("processing", "ffmpeg"), ErrorKind.PROCESSING),
)


class ClassifiedError(GifGuardError):
    """
    Error carrying an explicit kind and retry/recovery flags.

    Exposes the duck-typed fields the retry predicates read:
    ``message``, ``type`` (the kind's wire value) and ``retryable``.

    Attributes:
        kind: Failure kind
        retryable: Whether retrying may succeed
        recoverable: Whether the caller can continue after this error
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        retryable: Optional[bool] = None,
        recoverable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.retryable = kind not in _NOT_RETRYABLE if retryable is None else retryable
        self.recoverable = kind not in _NOT_RECOVERABLE if recoverable is None else recoverable

    @property
    def type(self) -> str:
        """Wire value of the error kind (e.g. ``"api_error"``)."""
        return self.kind.value

    def __repr__(self) -> str:
        return (
            f"ClassifiedError({self.message!r}, kind={self.kind.name}, "
            f"retryable={self.retryable})"
        )


def _determine_kind(error: BaseException) -> ErrorKind:
    declared = ErrorKind.from_value(getattr(error, "type", None))
    if declared is not None:
        return declared

    if isinstance(error, TimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorKind.NETWORK
    if isinstance(error, (TypeError, ValueError)):
        return ErrorKind.VALIDATION
    if isinstance(error, MemoryError):
        return ErrorKind.MEMORY

    message = str(error).lower()
    for needles, kind in _MESSAGE_HINTS:
        if any(needle in message for needle in needles):
            return kind

    return ErrorKind.UNKNOWN


def classify_error(error: BaseException) -> ClassifiedError:
    """
    Convert an arbitrary exception into a ClassifiedError.

    Used at API boundaries so that retry predicates and the error
    presenter see a uniform shape.

    Args:
        error: Exception raised by a GIF API call

    Returns:
        The error itself if already classified, otherwise a new
        ClassifiedError chained to the original via ``__cause__``
    """
    if isinstance(error, ClassifiedError):
        return error

    message = str(error) or type(error).__name__
    classified = ClassifiedError(message, kind=_determine_kind(error))
    classified.__cause__ = error
    return classified
