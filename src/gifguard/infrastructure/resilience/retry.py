"""
Retry logic with exponential backoff.

Runs a fallible operation up to ``max_attempts`` times, waiting
``base_delay * backoff_factor ** (attempt - 1)`` seconds (capped at
``max_delay``) between attempts. The error of the last attempt is
re-raised unchanged.
"""

import asyncio
import functools
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ..logging import GifGuardLogger, logging_context
from .predicates import RetryCondition

T = TypeVar("T")

RetryObserver = Callable[[int, Exception], None]


def _always(error: Any) -> bool:
    return True


@dataclass(frozen=True)
class RetryOptions:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Total number of attempts, including the first one
        base_delay: Delay in seconds after the first failed attempt
        max_delay: Upper bound in seconds for any delay (None = uncapped)
        retry_condition: Predicate deciding whether an error is retried
        on_retry: Observer called with (attempt, error) before each delay
        backoff_factor: Growth factor between successive delays
        jitter: Upper bound in seconds of random time added to each delay
    """
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: Optional[float] = None
    retry_condition: RetryCondition = _always
    on_retry: Optional[RetryObserver] = None
    backoff_factor: float = 2.0
    jitter: float = 0.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")
        if self.max_delay is not None and self.max_delay < 0:
            raise ValueError("max_delay must not be negative")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be at least 1")
        if self.jitter < 0:
            raise ValueError("jitter must not be negative")


def compute_delay(attempt: int, options: RetryOptions) -> float:
    """
    Delay in seconds to wait after the given failed attempt.

    Jitter is not included.

    Args:
        attempt: 1-based number of the attempt that just failed
        options: Retry options

    Returns:
        min(base_delay * backoff_factor ** (attempt - 1), max_delay)
    """
    try:
        delay = options.base_delay * (options.backoff_factor ** (attempt - 1))
    except OverflowError:
        delay = float("inf")
    if options.max_delay is not None:
        delay = min(delay, options.max_delay)
    return delay


def _describe(operation: Callable) -> str:
    if isinstance(operation, functools.partial):
        operation = operation.func
    return getattr(operation, "__qualname__", None) or repr(operation)


def _delay_before_next_attempt(
    attempt: int,
    error: Exception,
    options: RetryOptions,
    name: str,
) -> Optional[float]:
    """Return the wait before the next attempt, or None if the error must propagate."""
    logger = GifGuardLogger.get_instance()

    if attempt >= options.max_attempts:
        with logging_context(operation="retry_exhausted"):
            logger.error(
                f"All retry attempts exhausted for {name}",
                extra={
                    "function": name,
                    "total_attempts": attempt,
                    "error_type": type(error).__name__,
                    "error_message": str(error),
                }
            )
        return None

    if not options.retry_condition(error):
        with logging_context(operation="retry_non_retryable"):
            logger.info(
                f"Non-retryable error in {name}",
                extra={
                    "function": name,
                    "attempt": attempt,
                    "error_type": type(error).__name__,
                }
            )
        return None

    delay = compute_delay(attempt, options)
    if options.jitter > 0:
        delay += random.uniform(0, options.jitter)

    with logging_context(operation="retry_backoff"):
        logger.warning(
            f"Retrying {name} (attempt {attempt + 1}/{options.max_attempts})",
            extra={
                "function": name,
                "attempt": attempt + 1,
                "max_attempts": options.max_attempts,
                "delay_seconds": round(delay, 3),
                "last_error": type(error).__name__,
            }
        )

    if options.on_retry is not None:
        options.on_retry(attempt, error)

    return delay


def _log_recovered(name: str, attempt: int) -> None:
    with logging_context(operation="retry_success"):
        GifGuardLogger.get_instance().info(
            f"Retry successful for {name}",
            extra={"function": name, "total_attempts": attempt}
        )


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    options: Optional[RetryOptions] = None,
) -> T:
    """
    Run an async operation, retrying failures with exponential backoff.

    Waits with asyncio.sleep, so other tasks keep running during the
    backoff.

    Args:
        operation: Zero-argument callable returning an awaitable
        options: Retry options (defaults if None)

    Returns:
        Result of the first successful attempt

    Raises:
        Exception: The error of the last attempt, unchanged

    Example:
        >>> result = await retry_with_backoff(
        ...     lambda: client.search("cats"),
        ...     RetryOptions(max_attempts=3, retry_condition=network_errors),
        ... )
    """
    options = options or RetryOptions()
    name = _describe(operation)
    attempt = 1

    while True:
        try:
            result = await operation()
        except Exception as e:
            delay = _delay_before_next_attempt(attempt, e, options, name)
            if delay is None:
                raise
        else:
            if attempt > 1:
                _log_recovered(name, attempt)
            return result

        await asyncio.sleep(delay)
        attempt += 1


def retry_with_backoff_sync(
    operation: Callable[[], T],
    options: Optional[RetryOptions] = None,
) -> T:
    """
    Run a blocking operation, retrying failures with exponential backoff.

    Same semantics as retry_with_backoff, but sleeps with time.sleep.

    Args:
        operation: Zero-argument callable
        options: Retry options (defaults if None)

    Returns:
        Result of the first successful attempt

    Raises:
        Exception: The error of the last attempt, unchanged
    """
    options = options or RetryOptions()
    name = _describe(operation)
    attempt = 1

    while True:
        try:
            result = operation()
        except Exception as e:
            delay = _delay_before_next_attempt(attempt, e, options, name)
            if delay is None:
                raise
        else:
            if attempt > 1:
                _log_recovered(name, attempt)
            return result

        time.sleep(delay)
        attempt += 1
