"""Retry wrapper factory."""

import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .retry import RetryOptions, retry_with_backoff, retry_with_backoff_sync

F = TypeVar("F", bound=Callable)


def _is_async_callable(fn: Callable) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


def _resume(first: Awaitable, call: Callable[[], Awaitable]) -> Callable[[], Awaitable]:
    """Operation that awaits an already started first attempt, then calls again."""
    pending = [first]

    async def operation() -> Any:
        if pending:
            return await pending.pop()
        return await call()

    operation.__qualname__ = getattr(call.func, "__qualname__", repr(call.func))
    return operation


def create_retry_wrapper(fn: F, options: Optional[RetryOptions] = None) -> F:
    """
    Wrap a function so every call is retried with backoff.

    The wrapper keeps ``fn``'s signature and metadata. Each call binds its
    arguments into a zero-argument operation and runs an independent
    retry sequence; nothing is remembered between calls.

    Coroutine functions and objects with an ``async def __call__`` get an
    async wrapper. Other callables get a blocking one; if such a callable
    returns an awaitable, the call is handed to the async executor and the
    wrapper returns its coroutine.

    Args:
        fn: Function to harden
        options: Retry options applied to every call

    Returns:
        Drop-in replacement for ``fn``

    Example:
        >>> search = create_retry_wrapper(client.search,
        ...                               RetryOptions(max_attempts=2))
        >>> gifs = await search("cats", limit=20)
    """
    if _is_async_callable(fn):
        @functools.wraps(fn)
        async def async_wrapper(*args, **kwargs):
            return await retry_with_backoff(functools.partial(fn, *args, **kwargs), options)

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        call = functools.partial(fn, *args, **kwargs)
        result = retry_with_backoff_sync(call, options)
        if inspect.isawaitable(result):
            return retry_with_backoff(_resume(result, call), options)
        return result

    return wrapper
