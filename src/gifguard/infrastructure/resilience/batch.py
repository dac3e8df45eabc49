"""
Batch retry with bounded concurrency.

Runs many independent operations (e.g. processing every GIF of a
search page) through retry_with_backoff, never more than
``concurrency`` at a time, and reports one result per operation
instead of raising.
"""

import asyncio
import functools
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from ..logging import GifGuardLogger, logging_context
from .retry import RetryOptions, retry_with_backoff

T = TypeVar("T")


@dataclass
class RetryResult(Generic[T]):
    """
    Outcome of one operation in a batch.

    Attributes:
        success: Whether the operation eventually succeeded
        result: Value returned on success
        error: Last error on failure
        attempts: Number of times the operation was invoked
        total_time: Seconds spent, including backoff delays
    """
    success: bool
    result: Optional[T] = None
    error: Optional[BaseException] = None
    attempts: int = 0
    total_time: float = 0.0


async def retry_batch(
    operations: Sequence[Callable[[], Awaitable[T]]],
    options: Optional[RetryOptions] = None,
    concurrency: int = 3,
) -> List[RetryResult[T]]:
    """
    Retry a batch of async operations with bounded concurrency.

    Args:
        operations: Zero-argument callables returning awaitables
        options: Retry options shared by every operation
        concurrency: Maximum operations running at once

    Returns:
        One RetryResult per operation, in input order
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    options = options or RetryOptions()
    semaphore = asyncio.Semaphore(concurrency)
    logger = GifGuardLogger.get_instance()

    async def run(operation: Callable[[], Awaitable[T]]) -> RetryResult[T]:
        invocations = 0

        @functools.wraps(operation)
        async def counted() -> T:
            nonlocal invocations
            invocations += 1
            return await operation()

        async with semaphore:
            started = time.monotonic()
            try:
                result = await retry_with_backoff(counted, options)
            except Exception as e:
                return RetryResult(
                    success=False,
                    error=e,
                    attempts=invocations,
                    total_time=time.monotonic() - started,
                )
            return RetryResult(
                success=True,
                result=result,
                attempts=invocations,
                total_time=time.monotonic() - started,
            )

    results: List[RetryResult[Any]] = await asyncio.gather(
        *(run(op) for op in operations)
    )

    failed = sum(1 for r in results if not r.success)
    with logging_context(operation="retry_batch"):
        logger.info(
            "Batch retry completed",
            extra={
                "batch_size": len(results),
                "succeeded": len(results) - failed,
                "failed": failed,
                "concurrency": concurrency,
            }
        )

    return results
