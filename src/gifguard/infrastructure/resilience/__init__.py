"""Resilience infrastructure for gifguard."""

from .retry import (
    RetryOptions,
    compute_delay,
    retry_with_backoff,
    retry_with_backoff_sync,
)
from .predicates import (
    RetryCondition,
    all_of,
    any_of,
    api_errors,
    network_errors,
    processing_errors,
    retry_conditions,
    retryable_errors,
)
from .circuit_breaker import (
    CIRCUIT_OPEN_MESSAGE,
    CircuitBreaker,
    CircuitBreakerError,
    CircuitBreakerState,
)
from .wrapper import create_retry_wrapper
from .batch import RetryResult, retry_batch
from .registry import DEFAULT_BREAKER_SETTINGS, CircuitBreakerRegistry

__all__ = [
    "RetryOptions",
    "compute_delay",
    "retry_with_backoff",
    "retry_with_backoff_sync",
    "RetryCondition",
    "all_of",
    "any_of",
    "api_errors",
    "network_errors",
    "processing_errors",
    "retry_conditions",
    "retryable_errors",
    "CIRCUIT_OPEN_MESSAGE",
    "CircuitBreaker",
    "CircuitBreakerError",
    "CircuitBreakerState",
    "create_retry_wrapper",
    "RetryResult",
    "retry_batch",
    "DEFAULT_BREAKER_SETTINGS",
    "CircuitBreakerRegistry",
]
