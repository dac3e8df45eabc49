"""
Circuit Breaker pattern implementation.

Stops calling a failing GIF API after a threshold of consecutive
failures, then lets a single trial call through once the recovery
timeout has elapsed.
"""

import threading
import time
from enum import Enum
from functools import wraps
from typing import Any, Awaitable, Callable, NamedTuple, Optional, TypeVar

from ..logging import GifGuardLogger, logging_context
from ...domain.exceptions import GifGuardError

T = TypeVar("T")

CIRCUIT_OPEN_MESSAGE = "Circuit breaker is open"


class CircuitBreakerState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation, calls pass through
    OPEN = "open"            # Failure threshold reached, calls rejected
    HALF_OPEN = "half_open"  # Single trial call probing recovery


class CircuitBreakerError(GifGuardError):
    """
    Raised when the breaker rejects a call without invoking the operation.

    Attributes:
        name: Name of the breaker that rejected the call
        retry_after: Seconds until a trial call may be admitted, if known
    """

    def __init__(self, name: str, retry_after: Optional[float] = None):
        super().__init__(CIRCUIT_OPEN_MESSAGE)
        self.name = name
        self.retry_after = retry_after


class _Admission(NamedTuple):
    generation: int
    trial: bool


class CircuitBreaker:
    """
    Circuit breaker guarding one dependency.

    CLOSED counts consecutive failures and opens at ``failure_threshold``.
    OPEN rejects every call with CircuitBreakerError until
    ``recovery_timeout`` seconds have passed since the last failure; the
    first call after that becomes the HALF_OPEN trial. A successful trial
    closes the circuit, a failed one opens it again.

    Only one trial runs at a time: callers arriving while it is in
    flight are rejected as if the circuit were still OPEN.

    Thread-safe for use across concurrent requests. The operation itself
    always runs outside the lock.

    Example:
        >>> breaker = CircuitBreaker(failure_threshold=3, recovery_timeout=30.0,
        ...                          name="gif_search")
        >>> gifs = await breaker.execute(lambda: client.search("cats"))
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures before opening
            recovery_timeout: Seconds to stay OPEN before a trial call
            name: Name of the protected dependency (for logging)
            clock: Monotonic time source in seconds
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if recovery_timeout < 0:
            raise ValueError("recovery_timeout must not be negative")

        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock

        self._state = CircuitBreakerState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None
        self._trial_in_flight = False
        # Bumped on every transition so outcomes of calls admitted under
        # an earlier state are ignored.
        self._generation = 0
        self._lock = threading.Lock()

        self.logger = GifGuardLogger.get_instance()

    @property
    def state(self) -> CircuitBreakerState:
        """Current state. Reading it never triggers a transition."""
        with self._lock:
            return self._state

    def get_state(self) -> CircuitBreakerState:
        """Return the current state."""
        return self.state

    @property
    def failure_count(self) -> int:
        """Consecutive failures counted while CLOSED."""
        with self._lock:
            return self._failure_count

    @property
    def last_failure_time(self) -> Optional[float]:
        """Clock reading of the last counted failure, None before any."""
        with self._lock:
            return self._last_failure_time

    def _log(self, level: str, operation: str, message: str, **fields: Any) -> None:
        with logging_context(operation=operation):
            getattr(self.logger, level)(
                f"{message}: {self.name}",
                extra={
                    "circuit_breaker": self.name,
                    "state": self._state.value,
                    **fields,
                }
            )

    def _admit(self) -> _Admission:
        """Decide whether a call may run; raise CircuitBreakerError if not."""
        with self._lock:
            if self._state == CircuitBreakerState.CLOSED:
                return _Admission(self._generation, trial=False)

            if self._state == CircuitBreakerState.OPEN:
                elapsed = self._clock() - (self._last_failure_time or 0.0)
                if elapsed >= self.recovery_timeout:
                    self._state = CircuitBreakerState.HALF_OPEN
                    self._trial_in_flight = True
                    self._generation += 1
                    self._log(
                        "info", "circuit_breaker_half_open",
                        "Circuit breaker entering HALF_OPEN state",
                        recovery_timeout_seconds=self.recovery_timeout,
                    )
                    return _Admission(self._generation, trial=True)
                retry_after = self.recovery_timeout - elapsed
            else:
                retry_after = None

            self._log(
                "warning", "circuit_breaker_blocked",
                "Circuit breaker blocked call",
                trial_in_flight=self._trial_in_flight,
            )

        raise CircuitBreakerError(self.name, retry_after=retry_after)

    def _record_success(self, admission: _Admission) -> None:
        with self._lock:
            if admission.generation != self._generation:
                return

            self._failure_count = 0

            if admission.trial:
                self._trial_in_flight = False
                self._state = CircuitBreakerState.CLOSED
                self._generation += 1
                self._log("info", "circuit_breaker_closed", "Circuit breaker closed (recovered)")

    def _record_failure(self, admission: _Admission, exception: Exception) -> None:
        with self._lock:
            if admission.generation != self._generation:
                return

            self._last_failure_time = self._clock()

            if admission.trial:
                self._trial_in_flight = False
                self._state = CircuitBreakerState.OPEN
                self._generation += 1
                self._log(
                    "warning", "circuit_breaker_reopened",
                    "Circuit breaker reopened (recovery failed)",
                    error_type=type(exception).__name__,
                )
                return

            self._failure_count += 1
            if self._failure_count >= self.failure_threshold:
                self._state = CircuitBreakerState.OPEN
                self._generation += 1
                self._log(
                    "error", "circuit_breaker_opened",
                    "Circuit breaker opened (failure threshold reached)",
                    failure_count=self._failure_count,
                    failure_threshold=self.failure_threshold,
                    recovery_timeout_seconds=self.recovery_timeout,
                    error_type=type(exception).__name__,
                )

    def _release(self, admission: _Admission) -> None:
        """Give back an interrupted trial slot without counting an outcome."""
        with self._lock:
            if admission.trial and admission.generation == self._generation:
                self._trial_in_flight = False
                self._state = CircuitBreakerState.OPEN
                self._generation += 1

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run an async operation through the breaker.

        Args:
            operation: Zero-argument callable returning an awaitable

        Returns:
            Result of the operation

        Raises:
            CircuitBreakerError: If the call was rejected without running
            Exception: Any error raised by the operation, unchanged
        """
        admission = self._admit()
        try:
            result = await operation()
        except Exception as e:
            self._record_failure(admission, e)
            raise
        except BaseException:
            self._release(admission)
            raise
        self._record_success(admission)
        return result

    def execute_sync(self, operation: Callable[[], T]) -> T:
        """Run a blocking operation through the breaker."""
        admission = self._admit()
        try:
            result = operation()
        except Exception as e:
            self._record_failure(admission, e)
            raise
        except BaseException:
            self._release(admission)
            raise
        self._record_success(admission)
        return result

    def protect(self, func: Callable) -> Callable:
        """
        Decorator routing every call of an async function through the breaker.

        Example:
            >>> @breaker.protect
            ... async def search(query):
            ...     return await client.search(query)
        """
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            return await self.execute(lambda: func(*args, **kwargs))

        return wrapper

    def protect_sync(self, func: Callable) -> Callable:
        """Decorator routing every call of a blocking function through the breaker."""
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            return self.execute_sync(lambda: func(*args, **kwargs))

        return wrapper

    def reset(self) -> None:
        """Force the breaker back to CLOSED with a zero failure count."""
        with self._lock:
            self._state = CircuitBreakerState.CLOSED
            self._failure_count = 0
            self._last_failure_time = None
            self._trial_in_flight = False
            self._generation += 1
            self._log("info", "circuit_breaker_reset", "Circuit breaker manually reset")

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name={self.name!r}, state={self._state.value}, "
            f"failures={self._failure_count}/{self.failure_threshold})"
        )
