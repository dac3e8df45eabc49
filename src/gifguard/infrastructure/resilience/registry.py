"""Registry of named circuit breakers, one per guarded dependency."""

import threading
from typing import Dict, List, Mapping, Optional, Tuple

from ..logging import GifGuardLogger, logging_context
from .circuit_breaker import CircuitBreaker, CircuitBreakerState

# name -> (failure_threshold, recovery_timeout seconds)
DEFAULT_BREAKER_SETTINGS: Dict[str, Tuple[int, float]] = {
    "gif_search": (3, 30.0),
    "gif_processing": (2, 60.0),
    "api_calls": (5, 45.0),
}

FALLBACK_BREAKER = "api_calls"


class CircuitBreakerRegistry:
    """
    Owns the circuit breakers of one process.

    Created once (normally by DIContainer) and passed to every caller
    that guards the same dependencies, so two call sites asking for
    ``"gif_search"`` share one breaker.

    Example:
        >>> registry = CircuitBreakerRegistry()
        >>> breaker = registry.get("gif_search")
        >>> registry.reset_all()
    """

    def __init__(self, settings: Optional[Mapping[str, Tuple[int, float]]] = None):
        """
        Initialize registry.

        Args:
            settings: Mapping of breaker name to (failure_threshold,
                recovery_timeout); defaults to DEFAULT_BREAKER_SETTINGS
        """
        self._settings: Dict[str, Tuple[int, float]] = dict(
            DEFAULT_BREAKER_SETTINGS if settings is None else settings
        )
        self._breakers: Dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()
        self.logger = GifGuardLogger.get_instance()

    def _settings_for(self, name: str) -> Tuple[int, float]:
        if name in self._settings:
            return self._settings[name]
        return self._settings.get(FALLBACK_BREAKER, DEFAULT_BREAKER_SETTINGS[FALLBACK_BREAKER])

    def get(self, name: str) -> CircuitBreaker:
        """
        Get the breaker for a dependency, creating it on first use.

        Unknown names get the ``api_calls`` settings.
        """
        with self._lock:
            breaker = self._breakers.get(name)
            if breaker is None:
                failure_threshold, recovery_timeout = self._settings_for(name)
                breaker = CircuitBreaker(
                    failure_threshold=failure_threshold,
                    recovery_timeout=recovery_timeout,
                    name=name,
                )
                self._breakers[name] = breaker
            return breaker

    def names(self) -> List[str]:
        """Names of configured and created breakers."""
        with self._lock:
            return sorted(set(self._settings) | set(self._breakers))

    def states(self) -> Dict[str, CircuitBreakerState]:
        """
        Current state of every configured or created breaker.

        Configured breakers not created yet are reported CLOSED and are
        not created by this call.
        """
        with self._lock:
            breakers = dict(self._breakers)
            names = sorted(set(self._settings) | set(breakers))
        return {
            name: breakers[name].state if name in breakers else CircuitBreakerState.CLOSED
            for name in names
        }

    def reset_all(self) -> None:
        """Reset every breaker created so far."""
        with self._lock:
            breakers = list(self._breakers.values())

        for breaker in breakers:
            breaker.reset()

        with logging_context(operation="circuit_breaker_reset_all"):
            self.logger.info(
                "All circuit breakers reset",
                extra={"breaker_count": len(breakers)}
            )

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._breakers or name in self._settings

    def __len__(self) -> int:
        return len(self.names())
