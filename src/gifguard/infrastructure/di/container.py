"""Dependency injection container for gifguard."""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.config_loader import ConfigLoader
from ..config.config_models import GifGuardConfig
from ..logging import GifGuardLogger
from ..resilience import (
    CircuitBreaker,
    CircuitBreakerRegistry,
    RetryCondition,
    RetryOptions,
)


@dataclass
class DIContainer:
    """
    Dependency injection container for gifguard.

    Built once at application startup. Holds the single breaker registry
    every caller should share, and the default retry options derived
    from configuration.
    """

    config: GifGuardConfig
    logger: GifGuardLogger
    breakers: CircuitBreakerRegistry
    retry_options: RetryOptions

    @classmethod
    def create(cls, config_path: Optional[str] = None) -> "DIContainer":
        """
        Create and wire all dependencies.

        Args:
            config_path: Optional path to configuration file

        Returns:
            DIContainer with all dependencies wired
        """
        config = ConfigLoader.load(config_path)
        return cls.from_config(config)

    @classmethod
    def from_config(cls, config: GifGuardConfig) -> "DIContainer":
        """Wire dependencies from an already loaded configuration."""
        logger = GifGuardLogger.configure(
            level=config.logging.level,
            log_file=Path(config.logging.file) if config.logging.file else None,
            console=config.logging.console,
            rotation=config.logging.rotation,
            retention_days=config.logging.retention_days,
        )

        breakers = CircuitBreakerRegistry({
            name: (settings.failure_threshold, settings.recovery_timeout)
            for name, settings in config.circuit_breakers.items()
        })

        retry_options = RetryOptions(
            max_attempts=config.retry.max_attempts,
            base_delay=config.retry.base_delay,
            max_delay=config.retry.max_delay,
            backoff_factor=config.retry.backoff_factor,
            jitter=config.retry.jitter,
        )

        return cls(
            config=config,
            logger=logger,
            breakers=breakers,
            retry_options=retry_options,
        )

    def breaker(self, name: str) -> CircuitBreaker:
        """Shortcut for the shared breaker guarding ``name``."""
        return self.breakers.get(name)

    def retry_options_for(
        self,
        retry_condition: Optional[RetryCondition] = None,
        **overrides,
    ) -> RetryOptions:
        """
        Default retry options with a retry condition and other fields replaced.

        Example:
            >>> options = container.retry_options_for(api_errors, max_attempts=2)
        """
        if retry_condition is not None:
            overrides["retry_condition"] = retry_condition
        return dataclasses.replace(self.retry_options, **overrides)
