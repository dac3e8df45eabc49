"""Tests for DIContainer wiring."""

import logging

import pytest

from gifguard.infrastructure.config.config_models import GifGuardConfig
from gifguard.infrastructure.di.container import DIContainer
from gifguard.infrastructure.logging import GifGuardLogger
from gifguard.infrastructure.resilience import (
    CircuitBreakerRegistry,
    RetryOptions,
    network_errors,
)


class TestDIContainer:
    """Test suite for DIContainer."""

    def test_create_with_defaults(self, isolated_config, monkeypatch):
        monkeypatch.setenv("GIFGUARD_LOGGING_CONSOLE", "false")

        container = DIContainer.create()

        assert isinstance(container.config, GifGuardConfig)
        assert isinstance(container.breakers, CircuitBreakerRegistry)
        assert isinstance(container.retry_options, RetryOptions)
        assert container.logger is GifGuardLogger.get_instance()

    def test_retry_options_from_config(self, isolated_config):
        config = GifGuardConfig(retry={"max_attempts": 5, "base_delay": 0.5, "max_delay": 4.0})

        container = DIContainer.from_config(config)

        assert container.retry_options.max_attempts == 5
        assert container.retry_options.base_delay == 0.5
        assert container.retry_options.max_delay == 4.0
        assert container.retry_options.backoff_factor == 2.0

    def test_breakers_from_config(self, isolated_config):
        config = GifGuardConfig(circuit_breakers={
            "gif_search": {"failure_threshold": 1, "recovery_timeout": 2.0},
        })

        container = DIContainer.from_config(config)

        assert container.breaker("gif_search").failure_threshold == 1
        assert container.breaker("gif_search") is container.breakers.get("gif_search")
        assert container.breakers.names() == ["gif_search"]

    def test_logger_configured_from_config(self, isolated_config):
        log_file = isolated_config / "logs" / "gifguard.log"
        config = GifGuardConfig(logging={"level": "DEBUG", "file": str(log_file), "console": False})

        container = DIContainer.from_config(config)
        container.logger.debug("wired")

        assert container.logger.logger.level == logging.DEBUG
        assert log_file.exists()

    def test_retry_options_for(self, isolated_config):
        container = DIContainer.from_config(GifGuardConfig())

        options = container.retry_options_for(network_errors, max_attempts=2)

        assert options.retry_condition is network_errors
        assert options.max_attempts == 2
        assert options.base_delay == container.retry_options.base_delay
        assert container.retry_options.max_attempts == 3

    def test_retry_options_for_rejects_invalid(self, isolated_config):
        container = DIContainer.from_config(GifGuardConfig())

        with pytest.raises(ValueError):
            container.retry_options_for(max_attempts=0)
