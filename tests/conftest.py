"""Shared fixtures for gifguard tests."""

import os

import pytest

from gifguard.infrastructure.config.config_loader import ConfigLoader
from gifguard.infrastructure.logging import GifGuardLogger, LogContext


@pytest.fixture(autouse=True)
def fresh_logger():
    """Give every test its own logger so handlers never point at a closed capture stream."""
    GifGuardLogger._instance = None
    LogContext.clear()
    yield
    GifGuardLogger._instance = None
    LogContext.clear()


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    """Ignore config files and GIFGUARD_* variables from the developer's machine."""
    monkeypatch.setattr(ConfigLoader, "DEFAULT_CONFIG_PATHS", [])
    for key in list(os.environ):
        if key.startswith("GIFGUARD_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return tmp_path
