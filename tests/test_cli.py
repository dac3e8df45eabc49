"""
Integration tests for the gifguard CLI.

Runs the typer app in-process with CliRunner against an isolated
configuration.
"""

import pytest
from typer.testing import CliRunner

from gifguard import __version__
from gifguard.adapters.cli.main import app


@pytest.fixture
def runner():
    """Create CLI runner."""
    return CliRunner()


@pytest.fixture
def quiet_env(isolated_config, monkeypatch):
    """Isolated config with console logging off so output is only CLI text."""
    monkeypatch.setenv("GIFGUARD_LOGGING_CONSOLE", "false")
    return isolated_config


class TestInfoCommand:
    """Test suite for `gifguard info`."""

    def test_shows_defaults(self, runner, quiet_env):
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
        assert "Max attempts: 3" in result.stdout
        assert "gif_search" in result.stdout
        assert "gif_processing" in result.stdout
        assert "api_calls" in result.stdout
        assert "Using default configuration" in result.stdout

    def test_uses_config_file(self, runner, quiet_env):
        path = quiet_env / "custom.yaml"
        path.write_text("retry:\n  max_attempts: 6\n")

        result = runner.invoke(app, ["info", "--config", str(path)])

        assert result.exit_code == 0
        assert "Max attempts: 6" in result.stdout

    def test_missing_config_file(self, runner, quiet_env):
        result = runner.invoke(app, ["info", "--config", "missing.yaml"])

        assert result.exit_code == 1
        assert "File not found" in result.stdout
        assert "Traceback" not in result.stdout

    def test_missing_config_file_verbose(self, runner, quiet_env):
        result = runner.invoke(app, ["info", "--config", "missing.yaml", "--verbose"])

        assert result.exit_code == 1
        assert "Technical Details:" in result.stdout
        assert "FileNotFoundError" in result.stdout


class TestConfigCommand:
    """Test suite for `gifguard config`."""

    def test_lists_sources(self, runner, quiet_env):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "No configuration files found" in result.stdout
        assert "GIFGUARD_LOGGING_CONSOLE" in result.stdout

    def test_show(self, runner, quiet_env):
        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "max_attempts: 3" in result.stdout
        assert "console: false" in result.stdout

    def test_init(self, runner, quiet_env):
        target = quiet_env / "gifguard.yaml"

        result = runner.invoke(app, ["config", "--init", "--path", str(target)])

        assert result.exit_code == 0
        assert target.exists()
        assert "Configuration file created" in result.stdout

    def test_show_invalid_config(self, runner, quiet_env):
        path = quiet_env / "bad.yaml"
        path.write_text("retry:\n  max_attempts: 0\n")

        result = runner.invoke(app, ["config", "--show", "--path", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout


class TestSimulateCommand:
    """Test suite for `gifguard simulate`."""

    def test_retries_recover(self, runner, quiet_env):
        """Test that transient failures are absorbed by retries."""
        result = runner.invoke(
            app, ["simulate", "--failures", "2", "--calls", "3", "--base-delay", "0"]
        )

        assert result.exit_code == 0
        assert result.stdout.count("retry after attempt") == 2
        assert "Dependency invoked 5 time(s)" in result.stdout
        assert "succeeded: 3, failed: 0, rejected: 0" in result.stdout
        assert "breaker state: closed" in result.stdout

    def test_non_retryable_errors_open_breaker(self, runner, quiet_env):
        """Test that repeated non-retryable failures open the breaker and later calls are rejected."""
        result = runner.invoke(app, [
            "simulate",
            "--breaker", "gif_search",
            "--failures", "10",
            "--calls", "5",
            "--error-kind", "validation",
            "--base-delay", "0",
        ])

        assert result.exit_code == 0
        assert "retry after attempt" not in result.stdout
        assert "Dependency invoked 3 time(s)" in result.stdout
        assert "succeeded: 0, failed: 3, rejected: 2" in result.stdout
        assert "breaker state: open" in result.stdout

    def test_max_attempts_override(self, runner, quiet_env):
        result = runner.invoke(app, [
            "simulate", "--failures", "1", "--calls", "1",
            "--max-attempts", "1", "--base-delay", "0",
        ])

        assert result.exit_code == 0
        assert "Dependency invoked 1 time(s)" in result.stdout
        assert "succeeded: 0, failed: 1, rejected: 0" in result.stdout

    def test_unknown_error_kind(self, runner, quiet_env):
        result = runner.invoke(app, ["simulate", "--error-kind", "bogus"])

        assert result.exit_code == 1
        assert "An error occurred: ValueError" in result.stdout


def test_no_args_shows_help(runner):
    result = runner.invoke(app, [])

    assert "simulate" in result.stdout
