"""Tests for ErrorPresenter."""

import pytest
from pydantic import ValidationError

from gifguard.domain.exceptions import ClassifiedError, ErrorKind, classify_error
from gifguard.infrastructure.config.config_models import RetryConfigModel
from gifguard.infrastructure.presentation.error_presenter import ErrorPresenter
from gifguard.infrastructure.resilience import CircuitBreakerError


def raised(error):
    """Return ``error`` after raising it, so it carries a traceback."""
    try:
        raise error
    except BaseException as e:
        return e


class TestErrorPresenter:
    """Test suite for ErrorPresenter."""

    def test_circuit_open_with_retry_after(self):
        message = ErrorPresenter.present(CircuitBreakerError("gif_search", retry_after=12.4))

        assert message.startswith(
            "Error: Service 'gif_search' is temporarily disabled after repeated failures"
        )
        assert "Calls resume in about 12s" in message
        assert "circuit_breakers.gif_search.failure_threshold" in message

    def test_circuit_trial_in_flight(self):
        message = ErrorPresenter.present(CircuitBreakerError("api_calls"))

        assert "recovery check is in progress" in message

    @pytest.mark.parametrize("kind,expected", [
        (ErrorKind.NETWORK, "Network connection issue"),
        (ErrorKind.TIMEOUT, "The request timed out"),
        (ErrorKind.VALIDATION, "Invalid input provided"),
        (ErrorKind.PROCESSING, "Failed to process the GIF"),
        (ErrorKind.MEMORY, "Not enough memory"),
        (ErrorKind.FORMAT, "Unsupported file format"),
        (ErrorKind.API, "Service temporarily unavailable"),
    ])
    def test_classified_kinds(self, kind, expected):
        message = ErrorPresenter.present(ClassifiedError("boom", kind))

        assert message.startswith(f"Error: {expected}")
        assert "Suggestions:" in message
        assert "  - " in message

    def test_builtin_network_errors(self):
        assert "Network connection issue" in ErrorPresenter.present(ConnectionError("refused"))
        assert "The request timed out" in ErrorPresenter.present(TimeoutError())

    def test_configuration_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            RetryConfigModel(max_attempts=0)

        message = ErrorPresenter.present(exc_info.value)

        assert message.startswith("Error: Invalid configuration")
        assert "1 invalid value(s)" in message

    def test_missing_config_file(self):
        message = ErrorPresenter.present(
            FileNotFoundError("Configuration file not found: /tmp/nope.yaml")
        )

        assert message.startswith("Error: File not found: /tmp/nope.yaml")
        assert "gifguard config --init" in message

    def test_keyboard_interrupt(self):
        assert ErrorPresenter.present(KeyboardInterrupt()) == "Error: Operation cancelled by user"

    def test_generic_error(self):
        message = ErrorPresenter.present(RuntimeError("weird"))

        assert message.startswith("Error: An error occurred: RuntimeError")
        assert "Error details: weird" in message
        assert "Traceback" not in message

    def test_unknown_kind_falls_back_to_generic(self):
        message = ErrorPresenter.present(ClassifiedError("odd", ErrorKind.UNKNOWN))

        assert "An error occurred: ClassifiedError" in message

    def test_verbose_includes_technical_details(self):
        error = raised(classify_error(raised(ConnectionError("refused"))))

        message = ErrorPresenter.present(error, verbose=True)

        assert "Technical Details:" in message
        assert "Error Type: ClassifiedError" in message
        assert "Error Kind: network_error" in message
        assert "Retryable: True" in message
        assert "Caused by: ConnectionError: refused" in message
        assert "Traceback:" in message

    def test_non_verbose_hides_traceback(self):
        message = ErrorPresenter.present(raised(ConnectionError("refused")))

        assert "Technical Details" not in message
        assert "Traceback" not in message
