"""
ErrorPresenter - User-friendly error message generation.

Transforms exceptions raised by guarded GIF API calls into actionable
messages. Supports verbose mode for technical details.
"""

import traceback
from typing import Dict, List, Tuple

from pydantic import ValidationError

from ...domain.exceptions import ClassifiedError, ErrorKind
from ..resilience import CircuitBreakerError

_KIND_MESSAGES: Dict[ErrorKind, Tuple[str, List[str]]] = {
    ErrorKind.NETWORK: (
        "Network connection issue",
        [
            "Check your internet connection",
            "Try again in a few moments",
        ]
    ),
    ErrorKind.TIMEOUT: (
        "The request timed out",
        [
            "Check your internet connection",
            "Wait a moment and retry",
            "Try again with a smaller file",
        ]
    ),
    ErrorKind.VALIDATION: (
        "Invalid input provided",
        [
            "Check that all required fields are filled",
            "Ensure data is in the correct format",
        ]
    ),
    ErrorKind.PROCESSING: (
        "Failed to process the GIF",
        [
            "Try with a smaller GIF file",
            "Ensure the GIF is not corrupted",
            "Reduce the number of text overlays",
        ]
    ),
    ErrorKind.MEMORY: (
        "Not enough memory to complete this operation",
        [
            "Use a smaller GIF file",
            "Close other applications and retry",
        ]
    ),
    ErrorKind.FORMAT: (
        "Unsupported file format or corrupted file",
        [
            "Ensure the file is a valid GIF",
            "Try with a different GIF file",
        ]
    ),
    ErrorKind.API: (
        "Service temporarily unavailable",
        [
            "Try again in a few moments",
            "Check the provider's status page",
        ]
    ),
}


class ErrorPresenter:
    """
    Presents errors to users with helpful messages and actions.

    Provides two modes:
    - Normal: User-friendly message with actionable suggestions
    - Verbose: Technical details including stack trace
    """

    @staticmethod
    def present(error: BaseException, verbose: bool = False) -> str:
        """
        Present error with user-friendly message.

        Args:
            error: Exception to present
            verbose: Show technical details (stack trace, error type)

        Returns:
            Formatted error message
        """
        message, suggestions = ErrorPresenter._get_friendly_message(error)

        if verbose:
            return ErrorPresenter._format_verbose(error, message, suggestions)
        return ErrorPresenter._format_friendly(message, suggestions)

    @staticmethod
    def _get_friendly_message(error: BaseException) -> Tuple[str, List[str]]:
        """
        Get friendly message and actionable suggestions for error.

        Args:
            error: Exception to analyze

        Returns:
            Tuple of (message, suggestions)
        """
        if isinstance(error, CircuitBreakerError):
            suggestions = []
            if error.retry_after is not None:
                suggestions.append(f"Calls resume in about {max(error.retry_after, 0):.0f}s")
            else:
                suggestions.append("A recovery check is in progress, try again shortly")
            suggestions.append(
                f"Raise circuit_breakers.{error.name}.failure_threshold if the service is flaky but usable"
            )
            return (f"Service '{error.name}' is temporarily disabled after repeated failures", suggestions)

        if isinstance(error, ClassifiedError) and error.kind in _KIND_MESSAGES:
            message, suggestions = _KIND_MESSAGES[error.kind]
            return (message, list(suggestions))

        if isinstance(error, TimeoutError):
            return _KIND_MESSAGES[ErrorKind.TIMEOUT][0], list(_KIND_MESSAGES[ErrorKind.TIMEOUT][1])

        if isinstance(error, ConnectionError):
            return _KIND_MESSAGES[ErrorKind.NETWORK][0], list(_KIND_MESSAGES[ErrorKind.NETWORK][1])

        if isinstance(error, ValidationError):
            return (
                "Invalid configuration",
                [
                    f"Error details: {error.error_count()} invalid value(s)",
                    "Show the effective configuration: `gifguard config --show`",
                    "Check GIFGUARD_* environment variables",
                ]
            )

        if isinstance(error, FileNotFoundError):
            file_path = str(error).replace("Configuration file not found: ", "").strip("'\"")
            return (
                f"File not found: {file_path}",
                [
                    "Check the file path is correct",
                    "Create a default file: `gifguard config --init`",
                ]
            )

        if isinstance(error, KeyboardInterrupt):
            return ("Operation cancelled by user", [])

        error_type = type(error).__name__
        error_msg = str(error) or "No details available"

        return (
            f"An error occurred: {error_type}",
            [
                f"Error details: {error_msg}",
                "Run with --verbose for more information",
            ]
        )

    @staticmethod
    def _format_friendly(message: str, suggestions: List[str]) -> str:
        output = [f"Error: {message}"]

        if suggestions:
            output.append("")
            output.append("Suggestions:")
            for suggestion in suggestions:
                output.append(f"  - {suggestion}")

        return "\n".join(output)

    @staticmethod
    def _format_verbose(error: BaseException, message: str, suggestions: List[str]) -> str:
        output = [ErrorPresenter._format_friendly(message, suggestions)]

        output.append("")
        output.append("Technical Details:")
        output.append(f"  Error Type: {type(error).__name__}")
        output.append(f"  Error Message: {str(error)}")

        if isinstance(error, ClassifiedError):
            output.append(f"  Error Kind: {error.type}")
            output.append(f"  Retryable: {error.retryable}")

        if error.__cause__:
            output.append(f"  Caused by: {type(error.__cause__).__name__}: {str(error.__cause__)}")

        output.append("")
        output.append("Traceback:")
        tb_lines = traceback.format_exception(type(error), error, error.__traceback__)
        for line in tb_lines:
            for sub_line in line.rstrip().split('\n'):
                output.append(f"  {sub_line}")

        return "\n".join(output)
