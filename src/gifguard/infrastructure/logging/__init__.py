"""Logging infrastructure for gifguard."""

from .logger import GifGuardLogger, get_logger
from .context import LogContext, logging_context

__all__ = ["GifGuardLogger", "get_logger", "LogContext", "logging_context"]
