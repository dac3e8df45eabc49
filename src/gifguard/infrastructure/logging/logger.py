"""
Logger shared by the resilience components.

Retry attempts and breaker transitions are emitted as records whose
extra fields (breaker name, attempt, delay) come from the call site and
from the active logging_context. Records go to stderr as one line of
text, and optionally to a JSON-lines file rotated at midnight.
"""

import json
import logging
import logging.handlers
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .context import LogContext

LOGGER_NAME = "gifguard"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_RESERVED_RECORD_FIELDS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs", "message",
    "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
})


class JSONFormatter(logging.Formatter):
    """One JSON object per record: location, message, every extra field and any exception."""

    def format(self, record: logging.LogRecord) -> str:
        extras = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_FIELDS
        }
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            **extras,
        }
        if record.exc_info:
            error_type, error, _ = record.exc_info
            payload["exception"] = {
                "type": error_type.__name__,
                "message": str(error),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Single-line console format: `<time> - <LEVEL> - <message>`."""

    def __init__(self):
        super().__init__(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(HumanReadableFormatter())
    return handler


def _file_handler(log_file: Path, rotation: str, retention_days: int) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    if rotation == "daily":
        handler: logging.Handler = logging.handlers.TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=retention_days, encoding="utf-8"
        )
    else:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    # The file keeps everything the logger lets through; only the console filters.
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JSONFormatter())
    return handler


class GifGuardLogger:
    """
    Process-wide handle on the ``gifguard`` logger.

    Breakers, executors and the registry all call get_instance(), so the
    handlers are set up once; DIContainer calls configure() to apply the
    logging section of the configuration. Each emit merges the active
    logging_context under the call's own ``extra`` fields.

    Example:
        >>> logger = GifGuardLogger.get_instance(level="INFO")
        >>> logger.warning("Retrying", extra={"attempt": 2})
    """

    _instance: Optional['GifGuardLogger'] = None
    _lock: threading.Lock = threading.Lock()

    def __init__(
        self,
        level: str = "INFO",
        log_file: Optional[Path] = None,
        console: bool = True,
        rotation: str = "daily",
        retention_days: int = 30,
    ):
        """
        Replace the handlers of the ``gifguard`` logger.

        Args:
            level: Minimum level name for the logger and the console
            log_file: JSON-lines file; no file handler when None
            console: Write text records to stderr
            rotation: "daily" rotates at midnight, "none" appends forever
            retention_days: Number of rotated files kept
        """
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            raise ValueError(f"Unknown log level: {level}")

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(numeric_level)
        self.logger.propagate = False

        for old in self.logger.handlers[:]:
            self.logger.removeHandler(old)
            old.close()

        if console:
            self.logger.addHandler(_console_handler(numeric_level))
        if log_file:
            self.logger.addHandler(_file_handler(Path(log_file), rotation, retention_days))

    @classmethod
    def get_instance(cls, **kwargs) -> 'GifGuardLogger':
        """
        Return the shared logger, creating it on first use.

        Keyword arguments are those of the constructor and only apply when
        the logger is created; configure() rebuilds the handlers later.
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls(**kwargs)
        return cls._instance

    @classmethod
    def configure(cls, **kwargs) -> 'GifGuardLogger':
        """Replace the singleton with a freshly configured logger."""
        with cls._lock:
            cls._instance = cls(**kwargs)
        return cls._instance

    def _merge_context(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        context = LogContext.get_context()
        if not context:
            return kwargs
        return {**kwargs, "extra": {**context, **kwargs.get("extra", {})}}

    def debug(self, message: str, **kwargs):
        """Emit at DEBUG with the current logging_context merged in."""
        self.logger.debug(message, **self._merge_context(kwargs))

    def info(self, message: str, **kwargs):
        """Emit at INFO."""
        self.logger.info(message, **self._merge_context(kwargs))

    def warning(self, message: str, **kwargs):
        """Emit at WARNING."""
        self.logger.warning(message, **self._merge_context(kwargs))

    def error(self, message: str, **kwargs):
        """Emit at ERROR."""
        self.logger.error(message, **self._merge_context(kwargs))

    def critical(self, message: str, **kwargs):
        """Emit at CRITICAL."""
        self.logger.critical(message, **self._merge_context(kwargs))


def get_logger(name: str) -> logging.Logger:
    """Plain ``logging.Logger`` named ``gifguard.<name>``, inheriting its handlers."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
