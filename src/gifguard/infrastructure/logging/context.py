"""
Logging context management for gifguard.

Stores fields (breaker name, operation, attempt) that should be attached
to every log message emitted within a context.

Design:
- ContextVar storage so each asyncio task and thread sees its own fields
- Context manager interface for automatic cleanup
- Automatic merging of context into log extra fields

Example:
    >>> with logging_context(dependency="gif_search"):
    ...     logger.info("Search started")  # Includes dependency
    ...     await search()  # All logs in call stack include it
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Optional

_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar(
    "gifguard_log_context", default=None
)


class LogContext:
    """
    Task-local storage for logging context.

    Every mutation replaces the stored dict rather than editing it in
    place, so a task spawned with a copy of the current context never
    sees later changes made by its parent (and vice versa).

    Example:
        >>> LogContext.set("dependency", "gif_search")
        >>> LogContext.get_context()
        {'dependency': 'gif_search'}
    """

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        """
        Get the current logging context.

        Returns:
            Copy of the context fields
        """
        return dict(_context.get() or {})

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """
        Set a single context field.

        Args:
            key: Context field name
            value: Context field value
        """
        cls.update({key: value})

    @classmethod
    def update(cls, fields: Dict[str, Any]) -> None:
        """
        Update multiple context fields at once.

        Args:
            fields: Dictionary of fields to add/update in context
        """
        _context.set({**(_context.get() or {}), **fields})

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a specific context field."""
        return (_context.get() or {}).get(key, default)

    @classmethod
    def clear(cls) -> None:
        """Clear all context fields."""
        _context.set({})

    @classmethod
    def remove(cls, *keys: str) -> None:
        """
        Remove specific context fields.

        Args:
            *keys: Field names to remove
        """
        current = _context.get()
        if not current:
            return
        _context.set({k: v for k, v in current.items() if k not in keys})


@contextmanager
def logging_context(**fields):
    """
    Context manager for automatic logging context management.

    Sets context fields on entry and restores the previous context on
    exit (even if an exception occurs).

    Args:
        **fields: Context fields to set (e.g., dependency="gif_search")

    Nested contexts:
        >>> with logging_context(dependency="gif_search"):
        ...     with logging_context(operation="retry_backoff"):
        ...         pass  # Both fields are in context
        ...     # Only dependency remains
    """
    token = _context.set({**(_context.get() or {}), **fields})
    try:
        yield
    finally:
        _context.reset(token)
