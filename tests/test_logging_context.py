"""
Tests for logging context management.

Covers task and thread isolation, the context manager and propagation
of context fields into log records.
"""

import asyncio
import json
import threading
import time

import pytest

from gifguard.infrastructure.logging import GifGuardLogger
from gifguard.infrastructure.logging.context import LogContext, logging_context


class TestLogContext:
    """Test suite for LogContext."""

    def test_get_context_empty_by_default(self):
        """Test that context is empty by default."""
        assert LogContext.get_context() == {}

    def test_set_and_get_fields(self):
        """Test setting and getting context fields."""
        LogContext.set("dependency", "gif_search")
        LogContext.set("attempt", 2)

        context = LogContext.get_context()
        assert context["dependency"] == "gif_search"
        assert context["attempt"] == 2

    def test_get_context_returns_copy(self):
        LogContext.set("dependency", "gif_search")

        LogContext.get_context()["dependency"] = "tampered"

        assert LogContext.get("dependency") == "gif_search"

    def test_update_multiple_fields_at_once(self):
        """Test update() method to set multiple fields at once."""
        LogContext.update({
            "dependency": "gif_processing",
            "breaker": "gif_processing",
            "metrics": {"count": 42},
        })

        context = LogContext.get_context()
        assert context["breaker"] == "gif_processing"
        assert context["metrics"]["count"] == 42

    def test_get_specific_field(self):
        """Test get() method to retrieve a specific field."""
        LogContext.set("dependency", "gif_search")

        assert LogContext.get("dependency") == "gif_search"
        assert LogContext.get("non_existent") is None
        assert LogContext.get("non_existent", "default_value") == "default_value"

    def test_remove_and_clear(self):
        LogContext.update({"a": 1, "b": 2, "c": 3})

        LogContext.remove("a", "b")
        assert LogContext.get_context() == {"c": 3}

        LogContext.clear()
        assert LogContext.get_context() == {}

    def test_thread_isolation(self):
        """Test that context is isolated between threads."""
        LogContext.set("dependency", "main-thread")
        thread_results = {}

        def thread_function(thread_id):
            LogContext.set("dependency", f"thread-{thread_id}")
            time.sleep(0.01)
            thread_results[thread_id] = LogContext.get("dependency")

        threads = [threading.Thread(target=thread_function, args=(i,)) for i in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert thread_results == {0: "thread-0", 1: "thread-1", 2: "thread-2"}
        assert LogContext.get("dependency") == "main-thread"

    @pytest.mark.asyncio
    async def test_task_isolation(self):
        """Test that concurrent asyncio tasks do not see each other's fields."""
        results = {}

        async def worker(name):
            with logging_context(dependency=name):
                await asyncio.sleep(0.01)
                results[name] = LogContext.get("dependency")

        await asyncio.gather(worker("gif_search"), worker("gif_processing"))

        assert results == {"gif_search": "gif_search", "gif_processing": "gif_processing"}
        assert LogContext.get("dependency") is None


class TestLoggingContextManager:
    """Test suite for logging_context() context manager."""

    def test_sets_and_clears_context(self):
        """Test that context manager sets context and clears on exit."""
        with logging_context(dependency="gif_search", attempt=1):
            assert LogContext.get_context() == {"dependency": "gif_search", "attempt": 1}

        assert LogContext.get_context() == {}

    def test_nested_contexts(self):
        """Test nested context managers."""
        with logging_context(dependency="gif_search"):
            with logging_context(operation="retry_backoff"):
                assert LogContext.get_context() == {
                    "dependency": "gif_search",
                    "operation": "retry_backoff",
                }
            assert LogContext.get_context() == {"dependency": "gif_search"}

        assert LogContext.get_context() == {}

    def test_inner_value_shadowed_then_restored(self):
        with logging_context(operation="outer"):
            with logging_context(operation="inner"):
                assert LogContext.get("operation") == "inner"
            assert LogContext.get("operation") == "outer"

    def test_exception_handling(self):
        """Test that context is restored even if an exception occurs."""
        with pytest.raises(ValueError):
            with logging_context(dependency="gif_search"):
                raise ValueError("Test exception")

        assert "dependency" not in LogContext.get_context()

    def test_preserves_existing_context(self):
        """Test that context manager preserves fields set before it."""
        LogContext.set("existing_field", "existing_value")

        with logging_context(dependency="gif_search"):
            assert LogContext.get("existing_field") == "existing_value"

        assert LogContext.get_context() == {"existing_field": "existing_value"}


class TestLoggingIntegrationWithContext:
    """Integration tests for logging with context."""

    def test_automatic_context_propagation(self, tmp_path):
        """Test that log messages automatically include context fields."""
        log_file = tmp_path / "context_integration.log"
        logger = GifGuardLogger.get_instance(level="INFO", log_file=log_file, console=False)

        with logging_context(dependency="gif_search", breaker="gif_search"):
            logger.info("Search started")
            logger.info("Search page fetched", extra={"page": 2})

        lines = log_file.read_text().splitlines()
        assert len(lines) == 2
        for line in lines:
            log_data = json.loads(line)
            assert log_data["dependency"] == "gif_search"
            assert log_data["breaker"] == "gif_search"
        assert json.loads(lines[1])["page"] == 2

    def test_logging_without_context(self, tmp_path):
        """Test that logging works normally without context."""
        log_file = tmp_path / "no_context.log"
        logger = GifGuardLogger.get_instance(level="INFO", log_file=log_file, console=False)

        logger.info("Message without context")

        log_data = json.loads(log_file.read_text().strip())
        assert log_data["message"] == "Message without context"
        assert "dependency" not in log_data

    def test_explicit_extra_overrides_context(self, tmp_path):
        """Test that explicit extra fields override context."""
        log_file = tmp_path / "context_override.log"
        logger = GifGuardLogger.get_instance(level="INFO", log_file=log_file, console=False)

        with logging_context(dependency="from-context"):
            logger.info("Override test", extra={"dependency": "explicit"})

        assert json.loads(log_file.read_text().strip())["dependency"] == "explicit"
