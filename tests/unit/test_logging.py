"""Unit tests for logging module."""

import logging
import os
from collections.abc import Generator
from unittest.mock import patch

import pytest
import structlog

from graphweave.config import get_settings
from graphweave.utils.logging import (
    LOGGER_NAME,
    LogContext,
    bind_context,
    clear_context,
    get_logger,
    setup_logging,
    unbind_context,
)


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None, None, None]:
    """Start and end every test with an empty log context."""
    clear_context()
    yield
    clear_context()


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture(autouse=True)
    def restore_structlog(self) -> Generator[None, None, None]:
        """Reset structlog and the package logger after each test."""
        package_logger = logging.getLogger(LOGGER_NAME)
        handlers = list(package_logger.handlers)
        level = package_logger.level
        yield
        structlog.reset_defaults()
        package_logger.handlers = handlers
        package_logger.setLevel(level)

    def test_development_uses_console_renderer(self) -> None:
        """Test console output in development."""
        with patch("graphweave.utils.logging.get_settings") as mock_settings:
            mock_settings.return_value.app.is_production = False
            mock_settings.return_value.app.log_level = "DEBUG"

            setup_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_production_uses_json_renderer(self) -> None:
        """Test JSON output in production."""
        with patch("graphweave.utils.logging.get_settings") as mock_settings:
            mock_settings.return_value.app.is_production = True
            mock_settings.return_value.app.log_level = "INFO"

            setup_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_json_override(self) -> None:
        """Test explicit arguments win over settings."""
        with patch("graphweave.utils.logging.get_settings") as mock_settings:
            mock_settings.return_value.app.is_production = False
            mock_settings.return_value.app.log_level = "DEBUG"

            setup_logging(level="ERROR", json_logs=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert logging.getLogger(LOGGER_NAME).level == logging.ERROR

    def test_sets_package_log_level(self) -> None:
        """Test the configured level applies to the package logger only."""
        root_level = logging.getLogger().level
        with patch("graphweave.utils.logging.get_settings") as mock_settings:
            mock_settings.return_value.app.is_production = False
            mock_settings.return_value.app.log_level = "WARNING"

            setup_logging()

        assert logging.getLogger(LOGGER_NAME).level == logging.WARNING
        assert logging.getLogger().level == root_level

    def test_handler_added_once(self) -> None:
        """Test repeated setup does not duplicate output."""
        package_logger = logging.getLogger(LOGGER_NAME)
        package_logger.handlers = []

        setup_logging()
        setup_logging()

        assert len(package_logger.handlers) == 1

    @pytest.mark.parametrize(
        ("env", "renderer"),
        [
            ("development", structlog.dev.ConsoleRenderer),
            ("staging", structlog.dev.ConsoleRenderer),
            ("production", structlog.processors.JSONRenderer),
        ],
    )
    def test_renderer_follows_app_env(self, env: str, renderer: type) -> None:
        """Test only production settings switch to JSON output."""
        with patch.dict(os.environ, {"APP_ENV": env}):
            get_settings.cache_clear()
            try:
                setup_logging()
            finally:
                get_settings.cache_clear()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], renderer)


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_with_name(self) -> None:
        """Test get_logger with a module name."""
        logger = get_logger("graphweave.graph.engine")
        assert logger is not None

    def test_logger_accepts_structured_fields(self) -> None:
        """Test logging with keyword fields does not raise."""
        logger = get_logger("graphweave.test")
        logger.debug("Added nodes", graph_id="g0", count=2)
        logger.warning("Missing endpoint", node_id="n3")


class TestLogContext:
    """Tests for LogContext context manager."""

    def test_log_context_binds_variables(self) -> None:
        """Test that LogContext binds context variables for the block only."""
        with LogContext(graph_id="g0", operation="load"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx.get("graph_id") == "g0"
            assert ctx.get("operation") == "load"

        ctx = structlog.contextvars.get_contextvars()
        assert "graph_id" not in ctx
        assert "operation" not in ctx

    def test_log_context_nesting(self) -> None:
        """Test nested LogContext."""
        with LogContext(graph_id="g0"):
            with LogContext(node_id="n1"):
                ctx = structlog.contextvars.get_contextvars()
                assert ctx == {"graph_id": "g0", "node_id": "n1"}

            assert structlog.contextvars.get_contextvars() == {"graph_id": "g0"}


class TestContextHelpers:
    """Tests for bind_context, unbind_context and clear_context."""

    def test_bind_and_unbind(self) -> None:
        """Test binding then removing some fields."""
        bind_context(graph_id="g0", operation="save", file_path="g0.json")
        unbind_context("operation", "file_path")

        assert structlog.contextvars.get_contextvars() == {"graph_id": "g0"}

    def test_bind_overwrites(self) -> None:
        """Test that bind_context overwrites existing values."""
        bind_context(graph_id="g0")
        bind_context(graph_id="g1")

        assert structlog.contextvars.get_contextvars()["graph_id"] == "g1"

    def test_clear_context_removes_all(self) -> None:
        """Test that clear_context removes all variables."""
        bind_context(graph_id="g0", node_id="n0")
        clear_context()

        assert structlog.contextvars.get_contextvars() == {}
