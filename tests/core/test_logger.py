"""Tests for logging utilities."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock

import pytest
from rich.logging import RichHandler

from discord_llm_bot.core.config import LoggingConfig
from discord_llm_bot.core.logger import (
    ROOT_LOGGER_NAME,
    get_logger,
    log_exception,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_handlers():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGetLogger:
    def test_returns_namespaced_logger(self):
        logger = get_logger("test_module")

        assert isinstance(logger, logging.Logger)
        assert logger.name == f"{ROOT_LOGGER_NAME}.test_module"

    def test_same_instance_for_same_name(self):
        assert get_logger("cached") is get_logger("cached")


class TestSetupLogging:
    def test_console_handler_is_rich(self):
        setup_logging(LoggingConfig(level="WARNING"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(handler, RichHandler) for handler in root.handlers)

    def test_file_handler_created(self, tmp_path):
        log_file = tmp_path / "logs" / "bot.log"

        setup_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))
        get_logger("file_test").info("hello file")

        root = logging.getLogger()
        assert any(isinstance(handler, RotatingFileHandler) for handler in root.handlers)
        for handler in root.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_existing_loggers_follow_new_level(self):
        logger = get_logger("level_test")

        setup_logging(LoggingConfig(level="ERROR"))

        assert logger.level == logging.ERROR

    def test_httpx_request_logs_quieted(self):
        setup_logging(LoggingConfig(level="DEBUG"))

        assert logging.getLogger("httpx").level == logging.WARNING


class TestLogException:
    def test_with_context(self):
        logger = MagicMock()
        exc = ValueError("bad")

        log_exception(logger, exc, "Parsing failed")

        logger.error.assert_called_once_with("%s: %s", "Parsing failed", exc, exc_info=exc)

    def test_without_context(self):
        logger = MagicMock()
        exc = RuntimeError("boom")

        log_exception(logger, exc)

        logger.error.assert_called_once_with("Exception occurred: %s", exc, exc_info=exc)
