"""
Tests for logging configuration module.
"""

import logging
import sys

import pytest

from cli_check.common import vlog
from cli_check.logging_config import (
    LOGGER_NAME,
    ColoredFormatter,
    get_logger,
    setup_logging,
)


def make_record(level=logging.INFO, msg="Test message"):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


def console_handlers(logger):
    return [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        """Test default logging setup."""
        logger = setup_logging()
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.WARNING

    def test_setup_logging_verbose(self):
        """Test verbose logging enables DEBUG level."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_quiet(self):
        """Test quiet mode suppresses console output."""
        logger = setup_logging(quiet=True)
        assert logger.level == logging.ERROR
        assert console_handlers(logger) == []

    def test_console_writes_to_stderr(self):
        """Test console output stays off stdout."""
        logger = setup_logging()
        handlers = console_handlers(logger)
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr

    def test_repeated_setup_replaces_handlers(self):
        """Test handlers do not accumulate across calls."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_setup_logging_with_file(self, tmp_path):
        """Test logging to file."""
        log_file = tmp_path / "test.log"
        logger = setup_logging(log_file=str(log_file))

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1

        logger.debug("Debug message")
        for handler in file_handlers:
            handler.flush()

        # The file records debug output even though the console does not
        assert "Debug message" in log_file.read_text(encoding="utf-8")
        assert console_handlers(logger)[0].level == logging.WARNING

    def test_setup_logging_creates_log_directory(self, tmp_path):
        """Test that log directory is created if it doesn't exist."""
        log_file = tmp_path / "subdir" / "test.log"
        logger = setup_logging(log_file=str(log_file))

        logger.warning("Test")
        assert log_file.exists()

    @pytest.mark.parametrize("level,expected", [
        ("INFO", logging.INFO),
        ("error", logging.ERROR),
    ])
    def test_setup_logging_custom_level(self, level, expected):
        """Test custom log level."""
        logger = setup_logging(level=level)
        assert logger.level == expected


class TestGetLogger:
    """Test logger retrieval."""

    def test_get_logger_returns_instance(self):
        """Test get_logger returns logger instance."""
        assert isinstance(get_logger(), logging.Logger)

    def test_get_logger_singleton(self):
        """Test get_logger returns same instance."""
        assert get_logger() is get_logger()


class TestColoredFormatter:
    """Test colored log formatter."""

    def test_colored_formatter_with_colors(self):
        """Test formatter with colors enabled."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=True)
        formatted = formatter.format(make_record())
        assert "Test message" in formatted
        assert "\033[32mINFO\033[0m" in formatted

    def test_colored_formatter_without_colors(self):
        """Test formatter with colors disabled."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=False)
        formatted = formatter.format(make_record())
        assert formatted == "INFO Test message"

    @pytest.mark.parametrize("level", [
        logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL,
    ])
    def test_colored_formatter_all_levels(self, level):
        """Test formatter with all log levels."""
        formatter = ColoredFormatter("%(levelname_colored)s", use_colors=True)
        formatted = formatter.format(make_record(level, "Test"))
        assert logging.getLevelName(level) in formatted


class TestVlog:
    """Test verbose logging helper."""

    def test_vlog_with_verbose(self, caplog, monkeypatch):
        """Test vlog logs at debug level when verbose."""
        monkeypatch.delenv("CLI_CHECK_DEBUG", raising=False)
        setup_logging(level="DEBUG", propagate=True)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            vlog("Test vlog message", verbose=True)
        assert "Test vlog message" in caplog.text

    def test_vlog_respects_verbose_flag(self, caplog, monkeypatch):
        """Test vlog is silent without verbose."""
        monkeypatch.delenv("CLI_CHECK_DEBUG", raising=False)
        setup_logging(level="DEBUG", propagate=True)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            vlog("Should not appear", verbose=False)
        assert "Should not appear" not in caplog.text

    def test_vlog_debug_environment(self, caplog, monkeypatch):
        """Test CLI_CHECK_DEBUG=1 enables vlog."""
        monkeypatch.setenv("CLI_CHECK_DEBUG", "1")
        setup_logging(level="DEBUG", propagate=True)
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            vlog("Debug via env")
        assert "Debug via env" in caplog.text
