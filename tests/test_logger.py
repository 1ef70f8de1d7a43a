#!/usr/bin/env python3

"""
Unit tests for logger module

Tests cover ColoredFormatter, setup_logger with different configurations,
and get_logger, using real logging infrastructure.
"""

import io
import logging
import sys
from pathlib import Path

import pytest

from intelforge.modules.logger import ColoredFormatter, get_logger, setup_logger


def make_record(level: int, msg: str = "message") -> logging.LogRecord:
    """Build a log record at the given level."""
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestColoredFormatter:
    """Test colored log formatting functionality."""

    @pytest.mark.parametrize(
        ("level", "color"),
        [
            (logging.DEBUG, "\033[36m"),
            (logging.INFO, "\033[32m"),
            (logging.WARNING, "\033[33m"),
            (logging.ERROR, "\033[31m"),
            (logging.CRITICAL, "\033[35m"),
        ],
    )
    def test_level_colors(self, level: int, color: str) -> None:
        """Each level name is wrapped in its color and a reset."""
        # Arrange: Create formatter and log record
        formatter = ColoredFormatter("%(levelname)s - %(message)s")
        record = make_record(level, "Colored message")

        # Act: Format the record
        formatted = formatter.format(record)

        # Assert: Color code, reset code and message are present
        assert color in formatted
        assert "\033[0m" in formatted
        assert "Colored message" in formatted

    def test_record_levelname_restored(self) -> None:
        """The record is left unchanged for other handlers."""
        formatter = ColoredFormatter("%(levelname)s - %(message)s")
        record = make_record(logging.WARNING)

        formatter.format(record)

        assert record.levelname == "WARNING"


class TestSetupLogger:
    """Test logger setup."""

    def test_default_name_and_level(self) -> None:
        """The default logger is 'intelforge' at INFO."""
        logger = setup_logger()

        assert logger.name == "intelforge"
        assert logger.level == logging.INFO

    def test_console_handler_on_stderr(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Console logging goes to stderr so stdout stays free for results."""
        stream = io.StringIO()
        monkeypatch.setattr(sys, "stderr", stream)

        logger = setup_logger(name="intelforge.test.console", level=logging.DEBUG)
        logger.debug("hello stderr")

        handlers = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(handlers) == 1
        assert "hello stderr" in stream.getvalue()
        # Not a TTY, so no color codes
        assert "\033[" not in stream.getvalue()

    def test_no_console_handler_when_disabled(self) -> None:
        """console=False gives a logger without handlers."""
        logger = setup_logger(name="intelforge.test.silent", console=False)

        assert logger.handlers == []

    def test_file_handler(self, tmp_path: Path) -> None:
        """A log file receives timestamped records."""
        log_file = tmp_path / "intelforge.log"
        logger = setup_logger(name="intelforge.test.file", log_file=log_file, console=False)

        logger.info("Written to file")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "Written to file" in content
        assert "intelforge.test.file - INFO" in content

    def test_existing_handlers_cleared(self) -> None:
        """Calling setup twice does not duplicate handlers."""
        setup_logger(name="intelforge.test.twice")
        logger = setup_logger(name="intelforge.test.twice")

        assert len(logger.handlers) == 1

    def test_level_applied_to_handlers(self, tmp_path: Path) -> None:
        """Handlers use the requested level."""
        logger = setup_logger(
            name="intelforge.test.level",
            level=logging.WARNING,
            log_file=tmp_path / "x.log",
        )

        assert all(handler.level == logging.WARNING for handler in logger.handlers)


class TestGetLogger:
    """Test logger lookup."""

    def test_get_logger_returns_same_instance(self) -> None:
        """get_logger returns the shared logger for a name."""
        assert get_logger("intelforge.modules.x") is logging.getLogger("intelforge.modules.x")

    def test_module_loggers_are_children(self) -> None:
        """Module loggers propagate to the 'intelforge' logger."""
        root = get_logger()
        child = get_logger("intelforge.modules.extractor")

        assert root.name == "intelforge"
        assert child.propagate
        assert child.name.startswith(root.name + ".")
