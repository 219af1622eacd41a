"""Tests for logging setup"""

import io
import logging

from mediatags.core.exceptions import MissingRequiredBlockError
from mediatags.core.logger import (
    LOGGER_NAME,
    ColoredConsoleFormatter,
    Colors,
    TqdmLoggingHandler,
    get_logger,
    log_read_failure,
    setup_logging,
    shutdown_logging,
)


def installed_handlers() -> list[logging.Handler]:
    """Handlers on the library logger other than its NullHandler"""
    return [
        handler for handler in logging.getLogger(LOGGER_NAME).handlers
        if type(handler) is not logging.NullHandler
    ]


class TestConsole:
    """Test console output"""

    def test_colored_formatter(self):
        record = logging.LogRecord("mediatags", logging.WARNING, __file__, 1, "careful", None, None)
        formatted = ColoredConsoleFormatter().format(record)
        assert formatted == f"{Colors.YELLOW}WARNING{Colors.RESET}: careful"

    def test_tqdm_handler_writes_to_stream(self):
        stream = io.StringIO()
        handler = TqdmLoggingHandler(stream)
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))

        logger = logging.getLogger("mediatags.test_console")
        logger.addHandler(handler)
        try:
            logger.warning("hello")
        finally:
            logger.removeHandler(handler)

        assert stream.getvalue() == "WARNING hello\n"


class TestSetupLogging:
    """Test handler installation and removal"""

    def test_console_only(self):
        setup_logging("warning")
        handlers = installed_handlers()

        assert len(handlers) == 1
        assert isinstance(handlers[0], TqdmLoggingHandler)
        assert handlers[0].level == logging.WARNING

    def test_repeated_setup_replaces_handlers(self, temp_dir):
        setup_logging("INFO", temp_dir)
        setup_logging("INFO")
        assert len(installed_handlers()) == 1

    def test_log_files(self, temp_dir):
        log_dir = temp_dir / "logs"
        setup_logging("INFO", log_dir)

        logger = get_logger("mediatags.tags.flac")
        logger.debug("walking blocks")
        log_read_failure(logger, "/music/empty.flac", MissingRequiredBlockError("FLAC stream has no Vorbis comment block"))
        shutdown_logging()

        full_log = next(log_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        errors_log = next(log_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        failures_log = next(log_dir.glob("read_failures_*.log")).read_text(encoding="utf-8")

        assert "walking blocks" in full_log
        assert "Failed to read tags from /music/empty.flac" in full_log
        assert "walking blocks" not in errors_log
        assert "Failed to read tags from /music/empty.flac" in errors_log
        assert failures_log == (
            "/music/empty.flac\n"
            "MissingRequiredBlockError: FLAC stream has no Vorbis comment block\n\n"
        )

    def test_shutdown_removes_handlers(self, temp_dir):
        setup_logging("INFO", temp_dir)
        shutdown_logging()
        assert installed_handlers() == []
        assert any(type(handler) is logging.NullHandler for handler in logging.getLogger(LOGGER_NAME).handlers)


class TestDefaultHandler:
    """Test logging before setup_logging() is called"""

    def test_nothing_reaches_last_resort_handler(self):
        stream = io.StringIO()
        library_logger = logging.getLogger(LOGGER_NAME)
        last_resort = logging.lastResort
        logging.lastResort = logging.StreamHandler(stream)
        library_logger.propagate = False
        try:
            get_logger("mediatags.tags.id3v2").warning("Skipping unreadable frame")
        finally:
            library_logger.propagate = True
            logging.lastResort = last_resort

        assert stream.getvalue() == ""
