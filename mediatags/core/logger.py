"""
Logging configuration for mediatags.

This module sets up the logging system with multiple outputs:
    - Console: tqdm-compatible colored output
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - read_failures.log: Files whose tags could not be read, with the error

On import the library only attaches a NullHandler to its logger, so
nothing reaches stderr until the application asks for it. Applications
that want mediatags output call setup_logging() once at startup;
everything is attached to the "mediatags" logger so the host
application's own logging setup is left alone.

Log File Locations:
    Log files are only written when a log directory is given, either
    directly or through the 'logging.directory' configuration field.
    Each run creates new files with a timestamp in their name.

Usage:
    from mediatags.core.logger import setup_logging, get_logger

    setup_logging("DEBUG", log_dir=Path("~/logs").expanduser())
    logger = get_logger(__name__)

    logger.debug("Loading range [0, 9]")
    log_read_failure(logger, "song.mp3", error)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Root of the library's logger hierarchy
LOGGER_NAME = "mediatags"

# No output until setup_logging() is called
logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())

# Log file names (created in the log directory)
LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
READ_FAILURES_FILENAME = "read_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with colors.

        Args:
            record: The log record to format.

        Returns:
            Formatted string with ANSI color codes.
        """
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    Applications that scan many files usually wrap the loop in a tqdm
    bar. Plain stream handlers interleave with the bar's carriage
    returns; tqdm.write() prints the message above the active bar instead.

    Attributes:
        stream: The output stream (defaults to sys.stderr).

    Example:
        handler = TqdmLoggingHandler()
        handler.setFormatter(ColoredConsoleFormatter())
        logger.addHandler(handler)
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """
        Initialize the tqdm-compatible handler.

        Args:
            stream: Output stream for log messages. Defaults to stderr
                    which is where tqdm also writes by default.
        """
        super().__init__()
        self.stream = stream if stream is not None else sys.stderr

    def emit(self, record: logging.LogRecord) -> None:
        """
        Emit a log record using tqdm.write().

        Args:
            record: The log record to emit.
        """
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class ReadFailureHandler(logging.Handler):
    """
    Handler that captures failed tag reads for the read failure report.

    This handler listens for log records that carry read failure
    information and writes them to read_failures.log in a simple,
    human-readable format:

        /music/broken.mp3
        MalformedStructureError: ID3v2 tag size exceeds file size

        /music/empty.flac
        MissingRequiredBlockError: FLAC stream has no Vorbis comment block

    The handler looks for specific extra fields in log records:
        - 'read_failed_source': Description of the file that failed
        - 'read_failed_error_type': Exception class name
        - 'read_failed_error_message': Exception message

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the read_failures.log file.
        report_file: Open file handle (set by open()).
    """

    def __init__(self, report_path: Path) -> None:
        """
        Initialize the read failure handler.

        Args:
            report_path: Path to the report file. File will be created/overwritten.
        """
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after handler is created.
        File is opened in write mode (overwrites existing content).
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        """
        Write failure info to the report if present in the log record.

        Args:
            record: The log record to check and potentially write.
        """
        if not hasattr(record, "read_failed_source"):
            return

        if self.report_file is None:
            return

        try:
            source = getattr(record, "read_failed_source", "<unknown>")
            error_type = getattr(record, "read_failed_error_type", "Error")
            error_message = getattr(record, "read_failed_error_message", "")

            self.report_file.write(f"{source}\n")
            self.report_file.write(f"{error_type}: {error_message}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only passes ERROR and CRITICAL records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(level: str | int = "INFO", log_dir: Path | None = None) -> None:
    """
    Initialize the mediatags logging system.

    This function should be called once at application startup. Calling
    it again replaces the handlers installed by the previous call.

    Args:
        level: Console log level, as a name ("DEBUG") or a logging constant.
        log_dir: Optional directory for log files. Created if missing.
                 When None only the console handler is installed.

    Behavior:
        1. Set the "mediatags" logger to DEBUG and drop the handlers a
           previous call installed
        2. Add the colored tqdm console handler at the requested level
        3. If log_dir is given, add:
           - log_full_{timestamp}.log (DEBUG and above)
           - log_errors_{timestamp}.log (ERROR and above, via ErrorOnlyFilter)
           - read_failures_{timestamp}.log (ReadFailureHandler)

    Example:
        config = load_config()
        setup_logging(config.logging.level, config.logging.directory)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    library_logger = logging.getLogger(LOGGER_NAME)
    library_logger.setLevel(logging.DEBUG)
    _remove_handlers(library_logger)

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    library_logger.addHandler(console_handler)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    file_formatter = logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT)

    full_handler = logging.FileHandler(
        log_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(file_formatter)
    library_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(file_formatter)
    error_handler.addFilter(ErrorOnlyFilter())
    library_logger.addHandler(error_handler)

    failures_handler = ReadFailureHandler(log_dir / f"{READ_FAILURES_FILENAME}_{timestamp}.log")
    failures_handler.open()
    library_logger.addHandler(failures_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'mediatags.tags.id3v2'.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().

    Example:
        logger = get_logger(__name__)
        logger.warning("Skipping corrupt frame")
    """
    return logging.getLogger(name)


def log_read_failure(logger: logging.Logger, source: object, error: Exception) -> None:
    """
    Log a file whose tags could not be read.

    Logs an ERROR level message and attaches the extra fields that
    ReadFailureHandler uses to write read_failures.log.

    Args:
        logger: The logger to use for the message.
        source: The file that was being read (path, URL or reader object).
        error: The exception that aborted the read.

    Example:
        try:
            result = await reader.read()
        except MediaTagsError as e:
            log_read_failure(logger, path, e)
            raise
    """
    error_type = type(error).__name__
    logger.error(
        f"Failed to read tags from {source}: {error}",
        extra={
            "read_failed_source": str(source),
            "read_failed_error_type": error_type,
            "read_failed_error_message": str(error),
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove every handler installed by setup_logging().

    After calling this function the "mediatags" logger keeps only its
    NullHandler and records propagate to the application's own
    configuration.
    """
    _remove_handlers(logging.getLogger(LOGGER_NAME))


def _remove_handlers(target: logging.Logger) -> None:
    for handler in target.handlers[:]:
        if type(handler) is logging.NullHandler:
            continue
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        target.removeHandler(handler)
