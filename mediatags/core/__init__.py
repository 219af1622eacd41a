"""
Core module for mediatags.

This module provides the foundational components used throughout the library:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console, file and failure-report outputs

Usage:
    from mediatags.core import (
        Config, load_config,
        setup_logging, get_logger,
        MediaTagsError, ConfigError
    )
"""

from mediatags.core.config import (
    Config,
    FileConfig,
    LoggingConfig,
    ReadersConfig,
    default_config,
    load_config,
)
from mediatags.core.exceptions import (
    ByteSourceError,
    ByteSourceIOError,
    ConfigError,
    MalformedStructureError,
    MediaTagsError,
    MissingRequiredBlockError,
    NoSuitableReaderError,
    NotInitializedError,
    NotLoadedError,
    TagDecodeError,
)
from mediatags.core.logger import (
    get_logger,
    log_read_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "ReadersConfig",
    "FileConfig",
    "LoggingConfig",
    "default_config",
    "load_config",
    # Exceptions
    "MediaTagsError",
    "ConfigError",
    "ByteSourceError",
    "NotInitializedError",
    "NotLoadedError",
    "ByteSourceIOError",
    "TagDecodeError",
    "NoSuitableReaderError",
    "MissingRequiredBlockError",
    "MalformedStructureError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_read_failure",
    "shutdown_logging",
]
