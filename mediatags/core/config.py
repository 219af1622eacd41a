"""
Configuration management for mediatags.

This module handles loading, validating, and providing access to the
library configuration stored in mediatags.yaml.

The configuration file contains:
    - Tag reader order used for format detection
    - An optional default list of tags to read
    - Read granularity for local files
    - Logging level and optional log directory

Configuration File Location:
    By default mediatags.yaml is looked up in the current working
    directory. The file is optional: when it is absent the built-in
    defaults are used.

Example mediatags.yaml:
    readers:
      tag_readers: [id3v2, id3v1, mp4, flac]
      tags: null  # Optional: e.g. [title, artist, picture]

    file:
      block_size: 1024

    logging:
      level: INFO
      directory: null  # Optional: write log files here
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mediatags.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "mediatags.yaml"

# Registration order of the built-in tag readers
DEFAULT_TAG_READERS = ("id3v2", "id3v1", "mp4", "flac")

DEFAULT_BLOCK_SIZE = 1024

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ReadersConfig:
    """
    Format detection configuration.

    Attributes:
        tag_readers: Names of the tag readers to try, in order. The first
                     reader whose identifier bytes match wins, so the
                     order matters when a file carries several tag formats
                     (e.g. ID3v2 at the start and ID3v1 at the end).
        tags: Default tag names/shortcuts to read, or None for all tags.
    """
    tag_readers: tuple[str, ...]
    tags: tuple[str, ...] | None


@dataclass(frozen=True)
class FileConfig:
    """
    Local file access configuration.

    Attributes:
        block_size: Reads from local files are rounded up to this many
                    bytes, so several small neighbouring loads are served
                    by a single read. Default: 1024.
    """
    block_size: int


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        directory: Directory for log files, or None for console-only logging.
                   Path expansion is performed (~ is expanded to home directory).
    """
    level: str
    directory: Path | None


@dataclass(frozen=True)
class Config:
    """
    Complete library configuration.

    This is the main configuration object that aggregates all configuration
    sections. It is created by load_config() or default_config() and is
    immutable (frozen dataclass).

    Attributes:
        readers: Format detection settings.
        file: Local file access settings.
        logging: Logging settings.

    Example:
        config = load_config()
        print(f"Tag readers: {config.readers.tag_readers}")
        print(f"Block size: {config.file.block_size}")
    """
    readers: ReadersConfig
    file: FileConfig
    logging: LoggingConfig


def default_config() -> Config:
    """
    Build the configuration used when no mediatags.yaml is present.

    Returns:
        Config: Built-in defaults (all four readers, no tag filter,
                1024-byte blocks, INFO console logging, no log files).
    """
    return Config(
        readers=ReadersConfig(tag_readers=DEFAULT_TAG_READERS, tags=None),
        file=FileConfig(block_size=DEFAULT_BLOCK_SIZE),
        logging=LoggingConfig(level="INFO", directory=None),
    )


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from mediatags.yaml.

    This function reads the YAML configuration file, validates the fields
    that are present, applies defaults for the ones that are not, and
    returns a frozen Config object.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for mediatags.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the file has
                     invalid YAML syntax, or it contains invalid values.
                     The error message will indicate the specific problem.

    Behavior:
        1. Locate config file (explicit path or CWD/mediatags.yaml)
        2. Fall back to default_config() if the implicit file is missing
        3. Read and parse YAML content
        4. Validate structure (sections are dictionaries)
        5. Parse each section with defaults applied
        6. Create and return frozen Config object

    Example:
        try:
            config = load_config()
        except ConfigError as e:
            print(f"Configuration error: {e.message}")
            sys.exit(1)
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file is a valid "use the defaults" configuration
    if raw_config is None:
        return default_config()

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    return Config(
        readers=_parse_readers_config(raw_config.get("readers")),
        file=_parse_file_config(raw_config.get("file")),
        logging=_parse_logging_config(raw_config.get("logging")),
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate that every known section present is a dictionary.

    Args:
        raw_config: Dictionary parsed from mediatags.yaml.

    Raises:
        ConfigError: If a section has the wrong type.
    """
    for section in ("readers", "file", "logging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_name_list(raw_value: Any, field: str) -> tuple[str, ...]:
    """Validate a YAML list of non-empty strings."""
    if not isinstance(raw_value, list) or not all(
        isinstance(item, str) and item.strip() for item in raw_value
    ):
        raise ConfigError(
            f"'{field}' must be a list of non-empty strings",
            details={"field": field, "value": raw_value}
        )
    return tuple(item.strip() for item in raw_value)


def _parse_readers_config(readers_section: dict[str, Any] | None) -> ReadersConfig:
    """
    Parse and validate the readers configuration section.

    Args:
        readers_section: The 'readers' section from mediatags.yaml, or None.

    Returns:
        ReadersConfig: Validated reader settings with defaults applied.

    Raises:
        ConfigError: If tag_readers is empty or not a list of names,
                     or tags is neither null nor a list of names.
    """
    tag_readers = DEFAULT_TAG_READERS
    tags = None

    if readers_section is not None:
        raw_readers = readers_section.get("tag_readers")
        if raw_readers is not None:
            tag_readers = _parse_name_list(raw_readers, "readers.tag_readers")
            if not tag_readers:
                raise ConfigError(
                    "'readers.tag_readers' must name at least one tag reader",
                    details={"field": "readers.tag_readers"}
                )

        raw_tags = readers_section.get("tags")
        if raw_tags is not None:
            tags = _parse_name_list(raw_tags, "readers.tags")

    return ReadersConfig(tag_readers=tag_readers, tags=tags)


def _parse_file_config(file_section: dict[str, Any] | None) -> FileConfig:
    """
    Parse and validate the file configuration section.

    Args:
        file_section: The 'file' section from mediatags.yaml, or None.

    Returns:
        FileConfig: Validated file settings. Default block_size: 1024

    Raises:
        ConfigError: If block_size is not a positive integer.
    """
    block_size = DEFAULT_BLOCK_SIZE

    if file_section is not None:
        raw_block_size = file_section.get("block_size")
        if raw_block_size is not None:
            # bool is an int subclass, reject it explicitly
            if isinstance(raw_block_size, bool) or not isinstance(raw_block_size, int) or raw_block_size < 1:
                raise ConfigError(
                    "'file.block_size' must be a positive integer",
                    details={"field": "file.block_size", "value": raw_block_size}
                )
            block_size = raw_block_size

    return FileConfig(block_size=block_size)


def _parse_logging_config(logging_section: dict[str, Any] | None) -> LoggingConfig:
    """
    Parse and validate the logging configuration section.

    Args:
        logging_section: The 'logging' section from mediatags.yaml, or None.

    Returns:
        LoggingConfig: Validated logging settings with expanded directory path.

    Raises:
        ConfigError: If level is not a known level name or directory
                     is not a string.
    """
    level = "INFO"
    directory = None

    if logging_section is not None:
        raw_level = logging_section.get("level")
        if raw_level is not None:
            if not isinstance(raw_level, str) or raw_level.upper() not in VALID_LOG_LEVELS:
                raise ConfigError(
                    f"'logging.level' must be one of {', '.join(VALID_LOG_LEVELS)}",
                    details={"field": "logging.level", "value": raw_level}
                )
            level = raw_level.upper()

        raw_directory = logging_section.get("directory")
        if raw_directory is not None:
            if not isinstance(raw_directory, str) or not raw_directory.strip():
                raise ConfigError(
                    "'logging.directory' must be a non-empty string path or null",
                    details={"field": "logging.directory"}
                )
            directory = Path(raw_directory.strip()).expanduser().resolve()

    return LoggingConfig(level=level, directory=directory)

