"""
Exception classes for mediatags.

This module defines all custom exceptions used throughout the library.
Each exception is designed to provide a clear error message and to
distinguish between the different ways a tag read can fail.

Exception Hierarchy:
    MediaTagsError (base)
        ConfigError - Configuration file issues
        ByteSourceError - Byte source contract and transport issues
            NotInitializedError - Size queried before init()
            NotLoadedError - Byte read from a range that was never loaded
            ByteSourceIOError - Underlying disk/transport failure
        TagDecodeError - Tag data could not be decoded
            NoSuitableReaderError - No file or tag reader accepted the input
            MissingRequiredBlockError - A mandatory section is absent
            MalformedStructureError - Offsets/sizes are inconsistent
"""


class MediaTagsError(Exception):
    """
    Base exception for all mediatags errors.

    All custom exceptions in this library inherit from this class,
    allowing callers to catch every mediatags failure with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., offsets, paths).

    Example:
        try:
            result = await read_tags("song.mp3")
        except MediaTagsError as e:
            logger.error(f"Read failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'offset': Byte offset involved in the error
                     - 'file_path': File that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(MediaTagsError):
    """
    Raised when there's an issue with the configuration file.

    Common causes:
        - An explicitly requested mediatags.yaml does not exist
        - mediatags.yaml has invalid YAML syntax
        - Invalid field values (e.g., negative block size, unknown log level)
        - A configured tag reader name is not registered

    Example:
        raise ConfigError(
            "'file.block_size' must be a positive integer",
            details={'field': 'file.block_size', 'value': -1}
        )
    """
    pass


class ByteSourceError(MediaTagsError):
    """
    Base class for errors raised by a byte source (MediaFileReader).

    NotInitializedError and NotLoadedError signal sequencing mistakes
    by the caller and are never retried. ByteSourceIOError wraps the
    transport failure that aborted a range load.
    """
    pass


class NotInitializedError(ByteSourceError):
    """Raised when the size of a byte source is queried before init()."""
    pass


class NotLoadedError(ByteSourceError):
    """
    Raised when reading a byte whose range was never loaded.

    Reads from unloaded data always fail loudly instead of returning
    zero, so a parser that forgot a load_range() call is detected
    immediately.

    Attributes:
        offset: The offset that was requested.
    """

    def __init__(self, message: str, details: dict | None = None, offset: int | None = None) -> None:
        """
        Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            offset: The unloaded offset that was requested.
        """
        super().__init__(message, details)
        self.offset = offset


class ByteSourceIOError(ByteSourceError):
    """
    Raised when the underlying transport fails during init() or load_range().

    The error aborts the whole tag read. The library does not retry;
    callers may retry the complete operation.

    Example:
        raise ByteSourceIOError(
            f"Failed to read {path}: {e}",
            details={'file_path': str(path), 'original_error': str(e)}
        )
    """
    pass


class TagDecodeError(MediaTagsError):
    """Base class for errors raised while identifying or decoding tag data."""
    pass


class NoSuitableReaderError(TagDecodeError):
    """
    Raised when no registered reader accepts the input.

    This covers both levels of dispatch: no file reader can wrap the
    given object, or no tag reader recognizes the identifier bytes.
    """
    pass


class MissingRequiredBlockError(TagDecodeError):
    """
    Raised when a recognized format lacks a mandatory section.

    Example:
        A FLAC stream whose metadata chain carries no Vorbis comment block.
    """
    pass


class MalformedStructureError(TagDecodeError):
    """
    Raised when offsets or sizes in the tag data cannot be reconciled.

    Corruption local to one frame, atom or block is absorbed by the
    walkers and only logged. This error is raised for file-level
    problems such as an ID3v2 declared size larger than the file, and
    wraps unexpected decoding failures (IndexError, ValueError) so
    callers only ever see library exceptions.
    """
    pass
