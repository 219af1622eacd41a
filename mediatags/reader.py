"""
Format detection and the top-level read entry points.

Reading the tags of a file takes three steps:
    1. Wrap the input in a byte source: the first registered file reader
       whose can_read_file() accepts it (bytes -> ArrayFileReader,
       paths -> LocalFileReader). A MediaFileReader is used as given.
    2. Detect the format: load the identifier range of every candidate
       tag reader and pick the first one whose can_read_tag_format()
       accepts its bytes. Ranges near the start of the file and ranges
       near the end are coalesced, so detection costs at most two loads.
    3. Let the chosen tag reader load and decode its data.

Registries:
    Tag readers are registered by name; config.readers.tag_readers picks
    which ones are tried and in which order. File readers are tried in
    registration order.

Usage:
    result = await read_tags("song.mp3", tags=["title", "artist"])
    print(result.tags["title"])

    # Same, from synchronous code
    result = read_tags_sync("song.m4a")

    # Builder style
    result = await Reader(data).set_tags_to_read(["picture"]).read()
"""

import asyncio
from collections.abc import Iterable
from typing import Any

from mediatags.core.config import Config, default_config
from mediatags.core.exceptions import ConfigError, MediaTagsError, NoSuitableReaderError
from mediatags.core.logger import get_logger, log_read_failure
from mediatags.files.array_file_reader import ArrayFileReader
from mediatags.files.local_file_reader import LocalFileReader
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.tags.flac import FLACTagReader
from mediatags.tags.id3v1 import ID3v1TagReader
from mediatags.tags.id3v2 import ID3v2TagReader
from mediatags.tags.media_tag_reader import MediaTagReader
from mediatags.tags.models import ByteRange, TagResult
from mediatags.tags.mp4 import MP4TagReader

logger = get_logger(__name__)


_tag_readers: dict[str, type[MediaTagReader]] = {
    "id3v2": ID3v2TagReader,
    "id3v1": ID3v1TagReader,
    "mp4": MP4TagReader,
    "flac": FLACTagReader,
}

_file_readers: list[type[MediaFileReader]] = [
    ArrayFileReader,
    LocalFileReader,
]


def register_tag_reader(name: str, tag_reader_class: type[MediaTagReader]) -> None:
    """
    Make a tag reader available under name.

    The reader is only tried when name appears in the configured
    readers.tag_readers list.
    """
    _tag_readers[name] = tag_reader_class


def unregister_tag_reader(name: str) -> None:
    _tag_readers.pop(name, None)


def get_tag_reader(name: str) -> type[MediaTagReader]:
    """
    Look up a registered tag reader.

    Raises:
        ConfigError: If no reader is registered under name.
    """
    try:
        return _tag_readers[name]
    except KeyError:
        raise ConfigError(
            f"Unknown tag reader '{name}'",
            details={"field": "readers.tag_readers", "value": name, "known": sorted(_tag_readers)}
        ) from None


def register_file_reader(file_reader_class: type[MediaFileReader]) -> None:
    """Add a byte source backend, tried after the ones already registered."""
    if file_reader_class not in _file_readers:
        _file_readers.append(file_reader_class)


def unregister_file_reader(file_reader_class: type[MediaFileReader]) -> None:
    if file_reader_class in _file_readers:
        _file_readers.remove(file_reader_class)


def is_range_valid(byte_range: ByteRange, file_size: int) -> bool:
    """
    Check that an identifier range lies inside the file.

    Negative offsets count back from the end of the file.
    """
    if byte_range.length <= 0:
        return False
    if byte_range.offset >= 0:
        return byte_range.offset + byte_range.length <= file_size
    return -byte_range.offset <= file_size and byte_range.offset + byte_range.length <= 0


def _resolve_offset(byte_range: ByteRange, file_size: int) -> int:
    return byte_range.offset if byte_range.offset >= 0 else file_size + byte_range.offset


class Reader:
    """
    Reads the tags of one file.

    Attributes:
        file: The input: bytes-like data, a path, or a MediaFileReader.
        config: Configuration providing the tag reader order, the default
                tag filter and the local file block size.

    Example:
        reader = Reader(Path("song.flac"), config=load_config())
        result = await reader.set_tags_to_read(["title"]).read()
    """

    def __init__(self, file: Any, config: Config | None = None) -> None:
        self.file = file
        self.config = config or default_config()
        self._tags_to_read: list[str] | None = (
            list(self.config.readers.tags) if self.config.readers.tags is not None else None
        )
        self._file_reader_class: type[MediaFileReader] | None = None
        self._tag_reader_class: type[MediaTagReader] | None = None

    def set_tags_to_read(self, tags: Iterable[str] | None) -> "Reader":
        """Restrict the result to these field ids/shortcuts (None = all)."""
        self._tags_to_read = list(tags) if tags is not None else None
        return self

    def set_file_reader(self, file_reader_class: type[MediaFileReader]) -> "Reader":
        """Force a byte source backend instead of picking one from the registry."""
        self._file_reader_class = file_reader_class
        return self

    def set_tag_reader(self, tag_reader_class: type[MediaTagReader]) -> "Reader":
        """Force a tag reader, skipping format detection."""
        self._tag_reader_class = tag_reader_class
        return self

    async def read(self) -> TagResult:
        """
        Detect the format and decode the tags.

        Returns:
            TagResult: The decoded tags.

        Raises:
            NoSuitableReaderError: If no file or tag reader accepts the input.
            ByteSourceError: If the byte source fails (I/O errors included).
            TagDecodeError: If the tag data cannot be decoded.
            ConfigError: If the configuration names an unknown tag reader.

        Behavior:
            Every failure is also reported through log_read_failure() so
            it lands in the read failure log when file logging is set up.
        """
        try:
            file_reader = self._get_file_reader()
            await file_reader.init()

            tag_reader_class = self._tag_reader_class or await self._find_tag_reader(file_reader)
            logger.debug(f"Reading {self.file!r} with {tag_reader_class.__name__}")

            tag_reader = tag_reader_class(file_reader)
            tag_reader.set_tags_to_read(self._tags_to_read)
            return await tag_reader.read()
        except MediaTagsError as e:
            log_read_failure(logger, self.file, e)
            raise

    def _get_file_reader(self) -> MediaFileReader:
        if isinstance(self.file, MediaFileReader):
            return self.file

        file_reader_class = self._file_reader_class
        if file_reader_class is None:
            for candidate in _file_readers:
                if candidate.can_read_file(self.file):
                    file_reader_class = candidate
                    break
            else:
                raise NoSuitableReaderError(
                    f"No file reader can read {type(self.file).__name__} input",
                    details={"file": repr(self.file)[:200]}
                )

        if issubclass(file_reader_class, LocalFileReader):
            return file_reader_class(self.file, block_size=self.config.file.block_size)
        return file_reader_class(self.file)

    def _get_tag_reader_candidates(self) -> list[type[MediaTagReader]]:
        return [get_tag_reader(name) for name in self.config.readers.tag_readers]

    async def _find_tag_reader(self, file_reader: MediaFileReader) -> type[MediaTagReader]:
        """
        Pick the first candidate whose identifier bytes match.

        Raises:
            NoSuitableReaderError: If no candidate recognizes the file.
        """
        candidates = self._get_tag_reader_candidates()
        file_size = file_reader.get_size()

        start_ranges = []
        end_ranges = []
        for tag_reader_class in candidates:
            byte_range = tag_reader_class.get_tag_identifier_byte_range()
            if not is_range_valid(byte_range, file_size):
                continue
            if (0 <= byte_range.offset < file_size / 2) or (byte_range.offset < 0 and byte_range.offset < -file_size / 2):
                start_ranges.append(byte_range)
            else:
                end_ranges.append(byte_range)

        for ranges in (start_ranges, end_ranges):
            if not ranges:
                continue
            start = min(_resolve_offset(r, file_size) for r in ranges)
            end = max(_resolve_offset(r, file_size) + r.length - 1 for r in ranges)
            await file_reader.load_range(start, end)

        for tag_reader_class in candidates:
            byte_range = tag_reader_class.get_tag_identifier_byte_range()
            if not is_range_valid(byte_range, file_size):
                continue
            tag_identifier = file_reader.get_bytes_at(_resolve_offset(byte_range, file_size), byte_range.length)
            if tag_reader_class.can_read_tag_format(tag_identifier):
                return tag_reader_class

        raise NoSuitableReaderError(
            "No suitable tag reader found",
            details={"file": repr(self.file)[:200], "tried": [c.__name__ for c in candidates]}
        )


async def read_tags(file: Any, tags: Iterable[str] | None = None, config: Config | None = None) -> TagResult:
    """
    Read the tags of a file.

    Args:
        file: Bytes-like data, a local path, or a MediaFileReader.
        tags: Field ids/shortcuts to read. None falls back to the
              configured default (everything unless configured).
        config: Optional configuration; defaults apply when None.

    Returns:
        TagResult: The decoded tags.
    """
    reader = Reader(file, config)
    if tags is not None:
        reader.set_tags_to_read(tags)
    return await reader.read()


def read_tags_sync(file: Any, tags: Iterable[str] | None = None, config: Config | None = None) -> TagResult:
    """Blocking wrapper around read_tags() for code without an event loop."""
    return asyncio.run(read_tags(file, tags, config))
