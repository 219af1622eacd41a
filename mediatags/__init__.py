"""
mediatags: read ID3, MP4 and FLAC metadata from audio files.

This package extracts tags (title, artist, album, cover art, ...) from
audio files without loading them whole: every tag reader asks its byte
source for exactly the ranges it needs.

Supported formats:
    - ID3v1 / ID3v1.1 (128-byte trailer)
    - ID3v2.2, ID3v2.3, ID3v2.4 (including unsynchronisation, chapters)
    - MP4 / M4A iTunes-style metadata atoms
    - FLAC Vorbis comments and pictures

Architecture:
    files/      - Byte sources: range cache, typed reads, in-memory and local file backends
    tags/       - One reader per tag format, plus the result models
    reader.py   - Format detection and the read_tags() entry points
    core/       - Configuration, logging, exceptions

Usage:
    import asyncio
    from mediatags import read_tags

    result = asyncio.run(read_tags("song.mp3"))
    print(result.type, result.version)
    print(result.tags["title"], result.tags["artist"])

    # Only some fields; shortcuts expand to the format's own field ids
    result = asyncio.run(read_tags("song.m4a", tags=["title", "picture"]))

Shortcuts:
    title, artist, album, year, comment, track, genre, picture, lyrics
"""

__version__ = "1.0.0"

from mediatags.core.config import Config, default_config, load_config
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
from mediatags.core.logger import get_logger, setup_logging, shutdown_logging
from mediatags.files import ArrayFileReader, LocalFileReader, MediaFileReader
from mediatags.reader import (
    Reader,
    read_tags,
    read_tags_sync,
    register_file_reader,
    register_tag_reader,
    unregister_file_reader,
    unregister_tag_reader,
)
from mediatags.tags import (
    FLACTagReader,
    Frame,
    ID3v1TagReader,
    ID3v2TagReader,
    MediaTagReader,
    MP4TagReader,
    TagResult,
)

__all__ = [
    # Entry points
    "Reader",
    "read_tags",
    "read_tags_sync",
    "register_tag_reader",
    "unregister_tag_reader",
    "register_file_reader",
    "unregister_file_reader",
    # Byte sources
    "MediaFileReader",
    "ArrayFileReader",
    "LocalFileReader",
    # Tag readers and results
    "MediaTagReader",
    "ID3v1TagReader",
    "ID3v2TagReader",
    "MP4TagReader",
    "FLACTagReader",
    "TagResult",
    "Frame",
    # Config and logging
    "Config",
    "default_config",
    "load_config",
    "setup_logging",
    "get_logger",
    "shutdown_logging",
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
]
