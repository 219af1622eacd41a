"""
Tag format readers for mediatags.

This module provides one reader per supported tag format:
    - id3v1: ID3v1 / ID3v1.1 trailer (ID3v1TagReader)
    - id3v2: ID3v2.2 / 2.3 / 2.4 header tag (ID3v2TagReader, frames in id3v2_frames)
    - mp4: iTunes-style MP4 metadata atoms (MP4TagReader)
    - flac: FLAC Vorbis comment and picture blocks (FLACTagReader)
    - models: Result dataclasses shared by all readers

Usage:
    from mediatags.tags import ID3v2TagReader
    from mediatags.files import LocalFileReader

    result = await ID3v2TagReader(LocalFileReader("song.mp3")).read()
"""

from mediatags.tags.flac import FLACTagReader
from mediatags.tags.id3v1 import ID3v1TagReader
from mediatags.tags.id3v2 import ID3v2TagReader
from mediatags.tags.media_tag_reader import MediaTagReader
from mediatags.tags.models import (
    ByteRange,
    Frame,
    FrameFlags,
    TagHeader,
    TagHeaderFlags,
    TagResult,
)
from mediatags.tags.mp4 import MP4TagReader

__all__ = [
    # Readers
    "MediaTagReader",
    "ID3v1TagReader",
    "ID3v2TagReader",
    "MP4TagReader",
    "FLACTagReader",
    # Models
    "ByteRange",
    "Frame",
    "FrameFlags",
    "TagHeader",
    "TagHeaderFlags",
    "TagResult",
]
