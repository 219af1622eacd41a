"""
Byte sources for mediatags.

This module provides the byte-range loading layer the tag readers work on:
    - chunked_file_data: Sparse cache of loaded byte ranges
    - media_file_reader: Abstract byte source with typed binary reads
    - array_file_reader: In-memory byte source
    - local_file_reader: Local filesystem byte source
    - string_utils: Charset-aware string decoding
    - binary: Synchsafe integers and unsynchronisation

Usage:
    from mediatags.files import LocalFileReader

    reader = LocalFileReader("song.mp3")
    await reader.init()
    await reader.load_range(0, 9)
"""

from mediatags.files.array_file_reader import ArrayFileReader
from mediatags.files.chunked_file_data import Chunk, ChunkedFileData
from mediatags.files.local_file_reader import LocalFileReader
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.files.string_utils import DecodedString

__all__ = [
    "ArrayFileReader",
    "Chunk",
    "ChunkedFileData",
    "DecodedString",
    "LocalFileReader",
    "MediaFileReader",
]
