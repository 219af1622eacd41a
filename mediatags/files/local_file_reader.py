"""
Byte source for files on the local filesystem.

Only the ranges requested by the tag readers are read from disk. Every
read is rounded up to the configured block size (capped at the end of
the file), which lets the handful of small header reads a tag reader
issues be served by one disk read. Reads run in a worker thread so the
event loop is never blocked on disk I/O.
"""

import asyncio
import os
import re
from pathlib import Path
from typing import Any

from mediatags.core.config import DEFAULT_BLOCK_SIZE
from mediatags.core.exceptions import ByteSourceIOError
from mediatags.core.logger import get_logger
from mediatags.files.chunked_file_data import ChunkedFileData
from mediatags.files.media_file_reader import MediaFileReader, check_read_length

logger = get_logger(__name__)


# Strings like "http://..." are URLs, not local paths
URL_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


class LocalFileReader(MediaFileReader):
    """
    Byte source reading ranges of a local file on demand.

    Attributes:
        path: The file being read.
        block_size: Minimum number of bytes fetched per disk read.
    """

    def __init__(self, path: str | os.PathLike, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        super().__init__()
        self.path = Path(path)
        self.block_size = max(1, block_size)
        self._file_data = ChunkedFileData()

    @classmethod
    def can_read_file(cls, file: Any) -> bool:
        if isinstance(file, os.PathLike):
            return True
        return isinstance(file, str) and not URL_PATTERN.match(file)

    async def _init(self) -> None:
        try:
            stat = await asyncio.to_thread(self.path.stat)
        except OSError as e:
            raise ByteSourceIOError(
                f"Failed to open {self.path}: {e}",
                details={"file_path": str(self.path), "original_error": str(e)}
            ) from e
        self._size = stat.st_size

    async def load_range(self, start: int, end: int) -> None:
        """
        Read [start, end] from disk unless it is already loaded.

        Args:
            start: First offset to load (inclusive).
            end: Last offset to load (inclusive). Clamped to the file size.

        Raises:
            ByteSourceIOError: If the file cannot be read.
        """
        size = self.get_size()
        start = max(0, start)
        end = min(end, size - 1)
        if start > end or self._file_data.has_data_range(start, end):
            return

        length = end - start + 1
        length = -(-length // self.block_size) * self.block_size
        length = min(length, size - start)

        logger.debug(f"Reading [{start}, {start + length - 1}] from {self.path}")
        try:
            data = await asyncio.to_thread(self._read, start, length)
        except OSError as e:
            raise ByteSourceIOError(
                f"Failed to read {self.path}: {e}",
                details={
                    "file_path": str(self.path),
                    "offset": start,
                    "length": length,
                    "original_error": str(e),
                }
            ) from e
        self._file_data.add_data(start, data)

    def _read(self, start: int, length: int) -> bytes:
        with open(self.path, "rb") as f:
            f.seek(start)
            return f.read(length)

    def get_byte_at(self, offset: int) -> int:
        return self._file_data.get_byte_at(offset)

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        check_read_length(offset, length)
        return self._file_data.get_bytes_at(offset, length)
