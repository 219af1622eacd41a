"""
Sparse in-memory cache of the loaded byte ranges of a file.

A byte source only loads the ranges the tag readers ask for. This module
keeps those ranges as a sorted list of chunks and merges new data into
it, so that each chunk is a maximal contiguous loaded region:

    - chunks are in ascending offset order
    - no two chunks overlap
    - no two chunks are adjacent (touching ranges are merged)

The number of chunks per file is small (a handful of header reads plus
one or two tag bodies), so lookups are linear scans.

Usage:
    data = ChunkedFileData()
    data.add_data(0, b"ID3\\x04\\x00")
    data.add_data(5, b"\\x00\\x00\\x00\\x00\\x0a")
    data.has_data_range(0, 9)  # True, the two reads were merged
    data.get_byte_at(3)        # 4
"""

from dataclasses import dataclass

from mediatags.core.exceptions import NotLoadedError


NOT_FOUND = -1


@dataclass(frozen=True)
class Chunk:
    """
    One contiguous loaded region.

    Attributes:
        offset: File offset of the first byte.
        data: The bytes loaded at that offset.
    """
    offset: int
    data: bytes

    @property
    def end(self) -> int:
        """Offset of the last byte (inclusive)."""
        return self.offset + len(self.data) - 1


class ChunkedFileData:
    """
    Ordered, merged collection of loaded chunks.

    Attributes:
        chunks: Read-only view of the current chunks, in offset order.
    """

    def __init__(self) -> None:
        self._file_data: list[Chunk] = []

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        return tuple(self._file_data)

    def add_data(self, offset: int, data: bytes | bytearray | memoryview) -> None:
        """
        Insert data covering [offset, offset + len(data) - 1].

        Existing chunks that overlap or touch the new range are replaced
        by a single chunk made of the part of the first chunk before the
        new data, the new data, and the part of the last chunk after it.
        Newly added bytes win over previously loaded ones.

        Args:
            offset: File offset of the first byte of data.
            data: The loaded bytes. Empty data is ignored.
        """
        data = bytes(data)
        if not data:
            return

        offset_end = offset + len(data) - 1
        start_ix, end_ix, insert_ix = self._get_chunk_range(offset, offset_end)

        if start_ix == NOT_FOUND:
            self._file_data.insert(insert_ix, Chunk(offset, data))
            return

        first_chunk = self._file_data[start_ix]
        last_chunk = self._file_data[end_ix]

        merged = data
        if offset > first_chunk.offset:
            merged = first_chunk.data[:offset - first_chunk.offset] + merged
        if offset_end < last_chunk.end:
            merged = merged + last_chunk.data[offset_end + 1 - last_chunk.offset:]

        new_chunk = Chunk(min(offset, first_chunk.offset), merged)
        self._file_data[start_ix:end_ix + 1] = [new_chunk]

    def _get_chunk_range(self, offset_start: int, offset_end: int) -> tuple[int, int, int]:
        """
        Find the span of chunks touching [offset_start, offset_end].

        Returns:
            (start_ix, end_ix, insert_ix). start_ix and end_ix are the
            indexes of the first and last overlapping-or-adjacent chunks,
            or NOT_FOUND when there are none; insert_ix is then the
            position that keeps the list sorted.
        """
        start_ix = NOT_FOUND
        end_ix = NOT_FOUND
        insert_ix = len(self._file_data)

        for i, chunk in enumerate(self._file_data):
            if offset_end < chunk.offset - 1:
                # The new range ends before this chunk and doesn't touch it
                insert_ix = i
                break
            if offset_start <= chunk.end + 1:
                start_ix = i
                break

        if start_ix == NOT_FOUND:
            return start_ix, end_ix, insert_ix

        end_ix = start_ix
        for i in range(start_ix, len(self._file_data)):
            chunk = self._file_data[i]
            if offset_end >= chunk.offset - 1:
                end_ix = i
            if offset_end <= chunk.end + 1:
                break

        return start_ix, end_ix, insert_ix

    def has_data_range(self, offset_start: int, offset_end: int) -> bool:
        """
        Check whether a single chunk covers [offset_start, offset_end].

        Coverage split across two chunks with a gap between them does
        not count.
        """
        for chunk in self._file_data:
            if offset_end < chunk.offset:
                return False
            if chunk.offset <= offset_start and offset_end <= chunk.end:
                return True
        return False

    def get_byte_at(self, offset: int) -> int:
        """
        Return the byte at offset.

        Raises:
            NotLoadedError: If no chunk contains offset.
        """
        chunk = self._find_chunk(offset, offset)
        return chunk.data[offset - chunk.offset]

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        """
        Return length bytes starting at offset, sliced from a single chunk.

        Raises:
            NotLoadedError: If no single chunk contains the whole range.
        """
        if length <= 0:
            return b""
        chunk = self._find_chunk(offset, offset + length - 1)
        start = offset - chunk.offset
        return chunk.data[start:start + length]

    def _find_chunk(self, offset_start: int, offset_end: int) -> Chunk:
        for chunk in self._file_data:
            if chunk.offset <= offset_start and offset_end <= chunk.end:
                return chunk
        raise NotLoadedError(
            f"Offset {offset_start} hasn't been loaded yet.",
            details={"offset": offset_start, "end": offset_end},
            offset=offset_start
        )
