"""In-memory byte source for data that is already fully resident."""

from typing import Any

from mediatags.core.exceptions import NotLoadedError
from mediatags.files.media_file_reader import MediaFileReader, check_read_length


class ArrayFileReader(MediaFileReader):
    """
    Byte source over a bytes-like object.

    The whole buffer is available from construction on, so the reader
    is initialized immediately and load_range() does nothing. The ID3v2
    reader also uses it to hold de-unsynchronised tag and frame bodies.

    Example:
        reader = ArrayFileReader(Path("song.mp3").read_bytes())
        result = await Reader(reader).read()
    """

    def __init__(self, array: bytes | bytearray | memoryview) -> None:
        super().__init__()
        self._array = bytes(array)
        self._size = len(self._array)
        self._is_initialized = True

    @classmethod
    def can_read_file(cls, file: Any) -> bool:
        return isinstance(file, (bytes, bytearray, memoryview))

    async def _init(self) -> None:
        self._size = len(self._array)

    async def load_range(self, start: int, end: int) -> None:
        pass

    def get_byte_at(self, offset: int) -> int:
        if not 0 <= offset < self._size:
            raise NotLoadedError(
                f"Offset {offset} is outside the {self._size}-byte buffer.",
                details={"offset": offset, "size": self._size},
                offset=offset
            )
        return self._array[offset]

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        check_read_length(offset, length)
        if length and not (0 <= offset and offset + length <= self._size):
            bad_offset = offset if offset < 0 or offset >= self._size else self._size
            raise NotLoadedError(
                f"Range [{offset}, {offset + length - 1}] is outside the {self._size}-byte buffer.",
                details={"offset": offset, "length": length, "size": self._size},
                offset=bad_offset
            )
        return self._array[offset:offset + length]
