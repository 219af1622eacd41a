"""
Byte source contract and typed binary reads.

MediaFileReader is the abstraction every tag reader works against: a
file of known size whose bytes become readable only after the range
holding them was loaded. Backends implement _init(), load_range() and
get_byte_at(); this class layers the typed reads on top.

Contract:
    - await init() populates the size; it is idempotent.
    - get_size() raises NotInitializedError before init() completed.
    - await load_range(start, end) makes [start, end] (inclusive) readable.
    - every get_*_at() read is synchronous and raises NotLoadedError
      when it touches a byte that was never loaded.

Usage:
    reader = LocalFileReader("song.mp3")
    await reader.init()
    await reader.load_range(0, 9)
    if reader.get_string_at(0, 3) == "ID3":
        size = reader.get_synchsafe_integer32_at(6)
"""

from abc import ABC, abstractmethod
from typing import Any

from mediatags.core.exceptions import MalformedStructureError, NotInitializedError
from mediatags.files.binary import decode_synchsafe_integer
from mediatags.files.string_utils import DecodedString, decode_string


class MediaFileReader(ABC):
    """
    Abstract byte source with lazily loaded ranges.

    Subclasses provide the transport. Readers backed by a
    ChunkedFileData should also override get_bytes_at() to slice the
    chunk directly instead of reading byte by byte.
    """

    def __init__(self) -> None:
        self._is_initialized = False
        self._size = 0

    @classmethod
    def can_read_file(cls, file: Any) -> bool:
        """Return True if this backend can wrap the given object."""
        raise NotImplementedError(f"{cls.__name__} must implement can_read_file()")

    async def init(self) -> None:
        """Initialize the source once; later calls return immediately."""
        if self._is_initialized:
            return
        await self._init()
        self._is_initialized = True

    @abstractmethod
    async def _init(self) -> None:
        """Backend-specific initialization; must set self._size."""

    @abstractmethod
    async def load_range(self, start: int, end: int) -> None:
        """Make bytes [start, end] (inclusive) readable."""

    def get_size(self) -> int:
        """
        Return the total size of the file in bytes.

        Raises:
            NotInitializedError: If init() has not completed yet.
        """
        if not self._is_initialized:
            raise NotInitializedError(
                f"{type(self).__name__} hasn't been initialized yet.",
                details={"reader": type(self).__name__}
            )
        return self._size

    @abstractmethod
    def get_byte_at(self, offset: int) -> int:
        """Return the unsigned byte at offset."""

    def get_bytes_at(self, offset: int, length: int) -> bytes:
        """Return length bytes starting at offset."""
        check_read_length(offset, length)
        return bytes(self.get_byte_at(offset + i) for i in range(length))

    def is_bit_set_at(self, offset: int, bit: int) -> bool:
        """Test bit (0 = least significant) of the byte at offset."""
        return (self.get_byte_at(offset) & (1 << bit)) != 0

    def get_sbyte_at(self, offset: int) -> int:
        byte = self.get_byte_at(offset)
        return byte - 256 if byte > 127 else byte

    def _get_int_at(self, offset: int, length: int, big_endian: bool, signed: bool) -> int:
        return int.from_bytes(
            self.get_bytes_at(offset, length),
            "big" if big_endian else "little",
            signed=signed
        )

    def get_short_at(self, offset: int, big_endian: bool) -> int:
        return self._get_int_at(offset, 2, big_endian, signed=False)

    def get_sshort_at(self, offset: int, big_endian: bool) -> int:
        return self._get_int_at(offset, 2, big_endian, signed=True)

    def get_integer24_at(self, offset: int, big_endian: bool) -> int:
        return self._get_int_at(offset, 3, big_endian, signed=False)

    def get_sinteger24_at(self, offset: int, big_endian: bool) -> int:
        return self._get_int_at(offset, 3, big_endian, signed=True)

    def get_long_at(self, offset: int, big_endian: bool) -> int:
        return self._get_int_at(offset, 4, big_endian, signed=False)

    def get_slong_at(self, offset: int, big_endian: bool) -> int:
        return self._get_int_at(offset, 4, big_endian, signed=True)

    def get_synchsafe_integer32_at(self, offset: int) -> int:
        """Read a 4-byte synchsafe integer (7 significant bits per byte)."""
        return decode_synchsafe_integer(self.get_bytes_at(offset, 4))

    def get_string_at(self, offset: int, length: int) -> str:
        """
        Read exactly length bytes as ISO-8859-1.

        Null bytes are kept, which is what frame and atom identifier
        checks rely on.
        """
        return self.get_bytes_at(offset, length).decode("latin-1")

    def get_string_with_charset_at(
        self,
        offset: int,
        length: int,
        charset: str | None = None
    ) -> DecodedString:
        """
        Decode up to length bytes at offset with the given charset.

        Decoding stops at the charset's null terminator. The returned
        bytes_read_count tells the caller where the next field starts.
        """
        return decode_string(self.get_bytes_at(offset, length), charset)

    def get_char_at(self, offset: int) -> str:
        return chr(self.get_byte_at(offset))


def check_read_length(offset: int, length: int) -> None:
    if length < 0:
        raise MalformedStructureError(
            f"Negative read length {length} at offset {offset}",
            details={"offset": offset, "length": length}
        )
