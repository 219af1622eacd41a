"""
String decoding helpers for tag data.

Tag formats store text either null-terminated inside a larger field or
as fixed-length runs. Every decoder here returns a DecodedString that
carries the number of bytes consumed (including BOM and terminator), so
callers can chain the next read at offset + bytes_read_count.
"""

from dataclasses import dataclass


UTF8_BOM = b"\xef\xbb\xbf"
UTF16_BE_BOM = b"\xfe\xff"
UTF16_LE_BOM = b"\xff\xfe"


@dataclass(frozen=True)
class DecodedString:
    """
    A decoded string and the number of source bytes it used.

    Attributes:
        value: The decoded text, without BOM or terminator.
        bytes_read_count: Bytes consumed from the input.
    """
    value: str
    bytes_read_count: int

    def __str__(self) -> str:
        return self.value

    def __len__(self) -> int:
        return len(self.value)


def _limit(data: bytes, max_bytes: int | None) -> int:
    if max_bytes is None:
        return len(data)
    return max(0, min(max_bytes, len(data)))


def read_utf16_string(data: bytes, big_endian: bool, max_bytes: int | None = None) -> DecodedString:
    """
    Decode UTF-16 text up to a 0x0000 word or max_bytes.

    A leading byte order mark is consumed and overrides big_endian.
    The terminator is only recognised on word boundaries, so a zero
    high byte followed by a zero low byte of the next character is not
    mistaken for the end of the string.

    Args:
        data: Source bytes.
        big_endian: Byte order to use when no BOM is present.
        max_bytes: Upper bound on the bytes to consume.
    """
    limit = _limit(data, max_bytes)
    start = 0
    if limit >= 2:
        if data[:2] == UTF16_BE_BOM:
            big_endian = True
            start = 2
        elif data[:2] == UTF16_LE_BOM:
            big_endian = False
            start = 2

    text_end = start
    while text_end + 1 < limit and data[text_end:text_end + 2] != b"\x00\x00":
        text_end += 2

    if text_end + 1 < limit:
        bytes_read = text_end + 2
    else:
        # No terminator: a dangling odd byte is consumed but not decoded
        text_end = min(text_end, limit - (limit - start) % 2)
        bytes_read = limit

    codec = "utf-16-be" if big_endian else "utf-16-le"
    value = data[start:text_end].decode(codec, errors="replace")
    return DecodedString(value, bytes_read)


def read_utf8_string(data: bytes, max_bytes: int | None = None) -> DecodedString:
    """Decode UTF-8 text up to a null byte or max_bytes, skipping a BOM."""
    limit = _limit(data, max_bytes)
    start = len(UTF8_BOM) if data[:min(3, limit)] == UTF8_BOM else 0

    end = data.find(b"\x00", start, limit)
    if end == -1:
        return DecodedString(data[start:limit].decode("utf-8", errors="replace"), limit)
    return DecodedString(data[start:end].decode("utf-8", errors="replace"), end + 1)


def read_null_terminated_string(data: bytes, max_bytes: int | None = None) -> DecodedString:
    """Decode ISO-8859-1 text up to a null byte or max_bytes."""
    limit = _limit(data, max_bytes)
    end = data.find(b"\x00", 0, limit)
    if end == -1:
        return DecodedString(data[:limit].decode("latin-1"), limit)
    return DecodedString(data[:end].decode("latin-1"), end + 1)


def decode_string(data: bytes, charset: str | None = None, max_bytes: int | None = None) -> DecodedString:
    """
    Decode bytes with the named charset.

    Args:
        data: Source bytes.
        charset: One of "utf-16", "utf-16le", "utf-16be", "utf-8",
                 "iso-8859-1", or None. Anything not UTF-16/UTF-8 is
                 read as null-terminated ISO-8859-1.
        max_bytes: Upper bound on the bytes to consume.

    Returns:
        DecodedString with the text and consumed byte count.
    """
    charset = (charset or "").lower()
    if charset in ("utf-16", "utf-16le", "utf-16be"):
        return read_utf16_string(data, charset == "utf-16be", max_bytes)
    if charset == "utf-8":
        return read_utf8_string(data, max_bytes)
    return read_null_terminated_string(data, max_bytes)
