"""
Byte-level helpers shared by the ID3v2 reader and its tests.

Synchsafe integers spread 28 bits over four bytes, 7 bits per byte, so
that a size field never contains a 0xFF byte. Unsynchronisation applies
the same idea to whole tag bodies by inserting 0x00 after every 0xFF.
"""


SYNCHSAFE_MAX = (1 << 28) - 1


def decode_synchsafe_integer(data: bytes) -> int:
    """Decode four synchsafe bytes: b0<<21 | b1<<14 | b2<<7 | b3."""
    b0, b1, b2, b3 = data[:4]
    return (b0 & 0x7F) << 21 | (b1 & 0x7F) << 14 | (b2 & 0x7F) << 7 | (b3 & 0x7F)


def encode_synchsafe_integer(value: int) -> bytes:
    """
    Encode a value as four synchsafe bytes.

    Raises:
        ValueError: If value is outside [0, 2**28 - 1].
    """
    if not 0 <= value <= SYNCHSAFE_MAX:
        raise ValueError(f"Synchsafe integers hold 28 bits, got {value}")
    return bytes(((value >> 21) & 0x7F, (value >> 14) & 0x7F, (value >> 7) & 0x7F, value & 0x7F))


def unsynchronise(data: bytes) -> bytes:
    """Insert 0x00 after every 0xFF byte."""
    return bytes(data).replace(b"\xff", b"\xff\x00")


def deunsynchronise(data: bytes) -> bytes:
    """Replace every 0xFF 0x00 pair with 0xFF."""
    return bytes(data).replace(b"\xff\x00", b"\xff")
