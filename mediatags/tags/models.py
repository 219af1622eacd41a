"""
Data models for tag reading results.

This module defines the dataclasses shared by all tag readers: the
identifier range a reader sniffs, the ID3v2 tag and frame headers, the
decoded frames/atoms, and the final TagResult handed to the caller.

Tag maps:
    TagResult.tags maps a raw field id (e.g. "TIT2", "©nam") to a Frame,
    or to a list of Frames when the id occurs more than once, and each
    shortcut name (e.g. "title") to the decoded value of the first frame
    found among the shortcut's aliases.
"""

from dataclasses import dataclass, field
from typing import Any


# Picture type names shared by ID3v2 APIC frames and FLAC PICTURE blocks
PICTURE_TYPES = (
    "Other",
    "32x32 pixels 'file icon' (PNG only)",
    "Other file icon",
    "Cover (front)",
    "Cover (back)",
    "Leaflet page",
    "Media (e.g. label side of CD)",
    "Lead artist/lead performer/soloist",
    "Artist/performer",
    "Conductor",
    "Band/Orchestra",
    "Composer",
    "Lyricist/text writer",
    "Recording Location",
    "During recording",
    "During performance",
    "Movie/video screen capture",
    "A bright coloured fish",
    "Illustration",
    "Band/artist logotype",
    "Publisher/Studio logotype",
)


def get_picture_type(index: int) -> str:
    """Return the picture type name for index, or "Unknown" if out of range."""
    if 0 <= index < len(PICTURE_TYPES):
        return PICTURE_TYPES[index]
    return "Unknown"


@dataclass(frozen=True)
class ByteRange:
    """
    A byte range a tag reader needs to identify its format.

    Attributes:
        offset: Start offset. Negative values count from the end of the
                file (-128 is the first byte of a trailing ID3v1 tag).
        length: Number of bytes.
    """
    offset: int
    length: int


@dataclass(frozen=True)
class TagHeaderFlags:
    """
    Flags from byte 5 of the ID3v2 header.

    Attributes:
        unsynchronisation: Bit 7, the tag body is unsynchronised.
        extended_header: Bit 6, an extended header follows.
        experimental_indicator: Bit 5.
        footer_present: Bit 4, a footer follows the tag (v2.4 only).
    """
    unsynchronisation: bool
    extended_header: bool
    experimental_indicator: bool
    footer_present: bool


@dataclass(frozen=True)
class TagHeader:
    """
    The 10-byte ID3v2 tag header.

    Attributes:
        version: "2.<major>.<revision>", e.g. "2.4.0".
        major: Major version (2, 3 or 4).
        revision: Revision number.
        flags: Header flags.
        size: Declared tag size, excluding the 10-byte header.
    """
    version: str
    major: int
    revision: int
    flags: TagHeaderFlags
    size: int


@dataclass(frozen=True)
class FrameMessageFlags:
    """Status flags of an ID3v2.3/2.4 frame header."""
    tag_alter_preservation: bool
    file_alter_preservation: bool
    read_only: bool


@dataclass(frozen=True)
class FrameFormatFlags:
    """Format flags of an ID3v2.3/2.4 frame header."""
    grouping_identity: bool
    compression: bool
    encryption: bool
    unsynchronisation: bool
    data_length_indicator: bool


@dataclass(frozen=True)
class FrameFlags:
    message: FrameMessageFlags
    format: FrameFormatFlags


@dataclass
class Frame:
    """
    One decoded ID3v2 frame or MP4 metadata atom.

    Attributes:
        id: Frame id or atom name (e.g. "TIT2", "covr").
        size: Payload size in bytes.
        description: Human-readable name of the field, "Unknown" if unlisted.
        data: Decoded payload. Text frames decode to str, structured
              frames to dict, unknown frames to None.
    """
    id: str
    size: int
    description: str
    data: Any


@dataclass
class TagResult:
    """
    The result of reading the tags of one file.

    Attributes:
        type: Tag format: "ID3", "MP4" or "FLAC".
        version: Format version, e.g. "1.1", "2.4.0", ">2.4".
        tags: Raw fields and shortcut values (see module docstring).
        header: Parsed ID3v2 header, None for other formats.
        ftyp: MP4 major brand, None for other formats.
    """
    type: str
    version: str
    tags: dict[str, Any] = field(default_factory=dict)
    header: TagHeader | None = None
    ftyp: str | None = None


def add_frame(frames: dict[str, Any], frame: Frame) -> None:
    """
    Store frame under its id, keeping every occurrence.

    The first frame with a given id is stored bare; a second one turns
    the slot into a list, in decode order.
    """
    existing = frames.get(frame.id)
    if existing is None:
        frames[frame.id] = frame
    elif isinstance(existing, list):
        existing.append(frame)
    else:
        frames[frame.id] = [existing, frame]


def resolve_shortcut(frames: dict[str, Any], aliases: list[str]) -> Any:
    """
    Return the data of the first frame found among aliases.

    When a slot holds several frames, the first one decoded wins.
    Returns None when no alias is present or its data is None.
    """
    for frame_id in aliases:
        frame = frames.get(frame_id)
        if frame is None:
            continue
        if isinstance(frame, list):
            frame = frame[0]
        return frame.data
    return None
