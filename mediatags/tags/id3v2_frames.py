"""
ID3v2 frame walker and frame decoders.

The walker reads frames sequentially between two offsets, decodes each
payload through the dispatch table and collects the results by frame
id. Chapter (CHAP) and table of contents (CTOC) frames embed their own
frame lists, which are decoded by calling the walker again on the
remaining bytes of the frame.

Frame header layout:
    v2.2: 3-byte id, 3-byte big-endian size                    (6 bytes)
    v2.3: 4-byte id, 4-byte big-endian size, 2 flag bytes       (10 bytes)
    v2.4: 4-byte id, 4-byte synchsafe size, 2 flag bytes        (10 bytes)

Decoder dispatch:
    Exact frame id first, then any id starting with "T" falls back to
    the text decoder and any id starting with "W" to the URL decoder.
    Other ids have no decoder and keep None as their data.

Every decoder has the signature:
    decoder(offset, length, data, flags, id3header) -> decoded payload
"""

import re
from collections.abc import Callable
from typing import Any

from mediatags.core.exceptions import MediaTagsError
from mediatags.core.logger import get_logger
from mediatags.files.array_file_reader import ArrayFileReader
from mediatags.files.binary import deunsynchronise
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.files.string_utils import read_null_terminated_string
from mediatags.tags.models import (
    Frame,
    FrameFlags,
    FrameFormatFlags,
    FrameMessageFlags,
    TagHeader,
    add_frame,
    get_picture_type,
)

logger = get_logger(__name__)


FrameReaderFunction = Callable[[int, int, MediaFileReader, FrameFlags | None, TagHeader], Any]

# Byte 0 of text-carrying frames
TEXT_ENCODINGS = {
    0: "iso-8859-1",
    1: "utf-16",
    2: "utf-16be",
    3: "utf-8",
}

# Ids written by a buggy encoder ("MP3ext V3.3.19(ansi)") into the padding
BROKEN_PADDING_IDS = frozenset(("MP3e", "\x00MP3", "\x00\x00MP", " MP3"))

GENRE_REFERENCE_PATTERN = re.compile(r"^\(\d+\)")

FRAME_DESCRIPTIONS = {
    # v2.2
    "BUF": "Recommended buffer size",
    "CNT": "Play counter",
    "COM": "Comments",
    "CRA": "Audio encryption",
    "CRM": "Encrypted meta frame",
    "ETC": "Event timing codes",
    "EQU": "Equalization",
    "GEO": "General encapsulated object",
    "IPL": "Involved people list",
    "LNK": "Linked information",
    "MCI": "Music CD Identifier",
    "MLL": "MPEG location lookup table",
    "PIC": "Attached picture",
    "POP": "Popularimeter",
    "REV": "Reverb",
    "RVA": "Relative volume adjustment",
    "SLT": "Synchronized lyric/text",
    "STC": "Synced tempo codes",
    "TAL": "Album/Movie/Show title",
    "TBP": "BPM (Beats Per Minute)",
    "TCM": "Composer",
    "TCO": "Content type",
    "TCR": "Copyright message",
    "TDA": "Date",
    "TDY": "Playlist delay",
    "TEN": "Encoded by",
    "TFT": "File type",
    "TIM": "Time",
    "TKE": "Initial key",
    "TLA": "Language(s)",
    "TLE": "Length",
    "TMT": "Media type",
    "TOA": "Original artist(s)/performer(s)",
    "TOF": "Original filename",
    "TOL": "Original Lyricist(s)/text writer(s)",
    "TOR": "Original release year",
    "TOT": "Original album/Movie/Show title",
    "TP1": "Lead artist(s)/Lead performer(s)/Soloist(s)/Performing group",
    "TP2": "Band/Orchestra/Accompaniment",
    "TP3": "Conductor/Performer refinement",
    "TP4": "Interpreted, remixed, or otherwise modified by",
    "TPA": "Part of a set",
    "TPB": "Publisher",
    "TRC": "ISRC (International Standard Recording Code)",
    "TRD": "Recording dates",
    "TRK": "Track number/Position in set",
    "TSI": "Size",
    "TSS": "Software/hardware and settings used for encoding",
    "TT1": "Content group description",
    "TT2": "Title/Songname/Content description",
    "TT3": "Subtitle/Description refinement",
    "TXT": "Lyricist/text writer",
    "TXX": "User defined text information frame",
    "TYE": "Year",
    "UFI": "Unique file identifier",
    "ULT": "Unsychronized lyric/text transcription",
    "WAF": "Official audio file webpage",
    "WAR": "Official artist/performer webpage",
    "WAS": "Official audio source webpage",
    "WCM": "Commercial information",
    "WCP": "Copyright/Legal information",
    "WPB": "Publishers official webpage",
    "WXX": "User defined URL link frame",
    # v2.3
    "AENC": "Audio encryption",
    "APIC": "Attached picture",
    "ASPI": "Audio seek point index",
    "CHAP": "Chapter",
    "CTOC": "Table of contents",
    "COMM": "Comments",
    "COMR": "Commercial frame",
    "ENCR": "Encryption method registration",
    "EQU2": "Equalisation (2)",
    "EQUA": "Equalization",
    "ETCO": "Event timing codes",
    "GEOB": "General encapsulated object",
    "GRID": "Group identification registration",
    "IPLS": "Involved people list",
    "LINK": "Linked information",
    "MCDI": "Music CD identifier",
    "MLLT": "MPEG location lookup table",
    "OWNE": "Ownership frame",
    "PRIV": "Private frame",
    "PCNT": "Play counter",
    "POPM": "Popularimeter",
    "POSS": "Position synchronisation frame",
    "RBUF": "Recommended buffer size",
    "RVA2": "Relative volume adjustment (2)",
    "RVAD": "Relative volume adjustment",
    "RVRB": "Reverb",
    "SEEK": "Seek frame",
    "SYLT": "Synchronized lyric/text",
    "SYTC": "Synchronized tempo codes",
    "TALB": "Album/Movie/Show title",
    "TBPM": "BPM (beats per minute)",
    "TCOM": "Composer",
    "TCON": "Content type",
    "TCOP": "Copyright message",
    "TDAT": "Date",
    "TDLY": "Playlist delay",
    "TDRC": "Recording time",
    "TDRL": "Release time",
    "TDTG": "Tagging time",
    "TENC": "Encoded by",
    "TEXT": "Lyricist/Text writer",
    "TFLT": "File type",
    "TIME": "Time",
    "TIPL": "Involved people list",
    "TIT1": "Content group description",
    "TIT2": "Title/songname/content description",
    "TIT3": "Subtitle/Description refinement",
    "TKEY": "Initial key",
    "TLAN": "Language(s)",
    "TLEN": "Length",
    "TMCL": "Musician credits list",
    "TMED": "Media type",
    "TMOO": "Mood",
    "TOAL": "Original album/movie/show title",
    "TOFN": "Original filename",
    "TOLY": "Original lyricist(s)/text writer(s)",
    "TOPE": "Original artist(s)/performer(s)",
    "TORY": "Original release year",
    "TOWN": "File owner/licensee",
    "TPE1": "Lead performer(s)/Soloist(s)",
    "TPE2": "Band/orchestra/accompaniment",
    "TPE3": "Conductor/performer refinement",
    "TPE4": "Interpreted, remixed, or otherwise modified by",
    "TPOS": "Part of a set",
    "TPRO": "Produced notice",
    "TPUB": "Publisher",
    "TRCK": "Track number/Position in set",
    "TRDA": "Recording dates",
    "TRSN": "Internet radio station name",
    "TRSO": "Internet radio station owner",
    "TSOA": "Album sort order",
    "TSOP": "Performer sort order",
    "TSOT": "Title sort order",
    "TSIZ": "Size",
    "TSRC": "ISRC (international standard recording code)",
    "TSSE": "Software/Hardware and settings used for encoding",
    "TSST": "Set subtitle",
    "TYER": "Year",
    "TXXX": "User defined text information frame",
    "UFID": "Unique file identifier",
    "USER": "Terms of use",
    "USLT": "Unsychronized lyric/text transcription",
    "WCOM": "Commercial information",
    "WCOP": "Copyright/Legal information",
    "WOAF": "Official audio file webpage",
    "WOAR": "Official artist/performer webpage",
    "WOAS": "Official audio source webpage",
    "WORS": "Official internet radio station homepage",
    "WPAY": "Payment",
    "WPUB": "Publishers official webpage",
    "WXXX": "User defined URL link frame",
}


def get_text_encoding(encoding_byte: int) -> str:
    """Map the encoding byte of a frame to a charset name."""
    return TEXT_ENCODINGS.get(encoding_byte, "iso-8859-1")


def get_frame_description(frame_id: str) -> str:
    return FRAME_DESCRIPTIONS.get(frame_id, "Unknown")


def get_unsync_file_reader(data: MediaFileReader, offset: int, size: int) -> ArrayFileReader:
    """Copy [offset, offset + size) into a new reader with 0xFF 0x00 pairs collapsed."""
    return ArrayFileReader(deunsynchronise(data.get_bytes_at(offset, size)))


def read_text_frame(offset, length, data, flags, id3header) -> str | None:
    if length == 0:
        return None
    charset = get_text_encoding(data.get_byte_at(offset))
    return str(data.get_string_with_charset_at(offset + 1, length - 1, charset))


def read_genre_frame(offset, length, data, flags, id3header) -> str | None:
    """Text frame with a legacy "(<genre index>)" prefix stripped."""
    text = read_text_frame(offset, length, data, flags, id3header)
    if text is None:
        return None
    return GENRE_REFERENCE_PATTERN.sub("", text)


def read_url_frame(offset, length, data, flags, id3header) -> str | None:
    if length == 0:
        return None
    return str(data.get_string_with_charset_at(offset, length, "iso-8859-1"))


def read_picture_frame(offset, length, data, flags, id3header) -> dict:
    """
    Decode an attached picture (APIC / PIC).

    Layout:
        encoding byte
        format: 3 fixed characters (v2.2) or null-terminated MIME type
        picture type byte
        null-terminated description in the frame's encoding
        image bytes up to the end of the frame
    """
    start = offset
    charset = get_text_encoding(data.get_byte_at(offset))

    if id3header.major == 2:
        image_format = data.get_string_at(offset + 1, 3)
        offset += 4
    else:
        # MIME types are always ISO-8859-1, whatever the frame encoding
        mime = data.get_string_with_charset_at(offset + 1, length - 1)
        image_format = str(mime)
        offset += 1 + mime.bytes_read_count

    picture_type = get_picture_type(data.get_byte_at(offset))
    description = data.get_string_with_charset_at(
        offset + 1, length - (offset - start) - 1, charset
    )
    offset += 1 + description.bytes_read_count

    return {
        "format": image_format,
        "type": picture_type,
        "description": str(description),
        "data": data.get_bytes_at(offset, (start + length) - offset),
    }


def _read_language_text_frame(offset, length, data, description_key, text_key) -> dict:
    charset = get_text_encoding(data.get_byte_at(offset))
    language = data.get_string_at(offset + 1, 3)
    description = data.get_string_with_charset_at(offset + 4, length - 4, charset)
    text_offset = offset + 4 + description.bytes_read_count
    text = data.get_string_with_charset_at(text_offset, (offset + length) - text_offset, charset)

    return {
        "language": language,
        description_key: str(description),
        text_key: str(text),
    }


def read_comment_frame(offset, length, data, flags, id3header) -> dict:
    return _read_language_text_frame(offset, length, data, "short_description", "text")


def read_lyrics_frame(offset, length, data, flags, id3header) -> dict:
    return _read_language_text_frame(offset, length, data, "descriptor", "lyrics")


def read_counter_frame(offset, length, data, flags, id3header) -> int:
    return data.get_long_at(offset, True)


def read_user_text_frame(offset, length, data, flags, id3header) -> dict:
    """TXXX: description and value, both in the frame's encoding."""
    charset = get_text_encoding(data.get_byte_at(offset))
    user_description = data.get_string_with_charset_at(offset + 1, length - 1, charset)
    value_offset = offset + 1 + user_description.bytes_read_count
    value = data.get_string_with_charset_at(value_offset, (offset + length) - value_offset, charset)

    return {
        "user_description": str(user_description),
        "data": str(value),
    }


def read_user_url_frame(offset, length, data, flags, id3header) -> dict | None:
    """WXXX: description in the frame's encoding, URL in ISO-8859-1."""
    if length == 0:
        return None

    charset = get_text_encoding(data.get_byte_at(offset))
    user_description = data.get_string_with_charset_at(offset + 1, length - 1, charset)
    url_offset = offset + 1 + user_description.bytes_read_count
    url = data.get_string_with_charset_at(url_offset, (offset + length) - url_offset, "iso-8859-1")

    return {
        "user_description": str(user_description),
        "data": str(url),
    }


def read_unique_file_id_frame(offset, length, data, flags, id3header) -> dict:
    owner = read_null_terminated_string(data.get_bytes_at(offset, length))
    identifier = data.get_bytes_at(offset + owner.bytes_read_count, length - owner.bytes_read_count)
    return {
        "owner_identifier": str(owner),
        "identifier": identifier,
    }


def read_chapter_frame(offset, length, data, flags, id3header) -> dict:
    """
    Decode a chapter (CHAP) frame.

    Layout: null-terminated element id, start time, end time, start
    offset, end offset (32-bit big-endian each), then embedded frames.
    """
    end = offset + length
    element_id = read_null_terminated_string(data.get_bytes_at(offset, length))
    offset += element_id.bytes_read_count

    start_time = data.get_long_at(offset, True)
    end_time = data.get_long_at(offset + 4, True)
    start_offset = data.get_long_at(offset + 8, True)
    end_offset = data.get_long_at(offset + 12, True)
    offset += 16

    return {
        "id": str(element_id),
        "start_time": start_time,
        "end_time": end_time,
        "start_offset": start_offset,
        "end_offset": end_offset,
        "sub_frames": read_frames(offset, end, data, id3header),
    }


def read_table_of_contents_frame(offset, length, data, flags, id3header) -> dict:
    """
    Decode a table of contents (CTOC) frame.

    Layout: null-terminated element id, flags byte (bit 1 top-level,
    bit 0 ordered), entry count, that many null-terminated child
    element ids, then embedded frames.
    """
    end = offset + length
    element_id = read_null_terminated_string(data.get_bytes_at(offset, length))
    offset += element_id.bytes_read_count

    top_level = data.is_bit_set_at(offset, 1)
    ordered = data.is_bit_set_at(offset, 0)
    entry_count = data.get_byte_at(offset + 1)
    offset += 2

    child_element_ids = []
    for _ in range(entry_count):
        child_id = read_null_terminated_string(data.get_bytes_at(offset, end - offset))
        child_element_ids.append(str(child_id))
        offset += child_id.bytes_read_count

    return {
        "id": str(element_id),
        "top_level": top_level,
        "ordered": ordered,
        "entry_count": entry_count,
        "child_element_ids": child_element_ids,
        "sub_frames": read_frames(offset, end, data, id3header),
    }


FRAME_READER_FUNCTIONS: dict[str, FrameReaderFunction] = {
    "APIC": read_picture_frame,
    "PIC": read_picture_frame,
    "CHAP": read_chapter_frame,
    "CTOC": read_table_of_contents_frame,
    "COMM": read_comment_frame,
    "COM": read_comment_frame,
    "PCNT": read_counter_frame,
    "CNT": read_counter_frame,
    "TCON": read_genre_frame,
    "TCO": read_genre_frame,
    "TXXX": read_user_text_frame,
    "UFID": read_unique_file_id_frame,
    "USLT": read_lyrics_frame,
    "ULT": read_lyrics_frame,
    "WXXX": read_user_url_frame,
    "T*": read_text_frame,
    "W*": read_url_frame,
}


def get_frame_reader_function(frame_id: str) -> FrameReaderFunction | None:
    """
    Select the decoder for a frame id.

    Exact ids win over the "T*" and "W*" prefix fallbacks.
    """
    if frame_id in FRAME_READER_FUNCTIONS:
        return FRAME_READER_FUNCTIONS[frame_id]
    if frame_id.startswith("T"):
        return FRAME_READER_FUNCTIONS["T*"]
    if frame_id.startswith("W"):
        return FRAME_READER_FUNCTIONS["W*"]
    return None


def get_frame_header_size(id3header: TagHeader) -> int:
    return 6 if id3header.major == 2 else 10


def read_frame_flags(data: MediaFileReader, offset: int, major: int) -> FrameFlags:
    """
    Decode the two flag bytes of a v2.3/v2.4 frame header.

    v2.3 keeps its own status and compression bit positions but, like
    v2.4, reads unsynchronisation and the data length indicator from
    bits 1 and 0 of the format byte.
    """
    if major == 3:
        return FrameFlags(
            message=FrameMessageFlags(
                tag_alter_preservation=data.is_bit_set_at(offset, 7),
                file_alter_preservation=data.is_bit_set_at(offset, 6),
                read_only=data.is_bit_set_at(offset, 5),
            ),
            format=FrameFormatFlags(
                grouping_identity=data.is_bit_set_at(offset + 1, 5),
                compression=data.is_bit_set_at(offset + 1, 7),
                encryption=data.is_bit_set_at(offset + 1, 6),
                unsynchronisation=data.is_bit_set_at(offset + 1, 1),
                data_length_indicator=data.is_bit_set_at(offset + 1, 0),
            ),
        )

    return FrameFlags(
        message=FrameMessageFlags(
            tag_alter_preservation=data.is_bit_set_at(offset, 6),
            file_alter_preservation=data.is_bit_set_at(offset, 5),
            read_only=data.is_bit_set_at(offset, 4),
        ),
        format=FrameFormatFlags(
            grouping_identity=data.is_bit_set_at(offset + 1, 6),
            compression=data.is_bit_set_at(offset + 1, 3),
            encryption=data.is_bit_set_at(offset + 1, 2),
            unsynchronisation=data.is_bit_set_at(offset + 1, 1),
            data_length_indicator=data.is_bit_set_at(offset + 1, 0),
        ),
    )


def _read_frame_header(
    data: MediaFileReader,
    offset: int,
    id3header: TagHeader
) -> tuple[str, int, FrameFlags | None]:
    if id3header.major == 2:
        return data.get_string_at(offset, 3), data.get_integer24_at(offset + 3, True), None

    frame_id = data.get_string_at(offset, 4)
    if id3header.major == 3:
        frame_size = data.get_long_at(offset + 4, True)
    else:
        frame_size = data.get_synchsafe_integer32_at(offset + 4)
    return frame_id, frame_size, read_frame_flags(data, offset + 8, id3header.major)


def read_frames(
    offset: int,
    end: int,
    data: MediaFileReader,
    id3header: TagHeader,
    tags: list[str] | None = None
) -> dict[str, Any]:
    """
    Decode the frames found in [offset, end).

    Args:
        offset: Offset of the first frame header.
        end: Offset just past the last byte that may hold frames.
        data: Byte source with the whole range loaded.
        id3header: The tag header (selects the frame header layout).
        tags: Frame ids to keep, or None for all. Skipped frames are
              still walked over.

    Returns:
        Frames by id. A repeated id maps to a list in file order.

    Behavior:
        - An all-zero id is padding and ends the walk.
        - Known garbage ids ("MP3e", ...) end the walk.
        - A frame claiming more bytes than remain ends the walk.
        - A frame whose payload cannot be decoded is logged and skipped.
    """
    frames: dict[str, Any] = {}
    frame_header_size = get_frame_header_size(id3header)

    while offset < end - frame_header_size:
        frame_id, frame_size, flags = _read_frame_header(data, offset, id3header)

        if frame_id == "\x00" * len(frame_id):
            break
        if frame_id in BROKEN_PADDING_IDS:
            logger.debug(f"Stopping at non-standard padding at offset {offset}")
            break

        frame_data_offset = offset + frame_header_size
        if frame_data_offset + frame_size > end:
            logger.warning(
                f"Frame {frame_id!r} at offset {offset} declares {frame_size} bytes "
                f"but only {end - frame_data_offset} remain; stopping"
            )
            break

        offset = frame_data_offset + frame_size

        if tags is not None and frame_id not in tags:
            continue

        try:
            frame = _read_frame(frame_id, frame_data_offset, frame_size, data, flags, id3header)
        except (MediaTagsError, IndexError, KeyError, ValueError) as e:
            logger.warning(f"Skipping unreadable {frame_id} frame at offset {frame_data_offset}: {e}")
            continue

        add_frame(frames, frame)

    return frames


def _read_frame(
    frame_id: str,
    offset: int,
    size: int,
    data: MediaFileReader,
    flags: FrameFlags | None,
    id3header: TagHeader
) -> Frame:
    # The tag-level flag already undid unsynchronisation for the whole tag
    if flags and flags.format.unsynchronisation and not id3header.flags.unsynchronisation:
        data = get_unsync_file_reader(data, offset, size)
        offset = 0
        size = data.get_size()

    if flags and flags.format.data_length_indicator:
        offset += 4
        size -= 4

    reader_function = get_frame_reader_function(frame_id)
    parsed_data = reader_function(offset, size, data, flags, id3header) if reader_function else None

    return Frame(
        id=frame_id,
        size=size,
        description=get_frame_description(frame_id),
        data=parsed_data,
    )
