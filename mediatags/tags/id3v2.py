"""
ID3v2 tag reader (versions 2.2, 2.3 and 2.4).

Tag layout:
    bytes 0-2   "ID3"
    byte  3     major version
    byte  4     revision
    byte  5     flags: 7 unsynchronisation, 6 extended header,
                       5 experimental, 4 footer present (v2.4)
    bytes 6-9   synchsafe tag size, excluding this 10-byte header
    ...         optional extended header, then frames, then padding

Loading:
    The 10-byte header is loaded first to learn the tag size, then the
    whole tag in one request.

Behavior:
    - A major version above 4 is not decoded: the result is an empty
      tag map with version ">2.4".
    - A tag-level unsynchronisation flag makes the reader de-unsynchronise
      the whole frame area into memory before walking the frames.
    - Shortcut names (title, artist, ...) are resolved against the v2.3+
      frame id first and the v2.2 id second.
"""

from mediatags.core.exceptions import MalformedStructureError
from mediatags.core.logger import get_logger
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.tags.id3v2_frames import get_unsync_file_reader, read_frames
from mediatags.tags.media_tag_reader import MediaTagReader
from mediatags.tags.models import ByteRange, TagHeader, TagHeaderFlags, TagResult, resolve_shortcut

logger = get_logger(__name__)


HEADER_SIZE = 10

SHORTCUTS = {
    "title": ["TIT2", "TT2"],
    "artist": ["TPE1", "TP1"],
    "album": ["TALB", "TAL"],
    "year": ["TYER", "TYE"],
    "comment": ["COMM", "COM"],
    "track": ["TRCK", "TRK"],
    "genre": ["TCON", "TCO"],
    "picture": ["APIC", "PIC"],
    "lyrics": ["USLT", "ULT"],
}


class ID3v2TagReader(MediaTagReader):
    """Reads ID3v2 tags found at the start of a file."""

    name = "id3v2"

    @classmethod
    def get_tag_identifier_byte_range(cls) -> ByteRange:
        return ByteRange(offset=0, length=HEADER_SIZE)

    @classmethod
    def can_read_tag_format(cls, tag_identifier: bytes) -> bool:
        return bytes(tag_identifier[:3]) == b"ID3"

    async def _load_data(self, media_file_reader: MediaFileReader) -> None:
        await media_file_reader.load_range(0, HEADER_SIZE - 1)

        if media_file_reader.get_byte_at(3) > 4:
            return

        tag_size = HEADER_SIZE + media_file_reader.get_synchsafe_integer32_at(6)
        file_size = media_file_reader.get_size()
        if tag_size > file_size:
            raise MalformedStructureError(
                f"ID3v2 tag declares {tag_size} bytes but the file has {file_size}",
                details={"tag_size": tag_size, "file_size": file_size}
            )
        logger.debug(f"Loading {tag_size}-byte ID3v2 tag")
        await media_file_reader.load_range(0, tag_size - 1)

    def _parse_data(self, media_file_reader: MediaFileReader, tags: list[str] | None) -> TagResult:
        major = media_file_reader.get_byte_at(3)
        if major > 4:
            logger.info(f"ID3v2.{major} is not supported, returning no tags")
            return TagResult(type="ID3", version=">2.4", tags={})

        header = read_tag_header(media_file_reader)
        offset = HEADER_SIZE
        end = HEADER_SIZE + header.size

        if header.flags.extended_header:
            if major == 4:
                offset += media_file_reader.get_synchsafe_integer32_at(offset)
            else:
                offset += media_file_reader.get_long_at(offset, True) + 4

        data = media_file_reader
        if header.flags.unsynchronisation:
            data = get_unsync_file_reader(media_file_reader, offset, end - offset)
            offset = 0
            end = data.get_size()

        frames = read_frames(offset, end, data, header, self._expand_shortcut_tags(tags))

        result_tags = {}
        for name, frame_ids in SHORTCUTS.items():
            value = resolve_shortcut(frames, frame_ids)
            if value is not None:
                result_tags[name] = value
        result_tags.update(frames)

        return TagResult(type="ID3", version=header.version, tags=result_tags, header=header)

    def get_shortcuts(self) -> dict[str, list[str]]:
        return SHORTCUTS


def read_tag_header(media_file_reader: MediaFileReader) -> TagHeader:
    """Decode the 10-byte header at the start of the byte source."""
    major = media_file_reader.get_byte_at(3)
    revision = media_file_reader.get_byte_at(4)
    flags = TagHeaderFlags(
        unsynchronisation=media_file_reader.is_bit_set_at(5, 7),
        extended_header=media_file_reader.is_bit_set_at(5, 6),
        experimental_indicator=media_file_reader.is_bit_set_at(5, 5),
        footer_present=media_file_reader.is_bit_set_at(5, 4),
    )
    return TagHeader(
        version=f"2.{major}.{revision}",
        major=major,
        revision=revision,
        flags=flags,
        size=media_file_reader.get_synchsafe_integer32_at(6),
    )
