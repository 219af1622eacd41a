"""
FLAC metadata reader.

A FLAC stream starts with "fLaC" followed by metadata blocks:

    [1 byte: bit 7 last-block flag, bits 0-6 block type][3-byte big-endian length][payload]

Only two block types carry tags:
    4  VORBIS_COMMENT  little-endian lengths, "KEY=value" UTF-8 entries
    6  PICTURE         big-endian fields, raw image data

The block walk loads one header at a time and the payload of the
comment and picture blocks. A stream without a comment block is
rejected with MissingRequiredBlockError.
"""

from mediatags.core.exceptions import MediaTagsError, MissingRequiredBlockError
from mediatags.core.logger import get_logger
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.tags.media_tag_reader import MediaTagReader, filter_tags
from mediatags.tags.models import ByteRange, TagResult, get_picture_type

logger = get_logger(__name__)


MAGIC = b"fLaC"
BLOCK_HEADER_SIZE = 4

COMMENT_BLOCK_TYPE = 4
PICTURE_BLOCK_TYPE = 6

LAST_BLOCK_FLAG = 0x80

# Vorbis comment keys surfaced as shortcut tags
COMMENT_KEYS = {
    "TITLE": "title",
    "ARTIST": "artist",
    "ALBUM": "album",
    "TRACKNUMBER": "track",
    "GENRE": "genre",
}


class FLACTagReader(MediaTagReader):
    """
    Reads Vorbis comments and the picture block of a FLAC stream.

    Attributes:
        _comment_offset: Payload offset of the Vorbis comment block, once found.
        _picture_offset: Payload offset of the last picture block, once found.
    """

    name = "flac"

    def __init__(self, media_file_reader: MediaFileReader) -> None:
        super().__init__(media_file_reader)
        self._comment_offset: int | None = None
        self._picture_offset: int | None = None

    @classmethod
    def get_tag_identifier_byte_range(cls) -> ByteRange:
        return ByteRange(offset=0, length=4)

    @classmethod
    def can_read_tag_format(cls, tag_identifier: bytes) -> bool:
        return bytes(tag_identifier[:4]) == MAGIC

    async def _load_data(self, media_file_reader: MediaFileReader) -> None:
        """
        Walk the metadata block chain and load the blocks holding tags.

        Raises:
            MissingRequiredBlockError: If the chain has no comment block.
        """
        file_size = media_file_reader.get_size()
        offset = len(MAGIC)

        while offset + BLOCK_HEADER_SIZE <= file_size:
            await media_file_reader.load_range(offset, offset + BLOCK_HEADER_SIZE - 1)
            header = media_file_reader.get_byte_at(offset)
            block_size = media_file_reader.get_integer24_at(offset + 1, True)
            block_type = header & ~LAST_BLOCK_FLAG
            payload_offset = offset + BLOCK_HEADER_SIZE

            if block_type == COMMENT_BLOCK_TYPE:
                await media_file_reader.load_range(payload_offset, payload_offset + block_size - 1)
                self._comment_offset = payload_offset
            elif block_type == PICTURE_BLOCK_TYPE:
                await media_file_reader.load_range(payload_offset, payload_offset + block_size - 1)
                self._picture_offset = payload_offset

            if header & LAST_BLOCK_FLAG:
                break
            offset = payload_offset + block_size
        else:
            logger.debug("FLAC metadata chain ended without a last-block flag")

        if self._comment_offset is None:
            raise MissingRequiredBlockError(
                "FLAC stream has no Vorbis comment block",
                details={"file_size": file_size}
            )

    def _parse_data(self, media_file_reader: MediaFileReader, tags: list[str] | None) -> TagResult:
        result_tags = self._read_comment_block(media_file_reader, self._comment_offset)

        if self._picture_offset is not None and (tags is None or "picture" in tags):
            try:
                result_tags["picture"] = self._read_picture_block(media_file_reader, self._picture_offset)
            except (MediaTagsError, IndexError, ValueError) as e:
                logger.warning(f"Skipping unreadable FLAC picture block: {e}")

        return TagResult(type="FLAC", version="1", tags=filter_tags(result_tags, tags))

    def _read_comment_block(self, data: MediaFileReader, offset: int) -> dict:
        vendor_length = data.get_long_at(offset, False)
        offset += 4 + vendor_length
        comment_count = data.get_long_at(offset, False)
        offset += 4

        tags = {}
        for _ in range(comment_count):
            entry_length = data.get_long_at(offset, False)
            entry = data.get_bytes_at(offset + 4, entry_length).decode("utf-8", errors="replace")
            offset += 4 + entry_length

            key, separator, value = entry.partition("=")
            if not separator:
                logger.debug(f"Ignoring Vorbis comment without '=': {entry!r}")
                continue
            name = COMMENT_KEYS.get(key.upper())
            if name is not None:
                tags[name] = value
        return tags

    def _read_picture_block(self, data: MediaFileReader, offset: int) -> dict:
        picture_type = get_picture_type(data.get_long_at(offset, True))
        offset += 4
        mime_length = data.get_long_at(offset, True)
        image_format = data.get_string_at(offset + 4, mime_length)
        offset += 4 + mime_length
        description_length = data.get_long_at(offset, True)
        description = data.get_string_with_charset_at(offset + 4, description_length, "utf-8")
        offset += 4 + description_length
        # width, height, color depth, indexed colors
        offset += 16
        image_length = data.get_long_at(offset, True)

        return {
            "format": image_format,
            "type": picture_type,
            "description": str(description),
            "data": data.get_bytes_at(offset + 4, image_length),
        }
