"""
MP4 / M4A metadata reader.

An MP4 file is a tree of atoms: [4-byte big-endian size][4-byte name][payload].
iTunes-style metadata lives in leaf atoms under moov.udta.meta.ilst.
Only moov, udta, meta and ilst are descended into; meta carries 4
extra bytes before its children.

Loading:
    The walk loads one 8-byte atom header at a time, skipping over
    non-container atoms (including the media data) by their declared
    size, until it reaches ilst, which is loaded whole. Each container's
    children are walked within its bounds before moving on to its next
    sibling. A zero or impossible atom size ends the walk of the
    enclosing container.

Metadata atom layout:
    [size][name][size]["data"]                16 bytes
    [class/version: 1][flags: 3][locale: 4]    8 bytes
    [payload]

The 24-bit flags field selects the payload type (1 text, 13 jpeg,
14 png, 21 signed int, 22 unsigned int, 0 "uint8").
"""

from mediatags.core.exceptions import MediaTagsError
from mediatags.core.logger import get_logger
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.tags.media_tag_reader import MediaTagReader
from mediatags.tags.models import ByteRange, Frame, TagResult, add_frame, resolve_shortcut

logger = get_logger(__name__)


ATOM_HEADER_SIZE = 8

# size + name + size + "data"
METADATA_HEADER_SIZE = 16

CONTAINER_ATOMS = frozenset(("moov", "udta", "meta", "ilst"))

METADATA_PATH = "moov.udta.meta.ilst"

# Free-form atoms carry their own name/mean structure and are not decoded
UNSUPPORTED_ATOMS = frozenset(("----",))

TYPES = {
    0: "uint8",
    1: "text",
    13: "jpeg",
    14: "png",
    21: "int",
    22: "uint",
}

ATOM_DESCRIPTIONS = {
    "©alb": "Album",
    "©ART": "Artist",
    "aART": "Album Artist",
    "©day": "Release Date",
    "©nam": "Title",
    "©gen": "Genre",
    "gnre": "Genre",
    "trkn": "Track Number",
    "©wrt": "Composer",
    "©too": "Encoding Tool",
    "©enc": "Encoded By",
    "cprt": "Copyright",
    "covr": "Cover Art",
    "©grp": "Grouping",
    "keyw": "Keywords",
    "©lyr": "Lyrics",
    "©cmt": "Comment",
    "tmpo": "Tempo",
    "cpil": "Compilation",
    "disk": "Disc Number",
    "tvsh": "TV Show Name",
    "tven": "TV Episode ID",
    "tvsn": "TV Season",
    "tves": "TV Episode",
    "tvnn": "TV Network",
    "desc": "Description",
    "ldes": "Long Description",
    "sonm": "Sort Name",
    "soar": "Sort Artist",
    "soaa": "Sort Album",
    "soco": "Sort Composer",
    "sosn": "Sort Show",
    "purd": "Purchase Date",
    "pcst": "Podcast",
    "purl": "Podcast URL",
    "catg": "Category",
    "hdvd": "HD Video",
    "stik": "Media Type",
    "rtng": "Content Rating",
    "pgap": "Gapless Playback",
    "apID": "Purchase Account",
    "sfID": "Country Code",
    "atID": "Artist ID",
    "cnID": "Catalog ID",
    "plID": "Collection ID",
    "geID": "Genre ID",
    "xid ": "Vendor Information",
    "flvr": "Codec Flavor",
}

SHORTCUTS = {
    "title": ["©nam"],
    "artist": ["©ART"],
    "album": ["©alb"],
    "year": ["©day"],
    "comment": ["©cmt"],
    "track": ["trkn"],
    "genre": ["©gen"],
    "picture": ["covr"],
    "lyrics": ["©lyr"],
}


class MP4TagReader(MediaTagReader):
    """Reads iTunes-style metadata atoms from MP4/M4A files."""

    name = "mp4"

    @classmethod
    def get_tag_identifier_byte_range(cls) -> ByteRange:
        # ftyp is the first atom; its name sits after the 4-byte size
        return ByteRange(offset=0, length=16)

    @classmethod
    def can_read_tag_format(cls, tag_identifier: bytes) -> bool:
        return bytes(tag_identifier[4:8]) == b"ftyp"

    async def _load_data(self, media_file_reader: MediaFileReader) -> None:
        await media_file_reader.load_range(0, 16)
        await self._load_atom(media_file_reader, 0, media_file_reader.get_size(), "")

    async def _load_atom(
        self,
        media_file_reader: MediaFileReader,
        offset: int,
        end: int,
        parent_atom_full_name: str
    ) -> bool:
        """
        Load headers in [offset, end) until ilst is found and loaded.

        Siblings are visited in a loop and containers recursively. Only
        the ilst path triggers a load of atom bodies. Returns True once
        ilst has been loaded.
        """
        while offset + ATOM_HEADER_SIZE <= end:
            atom_size = media_file_reader.get_long_at(offset, True)
            if atom_size < ATOM_HEADER_SIZE:
                # 0 means "to end of file", 1 a 64-bit size; neither holds metadata
                return False

            atom_name = media_file_reader.get_string_at(offset + 4, 4)

            if atom_name in CONTAINER_ATOMS:
                atom_full_name = f"{parent_atom_full_name}.{atom_name}" if parent_atom_full_name else atom_name
                if atom_full_name == METADATA_PATH:
                    logger.debug(f"Loading {atom_size}-byte ilst atom at offset {offset}")
                    await media_file_reader.load_range(offset, offset + atom_size - 1)
                    return True
                children_offset = offset + ATOM_HEADER_SIZE
                if atom_name == "meta":
                    children_offset += 4
                await media_file_reader.load_range(children_offset, children_offset + ATOM_HEADER_SIZE - 1)
                if await self._load_atom(media_file_reader, children_offset, offset + atom_size, atom_full_name):
                    return True

            offset += atom_size
            if offset + ATOM_HEADER_SIZE <= end:
                await media_file_reader.load_range(offset, offset + ATOM_HEADER_SIZE - 1)

        return False

    def _parse_data(self, media_file_reader: MediaFileReader, tags: list[str] | None) -> TagResult:
        frames: dict = {}
        self._read_atom(frames, media_file_reader, 0, media_file_reader.get_size(), self._expand_shortcut_tags(tags))

        result_tags = {}
        for name, atom_names in SHORTCUTS.items():
            value = resolve_shortcut(frames, atom_names)
            if value is None:
                continue
            if name == "track":
                value = value["track"]
            result_tags[name] = value
        result_tags.update(frames)

        return TagResult(
            type="MP4",
            ftyp=media_file_reader.get_string_at(8, 4),
            version=str(media_file_reader.get_long_at(12, True)),
            tags=result_tags,
        )

    def _read_atom(
        self,
        frames: dict,
        data: MediaFileReader,
        offset: int,
        length: int,
        tags: list[str] | None,
        parent_atom_full_name: str = ""
    ) -> bool:
        """
        Walk the atoms in [offset, offset + length), descending into containers.

        Returns True once ilst has been read, so nothing past it is touched.
        """
        seek = offset
        end = offset + length
        while seek + ATOM_HEADER_SIZE <= end:
            atom_size = data.get_long_at(seek, True)
            if atom_size < ATOM_HEADER_SIZE:
                return False
            atom_name = data.get_string_at(seek + 4, 4)

            if atom_name in CONTAINER_ATOMS:
                children_offset = seek + ATOM_HEADER_SIZE
                if atom_name == "meta":
                    children_offset += 4
                atom_full_name = f"{parent_atom_full_name}.{atom_name}" if parent_atom_full_name else atom_name
                found = self._read_atom(
                    frames, data, children_offset, seek + atom_size - children_offset, tags, atom_full_name
                )
                if found or atom_full_name == METADATA_PATH:
                    return True

            elif (
                parent_atom_full_name == METADATA_PATH
                and atom_name not in UNSUPPORTED_ATOMS
                and (tags is None or atom_name in tags)
            ):
                try:
                    add_frame(frames, self._read_metadata_atom(data, seek))
                except (MediaTagsError, IndexError, KeyError, ValueError) as e:
                    logger.warning(f"Skipping unreadable {atom_name!r} atom at offset {seek}: {e}")

            seek += atom_size

        return False

    def _read_metadata_atom(self, data: MediaFileReader, offset: int) -> Frame:
        atom_size = data.get_long_at(offset, True)
        atom_name = data.get_string_at(offset + 4, 4)

        klass = data.get_integer24_at(offset + METADATA_HEADER_SIZE + 1, True)
        atom_type = TYPES.get(klass)
        data_start = offset + METADATA_HEADER_SIZE + 8
        data_length = atom_size - (METADATA_HEADER_SIZE + 8)

        # trkn/disk payload: [reserved: 2][number: 2][total: 2][reserved: 2]
        # total is at +12 as iTunes and mutagen write it, not the trailing short at +14
        if atom_name == "trkn":
            atom_data = {
                "track": data.get_short_at(offset + METADATA_HEADER_SIZE + 10, True),
                "total": data.get_short_at(offset + METADATA_HEADER_SIZE + 12, True),
            }
        elif atom_name == "disk":
            atom_data = {
                "disk": data.get_short_at(offset + METADATA_HEADER_SIZE + 10, True),
                "total": data.get_short_at(offset + METADATA_HEADER_SIZE + 12, True),
            }
        else:
            if atom_name == "covr" and atom_type == "uint8":
                # Some encoders store cover art with class 0
                atom_type = "jpeg"
            atom_data = _read_atom_value(data, atom_type, data_start, data_length)

        return Frame(
            id=atom_name,
            size=atom_size,
            description=ATOM_DESCRIPTIONS.get(atom_name, "Unknown"),
            data=atom_data,
        )


def _read_atom_value(data: MediaFileReader, atom_type: str | None, data_start: int, data_length: int):
    if atom_type == "text":
        return str(data.get_string_with_charset_at(data_start, data_length, "utf-8"))

    if atom_type == "uint8":
        # Known quirk: class 0 values are read as a 16-bit big-endian
        # short, not a byte. Real files depend on it (e.g. gnre).
        return data.get_short_at(data_start, True)

    if atom_type in ("int", "uint"):
        signed = atom_type == "int"
        if data_length == 1:
            return data.get_sbyte_at(data_start) if signed else data.get_byte_at(data_start)
        if data_length == 2:
            return data.get_sshort_at(data_start, True) if signed else data.get_short_at(data_start, True)
        if data_length == 4 and signed:
            return data.get_slong_at(data_start, True)
        # 64-bit values (e.g. plID) are read from their low word; the
        # high word is zero in practice
        return data.get_long_at(data_start + (4 if data_length == 8 else 0), True)

    if atom_type in ("jpeg", "png"):
        return {
            "format": f"image/{atom_type}",
            "data": data.get_bytes_at(data_start, data_length),
        }

    return None
