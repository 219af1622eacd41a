"""
ID3v1 and ID3v1.1 tag reader.

The tag is the last 128 bytes of the file:

    offset  size  field
         0     3  "TAG"
         3    30  title
        33    30  artist
        63    30  album
        93     4  year
        97    30  comment (v1.0), or 28-byte comment + 0x00 + track (v1.1)
       127     1  genre index

A zero byte at comment+28 followed by a non-zero byte at comment+29 marks
ID3v1.1. Text fields are ISO-8859-1, null-padded.
"""

from mediatags.core.logger import get_logger
from mediatags.files.media_file_reader import MediaFileReader
from mediatags.tags.media_tag_reader import MediaTagReader, filter_tags
from mediatags.tags.models import ByteRange, TagResult

logger = get_logger(__name__)


TAG_SIZE = 128

# Winamp-extended genre list, index 0-147
GENRES = (
    "Blues", "Classic Rock", "Country", "Dance", "Disco", "Funk", "Grunge",
    "Hip-Hop", "Jazz", "Metal", "New Age", "Oldies", "Other", "Pop", "R&B",
    "Rap", "Reggae", "Rock", "Techno", "Industrial", "Alternative", "Ska",
    "Death Metal", "Pranks", "Soundtrack", "Euro-Techno", "Ambient",
    "Trip-Hop", "Vocal", "Jazz+Funk", "Fusion", "Trance", "Classical",
    "Instrumental", "Acid", "House", "Game", "Sound Clip", "Gospel",
    "Noise", "AlternRock", "Bass", "Soul", "Punk", "Space", "Meditative",
    "Instrumental Pop", "Instrumental Rock", "Ethnic", "Gothic",
    "Darkwave", "Techno-Industrial", "Electronic", "Pop-Folk",
    "Eurodance", "Dream", "Southern Rock", "Comedy", "Cult", "Gangsta",
    "Top 40", "Christian Rap", "Pop/Funk", "Jungle", "Native American",
    "Cabaret", "New Wave", "Psychadelic", "Rave", "Showtunes", "Trailer",
    "Lo-Fi", "Tribal", "Acid Punk", "Acid Jazz", "Polka", "Retro",
    "Musical", "Rock & Roll", "Hard Rock", "Folk", "Folk-Rock",
    "National Folk", "Swing", "Fast Fusion", "Bebob", "Latin", "Revival",
    "Celtic", "Bluegrass", "Avantgarde", "Gothic Rock", "Progressive Rock",
    "Psychedelic Rock", "Symphonic Rock", "Slow Rock", "Big Band",
    "Chorus", "Easy Listening", "Acoustic", "Humour", "Speech", "Chanson",
    "Opera", "Chamber Music", "Sonata", "Symphony", "Booty Bass", "Primus",
    "Porn Groove", "Satire", "Slow Jam", "Club", "Tango", "Samba",
    "Folklore", "Ballad", "Power Ballad", "Rhythmic Soul", "Freestyle",
    "Duet", "Punk Rock", "Drum Solo", "Acapella", "Euro-House", "Dance Hall",
    "Goa", "Drum & Bass", "Club-House", "Hardcore Techno", "Terror",
    "Indie", "BritPop", "Afro-Punk", "Polsk Punk", "Beat",
    "Christian Gangsta Rap", "Heavy Metal", "Black Metal", "Crossover",
    "Contemporary Christian", "Christian Rock", "Merengue", "Salsa",
    "Thrash Metal", "Anime", "Jpop", "Synthpop",
)


class ID3v1TagReader(MediaTagReader):
    """Reads the 128-byte ID3v1/ID3v1.1 trailer."""

    name = "id3v1"

    @classmethod
    def get_tag_identifier_byte_range(cls) -> ByteRange:
        return ByteRange(offset=-TAG_SIZE, length=TAG_SIZE)

    @classmethod
    def can_read_tag_format(cls, tag_identifier: bytes) -> bool:
        return bytes(tag_identifier[:3]) == b"TAG"

    async def _load_data(self, media_file_reader: MediaFileReader) -> None:
        file_size = media_file_reader.get_size()
        await media_file_reader.load_range(file_size - TAG_SIZE, file_size - 1)

    def _parse_data(self, media_file_reader: MediaFileReader, tags: list[str] | None) -> TagResult:
        offset = media_file_reader.get_size() - TAG_SIZE

        def read_text(field_offset: int, length: int) -> str:
            return str(media_file_reader.get_string_with_charset_at(offset + field_offset, length))

        title = read_text(3, 30)
        artist = read_text(33, 30)
        album = read_text(63, 30)
        year = read_text(93, 4)

        track = 0
        is_v11 = (
            media_file_reader.get_byte_at(offset + 97 + 28) == 0
            and media_file_reader.get_byte_at(offset + 97 + 29) != 0
        )
        if is_v11:
            version = "1.1"
            comment = read_text(97, 28)
            track = media_file_reader.get_byte_at(offset + 97 + 29)
        else:
            version = "1.0"
            comment = read_text(97, 30)

        result_tags: dict = {
            "title": title,
            "artist": artist,
            "album": album,
            "year": year,
            "comment": comment,
        }

        genre_index = media_file_reader.get_byte_at(offset + 127)
        if genre_index < len(GENRES):
            result_tags["genre"] = GENRES[genre_index]
        elif genre_index != 255:
            logger.debug(f"Ignoring unknown ID3v1 genre index {genre_index}")

        if track:
            result_tags["track"] = track

        return TagResult(type="ID3", version=version, tags=filter_tags(result_tags, tags))
