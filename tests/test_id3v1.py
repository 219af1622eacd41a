"""Tests for the ID3v1 reader"""

import pytest

from builders import id3v1_tag
from mediatags.files.array_file_reader import ArrayFileReader
from mediatags.tags.id3v1 import GENRES, ID3v1TagReader
from mediatags.tags.models import ByteRange


async def read_id3v1(data: bytes, tags=None):
    reader = ID3v1TagReader(ArrayFileReader(data))
    return await reader.set_tags_to_read(tags).read()


class TestIdentification:
    """Test format detection helpers"""

    def test_identifier_range_is_trailer(self):
        assert ID3v1TagReader.get_tag_identifier_byte_range() == ByteRange(offset=-128, length=128)

    def test_can_read_tag_format(self):
        assert ID3v1TagReader.can_read_tag_format(id3v1_tag(title="x"))
        assert not ID3v1TagReader.can_read_tag_format(b"\x00" * 128)

    def test_genre_table(self):
        assert len(GENRES) == 148
        assert GENRES[0] == "Blues"
        assert GENRES[30] == "Fusion"
        assert GENRES[147] == "Synthpop"


class TestParse:
    """Test decoding of the 128-byte trailer"""

    @pytest.mark.asyncio
    async def test_id3v11_trailer(self):
        """Track byte after a zero comment byte marks ID3v1.1"""
        data = b"\xff\xfb" * 300 + id3v1_tag(
            title="Song Title",
            artist="The Artist",
            album="The Album",
            year="1995",
            comment="A Comment",
            track=3,
            genre=30,
        )

        result = await read_id3v1(data)

        assert result.type == "ID3"
        assert result.version == "1.1"
        assert result.tags == {
            "title": "Song Title",
            "artist": "The Artist",
            "album": "The Album",
            "year": "1995",
            "comment": "A Comment",
            "track": 3,
            "genre": "Fusion",
        }

    @pytest.mark.asyncio
    async def test_id3v10_uses_full_comment(self):
        comment = "c" * 30
        result = await read_id3v1(id3v1_tag(title="T", comment=comment, genre=17))

        assert result.version == "1.0"
        assert result.tags["comment"] == comment
        assert result.tags["genre"] == "Rock"
        assert "track" not in result.tags

    @pytest.mark.asyncio
    async def test_genre_255_is_not_emitted(self):
        result = await read_id3v1(id3v1_tag(title="T", genre=255))
        assert "genre" not in result.tags

    @pytest.mark.asyncio
    async def test_unknown_genre_index_is_not_emitted(self):
        result = await read_id3v1(id3v1_tag(title="T", genre=200))
        assert "genre" not in result.tags

    @pytest.mark.asyncio
    async def test_fields_are_latin1_and_null_trimmed(self):
        result = await read_id3v1(id3v1_tag(title="Café", artist="x" * 30))
        assert result.tags["title"] == "Café"
        assert result.tags["artist"] == "x" * 30

    @pytest.mark.asyncio
    async def test_requested_tags_only(self):
        result = await read_id3v1(id3v1_tag(title="T", artist="A", track=1), tags=["title", "track"])
        assert result.tags == {"title": "T", "track": 1}
