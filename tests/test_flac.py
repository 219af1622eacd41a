"""Tests for the FLAC reader"""

import pytest

from builders import STREAMINFO, flac_block, flac_file, flac_picture, vorbis_comment
from mediatags.core.exceptions import MissingRequiredBlockError
from mediatags.files.array_file_reader import ArrayFileReader
from mediatags.files.local_file_reader import LocalFileReader
from mediatags.tags.flac import FLACTagReader

COMMENTS = [
    "TITLE=A Song",
    "artist=A Band",
    "ALBUM=A Record",
    "TRACKNUMBER=7",
    "GENRE=Jazz",
    "DATE=2001",
]

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


async def read_flac(data: bytes, tags=None):
    reader = FLACTagReader(ArrayFileReader(data))
    return await reader.set_tags_to_read(tags).read()


def tagged_flac(comments=COMMENTS, audio=b"\xff\xf8" + b"\x00" * 30) -> bytes:
    return flac_file(
        flac_block(0, STREAMINFO),
        flac_block(4, vorbis_comment(comments)),
        flac_block(6, flac_picture(PNG, description="front")),
        flac_block(1, b"\x00" * 100, last=True),
        audio=audio,
    )


class TestFLAC:
    """Test Vorbis comment and picture decoding"""

    def test_can_read_tag_format(self):
        assert FLACTagReader.can_read_tag_format(b"fLaC")
        assert not FLACTagReader.can_read_tag_format(b"OggS")

    @pytest.mark.asyncio
    async def test_missing_comment_block(self):
        data = flac_file(flac_block(0, STREAMINFO, last=True))
        with pytest.raises(MissingRequiredBlockError):
            await read_flac(data)

    @pytest.mark.asyncio
    async def test_comments(self):
        result = await read_flac(tagged_flac())

        assert result.type == "FLAC"
        assert result.version == "1"
        assert result.tags["title"] == "A Song"
        assert result.tags["artist"] == "A Band"
        assert result.tags["album"] == "A Record"
        assert result.tags["track"] == "7"
        assert result.tags["genre"] == "Jazz"
        assert "DATE" not in result.tags

    @pytest.mark.asyncio
    async def test_picture(self):
        result = await read_flac(tagged_flac())

        assert result.tags["picture"] == {
            "format": "image/png",
            "type": "Cover (front)",
            "description": "front",
            "data": PNG,
        }

    @pytest.mark.asyncio
    async def test_only_present_keys_are_emitted(self):
        result = await read_flac(tagged_flac(comments=["TITLE=Only"]))
        assert set(result.tags) == {"title", "picture"}

    @pytest.mark.asyncio
    async def test_malformed_entries(self):
        """Entries without '=' are ignored; values may contain '='"""
        result = await read_flac(tagged_flac(comments=["NOSEPARATOR", "TITLE=a=b"]))
        assert result.tags["title"] == "a=b"

    @pytest.mark.asyncio
    async def test_requested_tags(self):
        result = await read_flac(tagged_flac(), tags=["title", "artist"])
        assert result.tags == {"title": "A Song", "artist": "A Band"}

    @pytest.mark.asyncio
    async def test_requested_picture(self):
        result = await read_flac(tagged_flac(), tags=["picture"])
        assert set(result.tags) == {"picture"}

    @pytest.mark.asyncio
    async def test_truncated_picture_is_skipped(self, caplog):
        truncated_picture = (3).to_bytes(4, "big") + (255).to_bytes(4, "big") + b"image"
        data = flac_file(
            flac_block(0, STREAMINFO),
            flac_block(4, vorbis_comment(["TITLE=Still Here"])),
            flac_block(6, truncated_picture, last=True),
            audio=b"",
        )
        result = await read_flac(data)

        assert result.tags == {"title": "Still Here"}
        assert "Skipping unreadable FLAC picture block" in caplog.text

    @pytest.mark.asyncio
    async def test_only_metadata_blocks_are_read_from_disk(self, write_file):
        data = tagged_flac(audio=b"\xff\xf8" + b"\x00" * 500_000)
        file_reader = LocalFileReader(write_file("song.flac", data), block_size=512)

        result = await FLACTagReader(file_reader).read()

        assert result.tags["title"] == "A Song"
        loaded = sum(len(chunk.data) for chunk in file_reader._file_data.chunks)
        assert loaded < 2048
