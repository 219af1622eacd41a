"""Tests for the ID3v2 reader and frame decoders"""

import pytest

from builders import (
    comment_payload,
    encode_text,
    id3v2_frame,
    id3v2_tag,
    picture_payload,
    text_payload,
)
from mediatags.core.exceptions import MalformedStructureError
from mediatags.files.array_file_reader import ArrayFileReader
from mediatags.files.binary import encode_synchsafe_integer, unsynchronise
from mediatags.tags.id3v2 import ID3v2TagReader
from mediatags.tags.id3v2_frames import (
    get_frame_reader_function,
    read_frame_flags,
    read_text_frame,
    read_url_frame,
)
from mediatags.tags.models import Frame

AUDIO = b"\xff\xfb\x90\x00" * 64


async def read_id3v2(data: bytes, tags=None):
    reader = ID3v2TagReader(ArrayFileReader(data))
    return await reader.set_tags_to_read(tags).read()


class TestHeader:
    """Test tag header decoding"""

    def test_can_read_tag_format(self):
        assert ID3v2TagReader.can_read_tag_format(b"ID3\x04\x00\x00\x00\x00\x00\x00")
        assert not ID3v2TagReader.can_read_tag_format(b"fLaC\x00\x00\x00\x00\x00\x00")

    @pytest.mark.asyncio
    async def test_header_fields(self):
        data = id3v2_tag(id3v2_frame("TIT2", text_payload("Hello")), padding=20) + AUDIO
        result = await read_id3v2(data)

        assert result.type == "ID3"
        assert result.version == "2.4.0"
        assert result.header.major == 4
        assert result.header.revision == 0
        assert result.header.size == 10 + 6 + 20
        assert not result.header.flags.unsynchronisation
        assert not result.header.flags.extended_header

    @pytest.mark.asyncio
    async def test_version_above_24_returns_empty_tags(self):
        data = b"ID3\x05\x00\x00" + encode_synchsafe_integer(100) + b"\x00" * 100
        result = await read_id3v2(data)

        assert result.type == "ID3"
        assert result.version == ">2.4"
        assert result.tags == {}

    @pytest.mark.asyncio
    async def test_declared_size_beyond_file_is_malformed(self):
        data = b"ID3\x04\x00\x00" + encode_synchsafe_integer(1000) + b"\x00" * 50
        with pytest.raises(MalformedStructureError):
            await read_id3v2(data)

    @pytest.mark.asyncio
    async def test_v24_extended_header_is_skipped(self):
        extended_header = encode_synchsafe_integer(6) + b"\x01\x00"
        data = id3v2_tag(extended_header + id3v2_frame("TIT2", text_payload("Title")), flags=0x40) + AUDIO
        result = await read_id3v2(data)

        assert result.header.flags.extended_header
        assert result.tags["title"] == "Title"

    @pytest.mark.asyncio
    async def test_v23_extended_header_is_skipped(self):
        extended_header = (6).to_bytes(4, "big") + b"\x00" * 6
        frames = id3v2_frame("TIT2", text_payload("Title"), major=3)
        data = id3v2_tag(extended_header + frames, major=3, flags=0x40) + AUDIO
        result = await read_id3v2(data)

        assert result.version == "2.3.0"
        assert result.tags["title"] == "Title"


class TestFrameWalk:
    """Test walking the frame list"""

    @pytest.mark.asyncio
    async def test_text_frames_and_shortcuts(self):
        frames = (
            id3v2_frame("TIT2", text_payload("Title", encoding=3))
            + id3v2_frame("TPE1", text_payload("Artist", encoding=1))
            + id3v2_frame("TALB", text_payload("Album", encoding=2))
            + id3v2_frame("TRCK", text_payload("4/12"))
        )
        result = await read_id3v2(id3v2_tag(frames, padding=64) + AUDIO)

        assert result.tags["title"] == "Title"
        assert result.tags["artist"] == "Artist"
        assert result.tags["album"] == "Album"
        assert result.tags["track"] == "4/12"
        assert result.tags["TIT2"] == Frame(
            id="TIT2",
            size=6,
            description="Title/songname/content description",
            data="Title",
        )

    @pytest.mark.asyncio
    async def test_v23_frame_sizes_are_plain_integers(self):
        """A 200-byte payload has a different synchsafe and plain encoding"""
        title = "x" * 199
        frames = id3v2_frame("TIT2", text_payload(title), major=3) + id3v2_frame("TPE1", text_payload("A"), major=3)
        result = await read_id3v2(id3v2_tag(frames, major=3) + AUDIO)

        assert result.tags["title"] == title
        assert result.tags["artist"] == "A"

    @pytest.mark.asyncio
    async def test_v22_frames(self):
        frames = (
            id3v2_frame("TT2", text_payload("Old Title"), major=2)
            + id3v2_frame("TP1", text_payload("Old Artist"), major=2)
            + id3v2_frame("PIC", picture_payload(b"\x89PNG", mime="PNG", major=2), major=2)
        )
        result = await read_id3v2(id3v2_tag(frames, major=2, padding=10) + AUDIO)

        assert result.version == "2.2.0"
        assert result.tags["title"] == "Old Title"
        assert result.tags["artist"] == "Old Artist"
        assert "TPE1" not in result.tags
        assert result.tags["picture"]["format"] == "PNG"
        assert result.tags["picture"]["data"] == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_duplicate_frames_keep_first_for_shortcut(self):
        frames = id3v2_frame("TIT2", text_payload("First")) + id3v2_frame("TIT2", text_payload("Second"))
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["title"] == "First"
        assert [frame.data for frame in result.tags["TIT2"]] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_mp3ext_padding_stops_walk(self):
        """Garbage written into the padding is not read as a frame"""
        frames = id3v2_frame("TPE1", text_payload("Artist"), major=3)
        padding_garbage = b"MP3ext V3.3.19(ansi)" * 4
        result = await read_id3v2(id3v2_tag(frames + padding_garbage, major=3) + AUDIO)

        assert result.tags["artist"] == "Artist"
        assert "MP3e" not in result.tags
        assert set(result.tags) == {"artist", "TPE1"}

    @pytest.mark.asyncio
    async def test_frame_overrunning_tag_stops_walk(self, caplog):
        frames = (
            id3v2_frame("TPE1", text_payload("Artist"))
            + id3v2_frame("TALB", text_payload("Album"), size=500)
        )
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["artist"] == "Artist"
        assert "TALB" not in result.tags
        assert "declares 500 bytes" in caplog.text

    @pytest.mark.asyncio
    async def test_unreadable_frame_is_skipped(self, caplog):
        """A counter frame too short for its 32-bit value, at the very end of the file"""
        frames = id3v2_frame("TPE1", text_payload("Artist")) + id3v2_frame("PCNT", b"\x01\x02")
        result = await read_id3v2(id3v2_tag(frames))

        assert result.tags["artist"] == "Artist"
        assert "PCNT" not in result.tags
        assert "Skipping unreadable PCNT frame" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_frame_keeps_none(self):
        frames = id3v2_frame("PRIV", b"owner\x00\x01\x02") + id3v2_frame("TIT2", text_payload("T"))
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["PRIV"].data is None
        assert result.tags["PRIV"].description == "Private frame"
        assert result.tags["title"] == "T"

    @pytest.mark.asyncio
    async def test_empty_text_frame(self):
        frames = id3v2_frame("TIT2", b"") + id3v2_frame("TPE1", text_payload("Artist"))
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["TIT2"].data is None
        assert "title" not in result.tags
        assert result.tags["artist"] == "Artist"

    @pytest.mark.asyncio
    async def test_requested_tags(self):
        frames = (
            id3v2_frame("TIT2", text_payload("Title"))
            + id3v2_frame("TPE1", text_payload("Artist"))
            + id3v2_frame("TXXX", bytes([0]) + b"KEY\x00value")
        )
        result = await read_id3v2(id3v2_tag(frames) + AUDIO, tags=["title", "TXXX"])

        assert set(result.tags) == {"title", "TIT2", "TXXX"}


class TestUnsynchronisation:
    """Test tag-level and frame-level unsynchronisation"""

    @pytest.mark.asyncio
    async def test_tag_unsynchronisation(self):
        image = bytes([1, 2, 255, 3, 4, 5])
        frame = id3v2_frame("APIC", picture_payload(image))
        body = unsynchronise(frame)
        assert b"\x01\x02\xff\x00\x03\x04\x05" in body

        result = await read_id3v2(id3v2_tag(body, flags=0x80) + AUDIO)

        assert result.header.flags.unsynchronisation
        assert result.tags["picture"]["data"] == image

    @pytest.mark.asyncio
    async def test_frame_unsynchronisation(self):
        image = bytes([1, 2, 255, 3, 4, 5])
        payload = unsynchronise(picture_payload(image))
        frames = id3v2_frame("APIC", payload, flags=b"\x00\x02") + id3v2_frame("TIT2", text_payload("T"))
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["picture"]["data"] == image
        assert result.tags["title"] == "T"

    @pytest.mark.asyncio
    async def test_frame_unsynchronisation_v23(self):
        payload = unsynchronise(text_payload("a\xffb"))
        frames = id3v2_frame("TIT2", payload, major=3, flags=b"\x00\x02")
        frames += id3v2_frame("TPE1", text_payload("Artist"), major=3)
        result = await read_id3v2(id3v2_tag(frames, major=3) + AUDIO)

        assert payload == b"\x00a\xff\x00b"
        assert result.tags["title"] == "a\xffb"
        assert result.tags["artist"] == "Artist"

    def test_v23_format_flags(self):
        flags = read_frame_flags(ArrayFileReader(b"\x00\x03"), 0, 3)

        assert flags.format.unsynchronisation
        assert flags.format.data_length_indicator
        assert not flags.format.compression
        assert not flags.format.encryption

    @pytest.mark.asyncio
    async def test_frame_flag_ignored_when_tag_is_unsynchronised(self):
        """Bytes that read FF 00 after tag-level decoding are not collapsed again"""
        image = b"\x01\xff\x00\x02"
        frame = id3v2_frame("APIC", picture_payload(image), flags=b"\x00\x02")
        result = await read_id3v2(id3v2_tag(unsynchronise(frame), flags=0x80) + AUDIO)

        assert result.tags["picture"]["data"] == image

    @pytest.mark.asyncio
    async def test_data_length_indicator(self):
        payload = text_payload("Title")
        frame = id3v2_frame("TIT2", encode_synchsafe_integer(len(payload)) + payload, flags=b"\x00\x01")
        result = await read_id3v2(id3v2_tag(frame) + AUDIO)

        assert result.tags["title"] == "Title"
        assert result.tags["TIT2"].size == len(payload)

    @pytest.mark.asyncio
    async def test_unsynchronised_frame_with_data_length_indicator(self):
        image = bytes([255, 0, 255, 1])
        payload = picture_payload(image)
        raw = unsynchronise(encode_synchsafe_integer(len(payload)) + payload)
        result = await read_id3v2(id3v2_tag(id3v2_frame("APIC", raw, flags=b"\x00\x03")) + AUDIO)

        assert result.tags["picture"]["data"] == image


class TestFrameDecoders:
    """Test the per-frame payload decoders"""

    @pytest.mark.asyncio
    async def test_picture_frame(self):
        image = b"\xff\xd8\xff\xe0JFIF"
        payload = picture_payload(image, mime="image/jpeg", picture_type=4, description="back", encoding=1)
        result = await read_id3v2(id3v2_tag(id3v2_frame("APIC", payload)) + AUDIO)

        assert result.tags["picture"] == {
            "format": "image/jpeg",
            "type": "Cover (back)",
            "description": "back",
            "data": image,
        }

    @pytest.mark.asyncio
    async def test_picture_type_out_of_range(self):
        payload = picture_payload(b"img", picture_type=99)
        result = await read_id3v2(id3v2_tag(id3v2_frame("APIC", payload)) + AUDIO)
        assert result.tags["picture"]["type"] == "Unknown"

    @pytest.mark.asyncio
    async def test_genre_reference_prefix_is_stripped(self):
        frames = id3v2_frame("TCON", text_payload("(17)Rock"))
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)
        assert result.tags["genre"] == "Rock"

    @pytest.mark.asyncio
    async def test_comment_frame(self):
        payload = comment_payload("Nice track", description="short", language="eng", encoding=1)
        result = await read_id3v2(id3v2_tag(id3v2_frame("COMM", payload)) + AUDIO)

        assert result.tags["comment"] == {
            "language": "eng",
            "short_description": "short",
            "text": "Nice track",
        }

    @pytest.mark.asyncio
    async def test_lyrics_frame(self):
        payload = comment_payload("La la la", description="", language="fra", encoding=3)
        result = await read_id3v2(id3v2_tag(id3v2_frame("USLT", payload)) + AUDIO)

        assert result.tags["lyrics"] == {
            "language": "fra",
            "descriptor": "",
            "lyrics": "La la la",
        }

    @pytest.mark.asyncio
    async def test_user_text_and_url_frames(self):
        frames = (
            id3v2_frame("TXXX", bytes([3]) + encode_text("MOOD", 3, terminate=True) + encode_text("calm", 3))
            + id3v2_frame("WXXX", bytes([0]) + b"site\x00http://example.com")
            + id3v2_frame("WOAR", b"http://artist.example.com")
        )
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["TXXX"].data == {"user_description": "MOOD", "data": "calm"}
        assert result.tags["WXXX"].data == {"user_description": "site", "data": "http://example.com"}
        assert result.tags["WOAR"].data == "http://artist.example.com"

    @pytest.mark.asyncio
    async def test_unique_file_id_and_counter(self):
        frames = (
            id3v2_frame("UFID", b"http://musicbrainz.org\x00abc-123")
            + id3v2_frame("PCNT", (1234).to_bytes(4, "big"))
        )
        result = await read_id3v2(id3v2_tag(frames) + AUDIO)

        assert result.tags["UFID"].data == {"owner_identifier": "http://musicbrainz.org", "identifier": b"abc-123"}
        assert result.tags["PCNT"].data == 1234

    @pytest.mark.asyncio
    async def test_chapter_frame(self):
        payload = (
            b"ch1\x00"
            + (0).to_bytes(4, "big")
            + (5000).to_bytes(4, "big")
            + (0xFFFFFFFF).to_bytes(4, "big")
            + (0xFFFFFFFF).to_bytes(4, "big")
            + id3v2_frame("TIT2", text_payload("Chapter 1"))
        )
        result = await read_id3v2(id3v2_tag(id3v2_frame("CHAP", payload)) + AUDIO)

        chapter = result.tags["CHAP"].data
        assert chapter["id"] == "ch1"
        assert chapter["start_time"] == 0
        assert chapter["end_time"] == 5000
        assert chapter["start_offset"] == 0xFFFFFFFF
        assert chapter["sub_frames"]["TIT2"].data == "Chapter 1"

    @pytest.mark.asyncio
    async def test_table_of_contents_frame(self):
        payload = (
            b"toc\x00"
            + bytes([0x03, 2])
            + b"ch1\x00ch2\x00"
            + id3v2_frame("TIT2", text_payload("Contents"))
        )
        result = await read_id3v2(id3v2_tag(id3v2_frame("CTOC", payload)) + AUDIO)

        toc = result.tags["CTOC"].data
        assert toc["id"] == "toc"
        assert toc["top_level"] is True
        assert toc["ordered"] is True
        assert toc["entry_count"] == 2
        assert toc["child_element_ids"] == ["ch1", "ch2"]
        assert toc["sub_frames"]["TIT2"].data == "Contents"

    def test_decoder_dispatch(self):
        assert get_frame_reader_function("TIT2") is read_text_frame
        assert get_frame_reader_function("TXYZ") is read_text_frame
        assert get_frame_reader_function("WCOM") is read_url_frame
        assert get_frame_reader_function("TXXX") is not read_text_frame
        assert get_frame_reader_function("GEOB") is None
