"""Tests for synchsafe integers and unsynchronisation"""

import pytest

from mediatags.files.binary import (
    SYNCHSAFE_MAX,
    decode_synchsafe_integer,
    deunsynchronise,
    encode_synchsafe_integer,
    unsynchronise,
)


class TestSynchsafe:
    """Test synchsafe integer coding"""

    def test_decode(self):
        assert decode_synchsafe_integer(b"\x00\x00\x02\x01") == 257
        assert decode_synchsafe_integer(b"\x7f\x7f\x7f\x7f") == SYNCHSAFE_MAX

    def test_decode_ignores_high_bits(self):
        assert decode_synchsafe_integer(b"\x80\x80\x82\x81") == 257

    def test_encode(self):
        assert encode_synchsafe_integer(0) == b"\x00\x00\x00\x00"
        assert encode_synchsafe_integer(257) == b"\x00\x00\x02\x01"
        assert encode_synchsafe_integer(SYNCHSAFE_MAX) == b"\x7f\x7f\x7f\x7f"

    @pytest.mark.parametrize("value", [0, 1, 127, 128, 16383, 16384, 2097151, 2097152, SYNCHSAFE_MAX])
    def test_encoded_bytes_never_set_high_bit(self, value):
        encoded = encode_synchsafe_integer(value)
        assert all(byte < 0x80 for byte in encoded)
        assert decode_synchsafe_integer(encoded) == value

    @pytest.mark.parametrize("value", [-1, SYNCHSAFE_MAX + 1])
    def test_encode_out_of_range(self, value):
        with pytest.raises(ValueError):
            encode_synchsafe_integer(value)


class TestUnsynchronisation:
    """Test 0xFF 0x00 insertion and removal"""

    def test_unsynchronise(self):
        assert unsynchronise(b"\x01\x02\xff\x03") == b"\x01\x02\xff\x00\x03"
        assert unsynchronise(b"\xff\xff") == b"\xff\x00\xff\x00"

    def test_deunsynchronise(self):
        assert deunsynchronise(b"\x01\x02\xff\x00\x03\x04\x05") == b"\x01\x02\xff\x03\x04\x05"

    def test_deunsynchronise_keeps_other_zeros(self):
        assert deunsynchronise(b"\x00\xff\x01\x00") == b"\x00\xff\x01\x00"

    @pytest.mark.parametrize("data", [
        b"",
        b"\x01\x02\x03",
        b"\xff" * 7,
        b"\xff\x00\x00",
        bytes(range(256)) * 2,
    ])
    def test_deunsynchronise_undoes_unsynchronise(self, data):
        assert deunsynchronise(unsynchronise(data)) == data
