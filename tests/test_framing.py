"""Tests for sealtok/framing.py: header packing, splitting and text form."""
import pytest

from sealtok import framing
from sealtok.errors import MalformedToken, TokenTooShort


class TestHeader:

    def test_sizes(self):
        assert framing.HEADER_SIZE == 25
        assert framing.OVERHEAD == 41

    def test_pack_header(self):
        nonce = bytes(range(24))
        assert framing.pack_header(nonce) == b"A" + nonce

    def test_pack_header_returns_new_objects(self):
        a = framing.pack_header(bytes(24))
        b = framing.pack_header(b"\x01" * 24)
        assert a != b
        assert a == b"A" + bytes(24)

    @pytest.mark.parametrize("size", [0, 23, 25])
    def test_pack_header_rejects_bad_nonce(self, size):
        with pytest.raises(ValueError):
            framing.pack_header(bytes(size))


class TestSplit:

    def test_split(self):
        nonce = bytes(range(24))
        token = b"A" + nonce + b"body-and-tag"
        header, got_nonce, sealed = framing.split_token(token)
        assert header == b"A" + nonce
        assert got_nonce == nonce
        assert sealed == b"body-and-tag"

    def test_split_header_only(self):
        header, nonce, sealed = framing.split_token(b"A" + bytes(24))
        assert sealed == b""

    def test_version_not_checked(self):
        header, _, _ = framing.split_token(b"Z" + bytes(24))
        assert header[:1] == b"Z"

    @pytest.mark.parametrize("size", [0, 1, 24])
    def test_too_short(self, size):
        with pytest.raises(TokenTooShort):
            framing.split_token(bytes(size))


class TestText:

    def test_round_trip(self):
        token = b"A" + bytes(24) + b"\xff" * 21
        assert framing.text_to_token(framing.token_to_text(token)) == token

    def test_malformed(self):
        with pytest.raises(MalformedToken):
            framing.text_to_token("not base64!")
