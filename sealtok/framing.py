import struct
from typing import Tuple

from .crypto import NONCE_SIZE, TAG_SIZE, b64url_decode, b64url_encode
from .errors import MalformedToken, TokenTooShort

"""
framing.py — byte layout of a token.

Layout (fixed, no length fields):
- 1 byte   version tag (ASCII 'A')
- 24 bytes nonce
- N bytes  ciphertext
- 16 bytes Poly1305 tag

The first 25 bytes (version + nonce) are the header. They go out in the
clear and are also fed to the cipher as associated data, so flipping the
version byte or the nonce breaks the tag just like flipping the body.

Text form is the same bytes as URL-safe Base64 without padding.
"""

VERSION = b"A"
HEADER_STRUCT = struct.Struct(f"c{NONCE_SIZE}s")  # version, nonce
HEADER_SIZE = HEADER_STRUCT.size  # 25
OVERHEAD = HEADER_SIZE + TAG_SIZE  # 41 bytes on top of the message


def pack_header(nonce: bytes) -> bytes:
    """
    Build version || nonce as a new bytes object.

    Each call returns its own object; nothing is shared between callers.
    """
    if len(nonce) != NONCE_SIZE:
        # struct would silently pad/truncate
        raise ValueError(f"nonce must be {NONCE_SIZE} bytes")
    return HEADER_STRUCT.pack(VERSION, bytes(nonce))


def split_token(token: bytes) -> Tuple[bytes, bytes, bytes]:
    """
    Split a token into (header, nonce, sealed).

    Raises:
        TokenTooShort: if there aren't even HEADER_SIZE bytes.

    The version byte is returned inside `header` but not checked here;
    it only matters as associated data.
    """
    # count bytes, not memoryview items
    token = bytes(token)
    if len(token) < HEADER_SIZE:
        raise TokenTooShort(f"Token too short: {len(token)} < {HEADER_SIZE}")
    header, sealed = token[:HEADER_SIZE], token[HEADER_SIZE:]
    _version, nonce = HEADER_STRUCT.unpack(header)
    return header, nonce, sealed


def token_to_text(token: bytes) -> str:
    """Token bytes -> URL-safe Base64 string."""
    return b64url_encode(token)


def text_to_token(text: str) -> bytes:
    """URL-safe Base64 string -> token bytes (not yet verified)."""
    try:
        return b64url_decode(text)
    except ValueError as exc:
        raise MalformedToken(f"Token is not valid URL-safe Base64: {exc}") from exc
