"""
crypto.py — the primitives the Signer is built on.

Why this exists:
- Keep the AEAD cipher and the random source behind two tiny objects so the
  Signer never touches libsodium or os.urandom directly, and tests can swap
  in a deterministic random source.
- Use URL-safe Base64 without '=' padding so keys and tokens drop cleanly
  into URLs, cookies and env vars.
- Enforce 32-byte keys everywhere so we don't end up with truncated keys.

Notes:
- The cipher is XChaCha20-Poly1305 (IETF) from libsodium via PyNaCl. The
  24-byte nonce is large enough to draw at random for every token.
- Functions return/accept bytes for raw data and str for Base64url strings.
"""

import base64
import binascii
import logging
import os
import re
from pathlib import Path
from typing import Union

from nacl import bindings
from nacl.exceptions import CryptoError

from .errors import AuthenticationFailed, InvalidKeyLength, RandomSourceError

log = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

KEY_SIZE = bindings.crypto_aead_xchacha20poly1305_ietf_KEYBYTES  # 32
NONCE_SIZE = bindings.crypto_aead_xchacha20poly1305_ietf_NPUBBYTES  # 24
TAG_SIZE = bindings.crypto_aead_xchacha20poly1305_ietf_ABYTES  # 16

_B64URL_CHARS = re.compile(rb"[A-Za-z0-9_-]*")

# -----------------------------
# Base64 URL helpers (no padding)
# -----------------------------

def b64url_encode(data: bytes) -> str:
    """URL-safe Base64 without '=' padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(data: str) -> bytes:
    """
    Decode URL-safe, unpadded Base64 back to bytes.

    Raises ValueError on characters outside the URL-safe alphabet or on an
    impossible length (one leftover character).
    """
    if isinstance(data, str):
        data = data.strip()
        try:
            raw = data.encode("ascii")
        except UnicodeEncodeError as exc:
            raise ValueError("non-ASCII character in Base64 text") from exc
    else:
        raw = bytes(data).strip()
    if not _B64URL_CHARS.fullmatch(raw):
        raise ValueError("character outside the URL-safe Base64 alphabet")
    if len(raw) % 4 == 1:
        raise ValueError("invalid Base64 length")
    # Put the padding back so the decoder is happy.
    raw += b"=" * ((-len(raw)) % 4)
    try:
        return base64.urlsafe_b64decode(raw)
    except binascii.Error as exc:
        raise ValueError(f"invalid Base64: {exc}") from exc


# -------------
# Key utils
# -------------

def enforce_key_size(key) -> bytes:
    """
    Check the key is bytes-like and exactly KEY_SIZE long, return it as bytes.
    Shorter or longer keys are never padded or truncated.
    """
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise TypeError(f"Key must be bytes-like, got {type(key).__name__}.")
    key = bytes(key)
    if len(key) != KEY_SIZE:
        raise InvalidKeyLength(len(key), KEY_SIZE)
    return key


def generate_key() -> bytes:
    """Fresh random 32-byte secret key."""
    return os.urandom(KEY_SIZE)


def export_key_b64url(key: bytes) -> str:
    """Base64url form of a key, for env vars and command lines."""
    return b64url_encode(enforce_key_size(key))


def import_key_b64url(data: str) -> bytes:
    """Inverse of export_key_b64url()."""
    return enforce_key_size(b64url_decode(data))


def write_key_file(path: Union[str, Path], key: bytes) -> Path:
    """
    Write the raw key bytes to `path` with owner-only permissions.

    Refuses to overwrite an existing file (FileExistsError), since that
    would silently invalidate every token signed with the old key.
    """
    key = enforce_key_size(key)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(key)
    log.debug("wrote %d-byte key to %s", KEY_SIZE, path)
    return path


def load_key_file(path: Union[str, Path]) -> bytes:
    """Load a raw key written by write_key_file()."""
    with open(path, "rb") as f:
        return enforce_key_size(f.read())


# -----------------------------
# Random source
# -----------------------------

class SystemRandom:
    """CSPRNG backed by os.urandom. Fills the whole buffer or raises."""

    def fill(self, buffer: bytearray) -> None:
        try:
            buffer[:] = os.urandom(len(buffer))
        except (OSError, NotImplementedError) as exc:
            raise RandomSourceError(f"system random source unavailable: {exc}") from exc


# -----------------------------
# AEAD cipher
# -----------------------------

class XChaCha20Poly1305:
    """
    XChaCha20-Poly1305 bound to one key.

    Holds nothing but the immutable key bytes, so one instance can be
    shared by any number of threads.
    """

    __slots__ = ("_key",)

    key_size = KEY_SIZE
    nonce_size = NONCE_SIZE
    tag_size = TAG_SIZE

    def __init__(self, key: BytesLike) -> None:
        self._key = enforce_key_size(key)

    def __repr__(self) -> str:
        # never print the key
        return f"{type(self).__name__}(<{KEY_SIZE}-byte key>)"

    def seal(self, nonce: bytes, plaintext: bytes, associated_data: bytes) -> bytes:
        """Encrypt `plaintext` and return ciphertext with the 16-byte tag appended."""
        return bindings.crypto_aead_xchacha20poly1305_ietf_encrypt(
            bytes(plaintext), bytes(associated_data), bytes(nonce), self._key
        )

    def open(self, nonce: bytes, sealed: bytes, associated_data: bytes) -> bytes:
        """
        Check the tag and decrypt. Returns the plaintext or raises
        AuthenticationFailed; never returns partial output.
        """
        if len(sealed) < TAG_SIZE:
            raise AuthenticationFailed()
        try:
            return bindings.crypto_aead_xchacha20poly1305_ietf_decrypt(
                bytes(sealed), bytes(associated_data), bytes(nonce), self._key
            )
        except CryptoError:
            raise AuthenticationFailed() from None


__all__ = [
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "b64url_encode",
    "b64url_decode",
    "enforce_key_size",
    "generate_key",
    "export_key_b64url",
    "import_key_b64url",
    "write_key_file",
    "load_key_file",
    "SystemRandom",
    "XChaCha20Poly1305",
]
