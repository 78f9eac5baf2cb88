"""
signer.py — issue and verify sealed tokens.

A token is `version || nonce || XChaCha20-Poly1305(message)`, with the
25-byte header (version + nonce) authenticated as associated data. The
holder of the key can read the message and check it wasn't modified;
anyone else just sees opaque bytes.

Typical usage:
    signer = Signer(key)                 # key: 32 secret bytes
    token = signer.sign(b"user=42")      # fresh random nonce
    signer.verify(token)                 # -> b"user=42"

Nonces:
- AUTO (the default) draws 24 fresh bytes from the random source for
  every token. This is what you want almost always.
- FixedNonce(...) reuses a caller-chosen nonce so the exact same token can
  be regenerated later. Never use the same nonce with a different message
  under the same key; that breaks both secrecy and integrity.

The version byte is authenticated but not used to pick a code path. If
another token format is ever added, verify() has to branch on token[0]
*before* choosing cipher parameters.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .crypto import (
    KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    BytesLike,
    SystemRandom,
    XChaCha20Poly1305,
    load_key_file,
)
from .errors import AuthenticationFailed, InvalidNonceLength, RandomSourceError
from .framing import HEADER_SIZE, OVERHEAD, VERSION, pack_header, split_token, text_to_token, token_to_text

log = logging.getLogger(__name__)


# -------------------------
# Nonce choice
# -------------------------

class AutoNonce:
    """Draw a fresh nonce from the signer's random source. Use the AUTO singleton."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "AUTO"


AUTO = AutoNonce()


@dataclass(frozen=True)
class FixedNonce:
    """
    A caller-supplied nonce, for regenerating a token deterministically.

    The caller is responsible for never pairing this nonce with a different
    message under the same key.
    """
    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Nonce must be bytes-like, got {type(self.value).__name__}.")
        value = bytes(self.value)
        if len(value) != NONCE_SIZE:
            raise InvalidNonceLength(len(value), NONCE_SIZE)
        object.__setattr__(self, "value", value)

    def __repr__(self) -> str:
        return f"FixedNonce(<{NONCE_SIZE} bytes>)"


Nonce = Union[AutoNonce, FixedNonce]


def _as_nonce(nonce) -> Nonce:
    """Accept AUTO, None (same as AUTO), a FixedNonce, or raw bytes."""
    if nonce is None or isinstance(nonce, AutoNonce):
        return AUTO
    if isinstance(nonce, FixedNonce):
        return nonce
    return FixedNonce(nonce)


def _as_bytes(message) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    if not isinstance(message, (bytes, bytearray, memoryview)):
        # bytes(int) would silently produce zeros
        raise TypeError(f"Message must be bytes or str, got {type(message).__name__}.")
    return bytes(message)


# -------------------------
# Signer
# -------------------------

class Signer:
    """
    Signs and verifies tokens under one secret key.

    Immutable after construction: the only state is the cipher (which holds
    the key) and the random source. Every sign() builds its header in its
    own local object, so one Signer can be shared across threads.
    """

    __slots__ = ("_aead", "_random")

    def __init__(self, key: BytesLike, random_source=None) -> None:
        """
        Args:
            key:           exactly 32 secret bytes.
            random_source: anything with fill(bytearray); defaults to
                           os.urandom via SystemRandom.

        Raises:
            InvalidKeyLength: if len(key) != 32.
            TypeError:        if key isn't bytes-like.
        """
        object.__setattr__(self, "_aead", XChaCha20Poly1305(key))
        object.__setattr__(self, "_random", random_source if random_source is not None else SystemRandom())
        log.debug("signer ready (random source: %s)", type(self._random).__name__)

    @classmethod
    def from_key_file(cls, path: Union[str, Path], random_source=None) -> "Signer":
        """Build a Signer from a raw 32-byte key file."""
        return cls(load_key_file(path), random_source=random_source)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={VERSION!r})"

    # ---- sign ----

    def sign(self, message: Union[BytesLike, str], nonce: Optional[Nonce] = AUTO) -> bytes:
        """
        Seal `message` into a token.

        Args:
            message: payload bytes (str is UTF-8 encoded). May be empty.
            nonce:   AUTO (default) for a fresh random nonce, or a
                     FixedNonce / raw 24 bytes to reproduce a token.

        Returns:
            HEADER_SIZE + len(message) + TAG_SIZE bytes.

        Raises:
            RandomSourceError:  the random source failed (AUTO only).
            InvalidNonceLength: a supplied nonce isn't 24 bytes.
        """
        choice = _as_nonce(nonce)
        if isinstance(choice, FixedNonce):
            nonce_bytes = choice.value
        else:
            nonce_bytes = self._make_nonce()
        return self._seal(_as_bytes(message), nonce_bytes)

    def sign_text(self, message: Union[BytesLike, str], nonce: Optional[Nonce] = AUTO) -> str:
        """Like sign(), but returns the token as URL-safe Base64 text."""
        return token_to_text(self.sign(message, nonce))

    def _make_nonce(self) -> bytes:
        buf = bytearray(NONCE_SIZE)
        try:
            self._random.fill(buf)
        except RandomSourceError:
            raise
        except (OSError, NotImplementedError) as exc:
            raise RandomSourceError(f"random source failed: {exc}") from exc
        if len(buf) != NONCE_SIZE:
            raise RandomSourceError(f"random source returned {len(buf)} bytes, wanted {NONCE_SIZE}")
        return bytes(buf)

    def _seal(self, message: bytes, nonce: bytes) -> bytes:
        header = pack_header(nonce)
        token = header + self._aead.seal(nonce, message, header)
        log.debug("signed %d-byte message into %d-byte token", len(message), len(token))
        return token

    # ---- verify ----

    def verify(self, token: BytesLike) -> bytes:
        """
        Check and decrypt a token. Returns the original message bytes.

        Raises:
            TokenTooShort:        fewer than 25 bytes; nothing is decrypted.
            AuthenticationFailed: wrong key, tampering, or garbage. Same
                                  error for every cause.
        """
        header, nonce, sealed = split_token(token)
        try:
            message = self._aead.open(nonce, sealed, header)
        except AuthenticationFailed:
            log.warning("token failed authentication (%d bytes)", len(header) + len(sealed))
            raise
        return message

    def verify_text(self, text: str) -> bytes:
        """Like verify(), but takes the URL-safe Base64 form."""
        return self.verify(text_to_token(text))


__all__ = [
    "AUTO",
    "AutoNonce",
    "FixedNonce",
    "Nonce",
    "Signer",
    "VERSION",
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "HEADER_SIZE",
    "OVERHEAD",
]
