"""
sealtok — compact sealed tokens (XChaCha20-Poly1305).

A token carries an arbitrary payload, encrypted and authenticated under a
single 32-byte secret key. Only holders of the key can read it, and any
change to a single bit is detected on verify.

Wire format: 'A' || 24-byte nonce || ciphertext || 16-byte tag.

NOT PROVIDED (do it one level up if you need it):
- Expiry, claims or revocation: put them in the payload.
- Replay protection: a token stays valid for as long as the key does.
- Several keys at once, or algorithm negotiation.

Set SEALTOK_KEY (or SEALTOK_KEY_PATH) before using the command line.
"""
from .crypto import generate_key, load_key_file, write_key_file
from .errors import (
    AuthenticationFailed,
    InvalidKeyLength,
    InvalidNonceLength,
    MalformedToken,
    RandomSourceError,
    SealtokError,
    TokenError,
    TokenTooShort,
)
from .signer import (
    AUTO,
    HEADER_SIZE,
    KEY_SIZE,
    NONCE_SIZE,
    OVERHEAD,
    TAG_SIZE,
    VERSION,
    FixedNonce,
    Signer,
)

__all__ = [
    "Signer",
    "AUTO",
    "FixedNonce",
    "generate_key",
    "load_key_file",
    "write_key_file",
    "VERSION",
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "HEADER_SIZE",
    "OVERHEAD",
    "SealtokError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "RandomSourceError",
    "TokenError",
    "TokenTooShort",
    "MalformedToken",
    "AuthenticationFailed",
]
