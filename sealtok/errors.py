"""
errors.py — the exception types sealtok raises.

Every error derives from SealtokError, and also from the stdlib (or
`cryptography`) type a caller would already be catching, so existing
`except ValueError` / `except InvalidTag` code keeps working.
"""

from cryptography.exceptions import InvalidKey, InvalidTag


class SealtokError(Exception):
    """Base class for everything raised by this package."""


class InvalidKeyLength(SealtokError, InvalidKey, ValueError):
    """The secret key is not exactly KEY_SIZE bytes."""

    def __init__(self, got: int, expected: int) -> None:
        super().__init__(f"Key must be {expected} bytes, got {got}.")
        self.got = got
        self.expected = expected


class InvalidNonceLength(SealtokError, ValueError):
    """A caller-supplied nonce is not exactly NONCE_SIZE bytes."""

    def __init__(self, got: int, expected: int) -> None:
        super().__init__(f"Nonce must be {expected} bytes, got {got}.")
        self.got = got
        self.expected = expected


class RandomSourceError(SealtokError, OSError):
    """The random source could not produce a nonce."""


class TokenError(SealtokError, ValueError):
    """Base class for anything that makes verify() reject its input."""


class TokenTooShort(TokenError):
    """Input is smaller than the fixed header; no decryption is attempted."""


class MalformedToken(TokenError):
    """The text form of a token is not valid URL-safe Base64."""


class AuthenticationFailed(TokenError, InvalidTag):
    """
    The authentication tag did not verify.

    Tampering, a wrong key and a bogus body all end up here with the same
    message. Nothing about the cause is exposed.
    """

    MESSAGE = "token authentication failed"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


__all__ = [
    "SealtokError",
    "InvalidKeyLength",
    "InvalidNonceLength",
    "RandomSourceError",
    "TokenError",
    "TokenTooShort",
    "MalformedToken",
    "AuthenticationFailed",
]
