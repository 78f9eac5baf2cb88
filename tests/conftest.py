"""Shared fixtures for the sealtok tests."""
import pytest

from sealtok import Signer


class CountingRandom:
    """Deterministic random source: fills each nonce with an incrementing byte."""

    def __init__(self, start: int = 1) -> None:
        self.counter = start
        self.calls = 0

    def fill(self, buffer: bytearray) -> None:
        self.calls += 1
        buffer[:] = bytes([self.counter % 256]) * len(buffer)
        self.counter += 1


class BrokenRandom:
    """Random source that always fails, like an exhausted /dev/urandom."""

    def __init__(self, exc: Exception = None) -> None:
        self.exc = exc or OSError("entropy source unavailable")

    def fill(self, buffer: bytearray) -> None:
        raise self.exc


class ShortRandom:
    """Random source that shrinks the buffer instead of filling it."""

    def fill(self, buffer: bytearray) -> None:
        del buffer[4:]


@pytest.fixture
def zero_key() -> bytes:
    return bytes(32)


@pytest.fixture
def key() -> bytes:
    return bytes(range(32))


@pytest.fixture
def other_key() -> bytes:
    return bytes(range(1, 33))


@pytest.fixture
def signer(key) -> Signer:
    return Signer(key)


@pytest.fixture
def counting_random() -> CountingRandom:
    return CountingRandom()
