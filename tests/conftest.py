"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
from typing import Callable

import pytest


@pytest.fixture
def plain_stream() -> Callable[..., io.BytesIO]:
    """Build a binary stream from corrupted plain lines."""

    def _build(*lines: bytes) -> io.BytesIO:
        return io.BytesIO(b"".join(lines))

    return _build


@pytest.fixture
def scenario_a() -> bytes:
    """Two genuine rows sharing the signature ``ab``."""
    return b"1a2b3\n4a5b6\n"


@pytest.fixture
def scenario_a_image() -> bytes:
    return b"P5\n3 2\n255\n" + bytes([1, 2, 3, 4, 5, 6])


@pytest.fixture
def noisy_dump() -> bytes:
    """Genuine rows (signature `` , ``) interleaved with one-off noise rows."""
    return (
        b"9q8w7\n"
        b"10 , 20 , 30\n"
        b"1!2@3\n"
        b"40 , 50 , 60\n"
        b"4#5$6\n"
        b"70 , 80 , 90\n"
        b"7%8^9\n"
        b"100 , 110 , 120"
    )
