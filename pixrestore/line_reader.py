"""
Growable line reader.

Pulls one newline-terminated line at a time out of a binary stream into a
buffer that starts small and doubles whenever it fills up, so there is no
upper bound on line length. A stream that ends without a final newline still
yields its trailing bytes as a line; the newline is supplied in that case.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, Optional

from .errors import AllocationError, StreamReadError

logger = logging.getLogger(__name__)

# --- CONFIG ---
INITIAL_CAPACITY = 1000
TERMINATOR = b"\n"
_TERMINATOR_BYTE = TERMINATOR[0]


@dataclass(eq=False)
class RawLine:
    """One line exactly as read, terminator included in ``length``."""
    buffer: bytearray
    length: int
    released: bool = field(default=False, repr=False)

    @classmethod
    def from_bytes(cls, data: bytes) -> "RawLine":
        buffer = bytearray(data)
        if not buffer or buffer[-1] != _TERMINATOR_BYTE:
            buffer.append(_TERMINATOR_BYTE)
        return cls(buffer=buffer, length=len(buffer))

    def _check_alive(self) -> None:
        if self.released:
            raise ValueError("raw line used after release")

    @property
    def content(self) -> bytes:
        """Bytes of the line without the terminator."""
        self._check_alive()
        end = self.buffer.find(TERMINATOR, 0, self.length)
        return bytes(self.buffer[: self.length if end < 0 else end])

    def __bytes__(self) -> bytes:
        self._check_alive()
        return bytes(self.buffer[: self.length])

    def __len__(self) -> int:
        return self.length

    def release(self) -> None:
        if self.released:
            return
        self.buffer = bytearray()
        self.length = 0
        self.released = True


class LineBuffer:
    """Byte buffer with explicit length that doubles its capacity on demand."""

    def __init__(self, capacity: int = INITIAL_CAPACITY):
        if capacity < 1:
            raise ValueError("initial capacity must be positive")
        try:
            self._data: Optional[bytearray] = bytearray(capacity)
        except MemoryError as exc:
            raise AllocationError(f"cannot allocate a {capacity}-byte line buffer") from exc
        self._length = 0

    @property
    def capacity(self) -> int:
        return len(self._data) if self._data is not None else 0

    def __len__(self) -> int:
        return self._length

    def append(self, value: int) -> None:
        if self._data is None:
            raise ValueError("line buffer already detached")
        if self._length == len(self._data):
            self._grow()
        self._data[self._length] = value
        self._length += 1

    def _grow(self) -> None:
        old_capacity = len(self._data)
        try:
            self._data.extend(bytes(old_capacity))
        except MemoryError as exc:
            raise AllocationError(
                f"cannot grow line buffer beyond {old_capacity} bytes"
            ) from exc
        logger.debug("line buffer grown %d -> %d bytes", old_capacity, len(self._data))

    def detach(self) -> RawLine:
        """Hand the filled prefix to the caller; the buffer is unusable afterwards."""
        if self._data is None:
            raise ValueError("line buffer already detached")
        data = self._data
        del data[self._length:]
        line = RawLine(buffer=data, length=self._length)
        self._data = None
        self._length = 0
        return line

    def release(self) -> None:
        self._data = None
        self._length = 0


def _next_byte(stream: BinaryIO) -> bytes:
    try:
        chunk = stream.read(1)
    except OSError as exc:
        raise StreamReadError(f"error reading input stream: {exc}") from exc
    if isinstance(chunk, str):
        raise TypeError("read_line() needs a binary stream")
    return chunk or b""


def read_line(stream: BinaryIO, initial_capacity: int = INITIAL_CAPACITY) -> Optional[RawLine]:
    """
    Read the next line from ``stream``.

    Returns ``None`` once the stream is exhausted and no byte was read.
    """
    buffer = LineBuffer(initial_capacity)

    while True:
        byte = _next_byte(stream)
        if not byte:
            break
        buffer.append(byte[0])
        if byte == TERMINATOR:
            return buffer.detach()

    if len(buffer) == 0:
        buffer.release()
        return None

    # Stream ended mid-line: terminate it as if the newline had been there.
    buffer.append(_TERMINATOR_BYTE)
    return buffer.detach()


def iter_lines(stream: BinaryIO, initial_capacity: int = INITIAL_CAPACITY) -> Iterator[RawLine]:
    while True:
        line = read_line(stream, initial_capacity)
        if line is None:
            return
        yield line
