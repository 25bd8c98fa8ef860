"""Signature extraction and row decoding for corrupted plain rows."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .errors import AllocationError, MalformedInputError
from .line_reader import TERMINATOR, RawLine

MAX_PIXEL = 255

_NEWLINE = TERMINATOR[0]
_ZERO, _NINE = ord("0"), ord("9")


def _is_digit(value: int) -> bool:
    return _ZERO <= value <= _NINE


class LineCursor:
    """Forward-only cursor over one raw line, stopping at its terminator."""

    def __init__(self, line: RawLine):
        if line.released:
            raise ValueError("raw line used after release")
        self._buffer = line.buffer
        self._end = line.length
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def at_terminator(self) -> bool:
        return self._pos >= self._end or self._buffer[self._pos] == _NEWLINE

    def peek(self) -> int:
        return self._buffer[self._pos]

    def advance(self) -> int:
        value = self._buffer[self._pos]
        self._pos += 1
        return value

    def span(self, start: int) -> bytes:
        return bytes(self._buffer[start:self._pos])


def signature_of(raw_line: RawLine) -> Tuple[bytes, int]:
    """Ordered non-digit bytes of the line and how many there are."""
    cursor = LineCursor(raw_line)
    sig = bytearray()
    while not cursor.at_terminator():
        value = cursor.advance()
        if not _is_digit(value):
            sig.append(value)
    return bytes(sig), len(sig)


def _narrow(run: bytes, offset: int) -> int:
    digits = run.lstrip(b"0") or b"0"
    # A pixel must fit in one byte; out-of-range values are corrupt, not wrapped.
    if len(digits) > 3:
        raise MalformedInputError(
            f"pixel value {digits[:8].decode('ascii')}... ({len(digits)} digits) "
            f"at column {offset} exceeds {MAX_PIXEL}"
        )
    try:
        value = int(digits)
    except ValueError as exc:
        raise MalformedInputError(f"unparseable digit run {run[:16]!r} at column {offset}") from exc
    if value > MAX_PIXEL:
        raise MalformedInputError(
            f"pixel value {value} at column {offset} exceeds {MAX_PIXEL}"
        )
    return value


def decode_row(raw_line: RawLine) -> Tuple[bytes, int]:
    """Decode every maximal digit run into one pixel byte, in order."""
    cursor = LineCursor(raw_line)
    row = bytearray()
    while not cursor.at_terminator():
        if not _is_digit(cursor.peek()):
            cursor.advance()
            continue
        start = cursor.position
        while not cursor.at_terminator() and _is_digit(cursor.peek()):
            cursor.advance()
        row.append(_narrow(cursor.span(start), start))
    return bytes(row), len(row)


@dataclass(frozen=True, eq=False)
class Signature:
    """Interned signature handle; two handles are equal only if identical."""
    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return self.data.decode("latin-1")


class SignatureAtoms:
    """Canonicalizing store mapping signature bytes to one shared handle."""

    def __init__(self) -> None:
        self._atoms: Dict[bytes, Signature] = {}

    def __len__(self) -> int:
        return len(self._atoms)

    def __contains__(self, data: bytes) -> bool:
        return bytes(data) in self._atoms

    def intern(self, data: bytes) -> Signature:
        key = bytes(data)
        atom = self._atoms.get(key)
        if atom is None:
            try:
                atom = Signature(data=key)
                self._atoms[key] = atom
            except MemoryError as exc:
                raise AllocationError("cannot store another signature") from exc
        return atom

    def signature_for(self, raw_line: RawLine) -> Signature:
        sig, _ = signature_of(raw_line)
        return self.intern(sig)
