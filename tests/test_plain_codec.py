"""Tests for signature extraction, row decoding and interning."""

from __future__ import annotations

import pytest

from pixrestore.errors import MalformedInputError
from pixrestore.line_reader import RawLine
from pixrestore.plain_codec import LineCursor, SignatureAtoms, decode_row, signature_of


def test_signature_of_keeps_non_digits_in_order() -> None:
    assert signature_of(RawLine.from_bytes(b"1a2b3\n")) == (b"ab", 2)
    assert signature_of(RawLine.from_bytes(b"12 , 7;;9 x\n")) == (b" , ;; x", 7)


def test_signature_of_digits_only_is_empty() -> None:
    assert signature_of(RawLine.from_bytes(b"12345\n")) == (b"", 0)


def test_decode_row_one_byte_per_digit_run() -> None:
    row, width = decode_row(RawLine.from_bytes(b"1a2b3\n"))

    assert row == bytes([1, 2, 3])
    assert width == 3


def test_decode_row_multi_digit_runs_and_leading_zeros() -> None:
    row, width = decode_row(RawLine.from_bytes(b"  255..0  007xx17\n"))

    assert row == bytes([255, 0, 7, 17])
    assert width == 4


def test_decode_row_without_digits_is_empty() -> None:
    assert decode_row(RawLine.from_bytes(b"a;b;c\n")) == (b"", 0)


def test_decode_row_rejects_values_above_255() -> None:
    with pytest.raises(MalformedInputError, match="256"):
        decode_row(RawLine.from_bytes(b"12 256 3\n"))


def test_decode_row_is_idempotent() -> None:
    line = RawLine.from_bytes(b"9z8y77\n")
    before = bytes(line)

    assert decode_row(line) == decode_row(line)
    assert bytes(line) == before


def test_scanning_stops_at_first_terminator() -> None:
    line = RawLine.from_bytes(b"12a\n34b")

    assert decode_row(line) == (bytes([12]), 1)
    assert signature_of(line) == (b"a", 1)


def test_cursor_peek_advance_and_terminator() -> None:
    cursor = LineCursor(RawLine.from_bytes(b"7a\n"))

    assert cursor.peek() == ord("7")
    assert cursor.advance() == ord("7")
    assert cursor.position == 1
    assert not cursor.at_terminator()
    cursor.advance()
    assert cursor.at_terminator()


def test_cursor_refuses_released_line() -> None:
    line = RawLine.from_bytes(b"1\n")
    line.release()

    with pytest.raises(ValueError):
        LineCursor(line)


def test_interning_returns_the_same_handle_for_equal_signatures() -> None:
    atoms = SignatureAtoms()

    first = atoms.signature_for(RawLine.from_bytes(b"1a2b3\n"))
    second = atoms.signature_for(RawLine.from_bytes(b"40a5b60\n"))
    other = atoms.signature_for(RawLine.from_bytes(b"1b2a3\n"))

    assert first is second
    assert first == second
    assert first is not other
    assert first != other
    assert len(atoms) == 2
    assert b"ab" in atoms
    assert str(first) == "ab"


def test_signature_handles_are_not_equal_across_stores() -> None:
    sig_a = SignatureAtoms().intern(b"ab")
    sig_b = SignatureAtoms().intern(b"ab")

    assert sig_a is not sig_b
    assert sig_a.data == sig_b.data


def test_decode_row_accepts_long_zero_padding() -> None:
    line = RawLine.from_bytes(b"0" * 5000 + b"7a1\n")

    assert decode_row(line) == (bytes([7, 1]), 2)


def test_decode_row_all_zero_run_is_zero() -> None:
    assert decode_row(RawLine.from_bytes(b"0" * 6000 + b",000\n")) == (bytes([0, 0]), 2)


def test_decode_row_rejects_long_run_without_echoing_it() -> None:
    with pytest.raises(MalformedInputError, match="exceeds 255") as excinfo:
        decode_row(RawLine.from_bytes(b"9" * 5000 + b"\n"))
    assert len(str(excinfo.value)) < 200
