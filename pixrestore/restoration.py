"""
Restoration engine: finds the repeating signature and collects genuine rows.

Every line of a corrupted dump mixes digit runs with non-digit bytes. Noise
lines use a fresh arrangement of non-digit bytes each time, while every
genuine row repeats one fixed arrangement. The first signature to occur twice
is therefore the genuine one; both occurrences and every later match become
image rows, in stream order.
"""
from __future__ import annotations

import enum
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import BinaryIO, Deque, Dict, Iterator, Optional, Tuple

from .errors import MalformedInputError
from .line_reader import INITIAL_CAPACITY, RawLine, iter_lines
from .pgm_writer import emit
from .plain_codec import Signature, SignatureAtoms, decode_row

logger = logging.getLogger(__name__)


class RestoreState(enum.Enum):
    SCANNING = "scanning"
    COLLECTING = "collecting"
    EMIT = "emit"
    EXHAUSTED = "exhausted"


class SignatureTable:
    """Owns the most recent raw line seen for each signature."""

    def __init__(self) -> None:
        self._lines: Dict[Signature, RawLine] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def put(self, sig: Signature, line: RawLine) -> Optional[RawLine]:
        """Store ``line``; hand back the line it displaced, if any."""
        previous = self._lines.get(sig)
        self._lines[sig] = line
        return previous

    def get(self, sig: Signature) -> Optional[RawLine]:
        return self._lines.get(sig)

    def take(self, sig: Signature) -> Optional[RawLine]:
        return self._lines.pop(sig, None)

    def release(self) -> None:
        for line in self._lines.values():
            line.release()
        self._lines.clear()


class RowList:
    """Decoded pixel rows in stream order."""

    def __init__(self) -> None:
        self._rows: Deque[bytes] = deque()

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._rows)

    def append(self, row: bytes) -> None:
        self._rows.append(row)

    def popleft(self) -> bytes:
        return self._rows.popleft()

    def release(self) -> None:
        self._rows.clear()


@dataclass
class RestoreStats:
    width: int
    height: int
    lines_read: int
    noise_lines: int
    distinct_signatures: int
    genuine_signature: str
    processing_seconds: float

    def to_headers(self) -> Tuple[Tuple[str, str], ...]:
        return (
            ("X-Restore-Width", str(self.width)),
            ("X-Restore-Height", str(self.height)),
            ("X-Restore-Lines", str(self.lines_read)),
            ("X-Restore-Noise", str(self.noise_lines)),
            ("X-Restore-Signatures", str(self.distinct_signatures)),
            ("X-Restore-Seconds", f"{self.processing_seconds:.2f}"),
        )


@dataclass
class RestoreResult:
    rows: RowList
    width: int
    stats: RestoreStats


class RestorationEngine:
    """One restoration run over one input stream."""

    def __init__(self, stream: BinaryIO, initial_capacity: int = INITIAL_CAPACITY):
        self._lines = iter_lines(stream, initial_capacity)
        self.atoms = SignatureAtoms()
        self.table = SignatureTable()
        self.rows = RowList()
        self.state = RestoreState.SCANNING
        self.genuine: Optional[Signature] = None
        self.width: Optional[int] = None
        self.lines_read = 0

    def _read(self) -> Optional[RawLine]:
        line = next(self._lines, None)
        if line is not None:
            self.lines_read += 1
        return line

    def run(self) -> Optional[RestoreResult]:
        """Consume the stream; ``None`` when no signature ever repeats."""
        start = time.perf_counter()
        try:
            if self._scan():
                self._collect()
        except BaseException:
            self.rows.release()
            raise
        finally:
            self.table.release()

        if self.genuine is None:
            self.state = RestoreState.EXHAUSTED
            logger.warning(
                "No repeating signature in %d lines; nothing to restore", self.lines_read
            )
            return None

        self.state = RestoreState.EMIT
        stats = RestoreStats(
            width=self.width,
            height=len(self.rows),
            lines_read=self.lines_read,
            noise_lines=self.lines_read - len(self.rows),
            distinct_signatures=len(self.atoms),
            genuine_signature=str(self.genuine),
            processing_seconds=time.perf_counter() - start,
        )
        logger.info(
            "Restored %dx%d image from %d lines (%d noise)",
            stats.width, stats.height, stats.lines_read, stats.noise_lines,
        )
        return RestoreResult(rows=self.rows, width=self.width, stats=stats)

    # --- SCANNING ---
    def _scan(self) -> bool:
        while True:
            line = self._read()
            if line is None:
                return False

            sig = self.atoms.signature_for(line)
            original = self.table.put(sig, line)
            if original is None:
                continue

            # Second sighting: this signature marks the genuine rows.
            self.genuine = sig
            self.state = RestoreState.COLLECTING
            self.table.take(sig)
            logger.info(
                "Genuine signature found at line %d (%d non-digit bytes)",
                self.lines_read, len(sig),
            )
            self._accept_pair(original, line)
            return True

    def _accept_pair(self, original: RawLine, current: RawLine) -> None:
        try:
            first, first_width = decode_row(original)
            second, second_width = decode_row(current)
        finally:
            original.release()
            current.release()

        if first_width != second_width:
            raise MalformedInputError(
                f"genuine rows disagree on width: {first_width} vs {second_width}"
            )
        if first_width == 0:
            raise MalformedInputError("genuine rows carry no pixel values")

        self.width = first_width
        self.rows.append(first)
        self.rows.append(second)

    # --- COLLECTING ---
    def _collect(self) -> None:
        while True:
            line = self._read()
            if line is None:
                return
            try:
                sig = self.atoms.signature_for(line)
                if sig is not self.genuine:
                    logger.debug("Line %d is noise", self.lines_read)
                    continue
                row, width = decode_row(line)
                if width != self.width:
                    raise MalformedInputError(
                        f"line {self.lines_read} has {width} pixels, expected {self.width}"
                    )
                self.rows.append(row)
            finally:
                line.release()


def write_image(result: RestoreResult, output: BinaryIO) -> RestoreStats:
    """Emit a finished run to ``output``; the rows are released even if writing fails."""
    try:
        emit(result.rows, result.width, output)
    finally:
        result.rows.release()
    return result.stats


def restore(
    stream: BinaryIO,
    output: BinaryIO,
    initial_capacity: int = INITIAL_CAPACITY,
) -> Optional[RestoreStats]:
    """Run one restoration and write the image; nothing is written if none is found."""
    result = RestorationEngine(stream, initial_capacity).run()
    if result is None:
        return None
    return write_image(result, output)
