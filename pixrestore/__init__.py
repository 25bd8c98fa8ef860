"""Restore corrupted plain-text pixel dumps to raw grayscale images."""
from __future__ import annotations

from .errors import (
    AllocationError,
    ImageWriteError,
    InputOpenError,
    MalformedInputError,
    RestorationError,
    StreamReadError,
)
from .line_reader import RawLine, read_line
from .plain_codec import Signature, SignatureAtoms, decode_row, signature_of
from .restoration import RestorationEngine, RestoreStats, restore, write_image

__version__ = "1.0.0"

__all__ = [
    "AllocationError",
    "ImageWriteError",
    "InputOpenError",
    "MalformedInputError",
    "RawLine",
    "RestorationEngine",
    "RestorationError",
    "RestoreStats",
    "Signature",
    "SignatureAtoms",
    "StreamReadError",
    "decode_row",
    "read_line",
    "restore",
    "signature_of",
    "write_image",
]
