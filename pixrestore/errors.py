"""Failure types raised while restoring a corrupted plain dump."""
from __future__ import annotations


class RestorationError(RuntimeError):
    """Raised when a restoration run cannot produce an image."""


class AllocationError(RestorationError):
    """A line buffer or the signature store could not grow."""


class StreamReadError(RestorationError):
    """The input stream reported a read error (not end of stream)."""


class ImageWriteError(RestorationError):
    """The restored image could not be written out."""


class InputOpenError(RestorationError):
    """The named input file could not be opened for reading."""


class MalformedInputError(RestorationError):
    """The corrupted dump breaks the digit-run grammar or the image geometry."""
