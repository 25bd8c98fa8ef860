"""Raw grayscale (P5) image emitter for restored rows."""
from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, BinaryIO, Dict

import numpy as np
from PIL import Image

from .errors import ImageWriteError, MalformedInputError

if TYPE_CHECKING:
    from .restoration import RowList

logger = logging.getLogger(__name__)

# --- RAW PGM CONFIG ---
MAGIC = b"P5"
MAX_VALUE = 255

EXPORT_FORMATS: Dict[str, Dict[str, str]] = {
    "pgm": {"mime": "image/x-portable-graymap", "pil": "PPM"},
    "png": {"mime": "image/png", "pil": "PNG"},
    "bmp": {"mime": "image/bmp", "pil": "BMP"},
}


def build_frame(rows: "RowList", width: int) -> np.ndarray:
    """Drain ``rows`` front to back into a (height, width) uint8 frame."""
    height = len(rows)
    frame = np.zeros((height, width), dtype=np.uint8)

    for y in range(height):
        row = rows.popleft()
        if len(row) != width:
            raise MalformedInputError(f"row {y} has {len(row)} pixels, expected {width}")
        frame[y] = np.frombuffer(row, dtype=np.uint8)
    return frame


def emit(rows: "RowList", width: int, output: BinaryIO) -> int:
    """Write the P5 header and every row to ``output``; returns the height."""
    frame = build_frame(rows, width)
    height = frame.shape[0]

    try:
        # Pillow's PPM writer emits "P5\n<w> <h>\n255\n" for 8-bit grayscale.
        Image.fromarray(frame).save(output, format="PPM")
    except OSError as exc:
        raise ImageWriteError(f"cannot write restored image: {exc}") from exc

    logger.info("Wrote %dx%d raw grayscale image", width, height)
    return height


def render(rows: "RowList", width: int, fmt: str = "pgm") -> io.BytesIO:
    """Encode the rows into an in-memory image in one of ``EXPORT_FORMATS``."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"unsupported export format: {fmt}")

    frame = build_frame(rows, width)
    buffer = io.BytesIO()
    Image.fromarray(frame).save(buffer, format=EXPORT_FORMATS[fmt]["pil"])
    buffer.seek(0)
    return buffer
