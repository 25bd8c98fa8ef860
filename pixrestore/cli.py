"""Command line entry point: restore a corrupted plain dump to a P5 image."""
from __future__ import annotations

import argparse
import contextlib
import logging
import sys
from typing import BinaryIO, Iterator, List, Optional

from .errors import InputOpenError, RestorationError
from .restoration import RestorationEngine, write_image

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def open_input(path: Optional[str]) -> Iterator[BinaryIO]:
    if path is None:
        yield sys.stdin.buffer
        return
    try:
        fp = open(path, "rb")
    except OSError as exc:
        raise InputOpenError(f"cannot open {path}: {exc.strerror or exc}") from exc
    with fp:
        yield fp


@contextlib.contextmanager
def open_output(path: Optional[str]) -> Iterator[BinaryIO]:
    if path is None:
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as fp:
        yield fp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixrestore",
        description="Restore a corrupted plain pixel dump to a raw PGM image",
    )
    parser.add_argument("input", nargs="?", help="Corrupted plain file (default: stdin)")
    parser.add_argument("-o", "--output", help="Output .pgm path (default: stdout)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        with open_input(args.input) as stream:
            result = RestorationEngine(stream).run()
        if result is None:
            return 0
        with open_output(args.output) as output:
            write_image(result, output)
    except (RestorationError, OSError) as exc:
        print(f"pixrestore: {exc}", file=sys.stderr)
        return 1

    stats = result.stats
    logger.info(
        "Done: %dx%d, %d of %d lines were noise",
        stats.width, stats.height, stats.noise_lines, stats.lines_read,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
