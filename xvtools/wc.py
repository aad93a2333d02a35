"""Count lines, words and bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import BinaryIO

_BUFSIZE = 512
# NUL is a separator as well.
_SEPARATORS = b" \r\t\n\v\0"


@dataclass(frozen=True)
class Counts:
    """Line, word and byte counts."""

    lines: int
    words: int
    chars: int


def wc(stream: BinaryIO) -> Counts:
    """Count the lines, words and bytes in ``stream``."""
    lines = words = chars = 0
    inword = False
    while chunk := stream.read(_BUFSIZE):
        chars += len(chunk)
        lines += chunk.count(b"\n")
        for byte in chunk:
            if byte in _SEPARATORS:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines, words, chars)


def _report(stream: BinaryIO, name: str) -> bool:
    try:
        counts = wc(stream)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    sys.stdout.write(f"{counts.lines} {counts.words} {counts.chars} {name}\n")
    return True


def main(argv: list[str] | None = None) -> int:
    """Count the named files, or standard input."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        return 0 if _report(sys.stdin.buffer, "") else 1
    for path in args:
        try:
            stream = open(path, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {path}\n")
            return 1
        with stream:
            if not _report(stream, path):
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())