"""Concatenate files to standard output."""

from __future__ import annotations

import sys
from typing import BinaryIO

_BUFSIZE = 512


def cat(src: BinaryIO, dst: BinaryIO) -> None:
    """Copy ``src`` to ``dst``; raises OSError on a read or write failure."""
    while True:
        try:
            chunk = src.read(_BUFSIZE)
        except OSError as exc:
            raise OSError("cat: read error") from exc
        if not chunk:
            return
        try:
            written = dst.write(chunk)
        except OSError as exc:
            raise OSError("cat: write error") from exc
        if written is not None and written != len(chunk):
            raise OSError("cat: write error")


def main(argv: list[str] | None = None) -> int:
    """Copy the named files, or standard input, to standard output."""
    args = sys.argv[1:] if argv is None else list(argv)
    sys.stdout.flush()
    out = sys.stdout.buffer
    try:
        if not args:
            cat(sys.stdin.buffer, out)
            return 0
        for path in args:
            try:
                stream = open(path, "rb")
            except OSError:
                sys.stderr.write(f"cat: cannot open {path}\n")
                return 1
            with stream:
                cat(stream, out)
    except OSError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    finally:
        out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())