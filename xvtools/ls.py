"""List files and directories with their type, inode number and size."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from xvtools.ulib import FileType, Stat, stat

DIRSIZ = 14
_BUFSIZE = 512


def fmtname(path: str) -> str:
    """Return the last component of ``path``, blank-padded to DIRSIZ."""
    name = path[path.rfind("/") + 1:]
    return name if len(name) >= DIRSIZ else name.ljust(DIRSIZ)


def _line(path: str, st: Stat) -> str:
    return f"{fmtname(path)} {int(st.type)} {st.ino} {st.size}\n"


def ls(path: str, out: TextIO) -> None:
    """Write a listing of ``path`` to ``out``; errors opening it go to stderr."""
    try:
        st = stat(path)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    if st.type != FileType.DIR:
        out.write(_line(path, st))
        return
    if len(path) + 1 + DIRSIZ + 1 > _BUFSIZE:
        out.write("ls: path too long\n")
        return
    try:
        names = sorted(os.listdir(path))
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    for name in [".", "..", *names]:
        entry = f"{path}/{name}"
        try:
            est = stat(entry)
        except OSError:
            out.write(f"ls: cannot stat {entry}\n")
            continue
        out.write(_line(entry, est))


def main(argv: list[str] | None = None) -> int:
    """List the named paths, or the current directory."""
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        ls(path, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())