"""Small user-level helpers: string conversion, line reading and stat."""

from __future__ import annotations

import enum
import os
import stat as _stat
from dataclasses import dataclass
from itertools import zip_longest
from typing import TextIO


class FileType(enum.IntEnum):
    """Kinds of file-system objects."""

    DIR = 1
    FILE = 2
    DEVICE = 3


@dataclass(frozen=True)
class Stat:
    """Status of a file."""

    dev: int
    ino: int
    type: FileType
    nlink: int
    size: int


def atoi(s: str) -> int:
    """Convert the leading decimal digits of ``s``; no sign, no whitespace."""
    n = 0
    for ch in s:
        if not "0" <= ch <= "9":
            break
        n = n * 10 + ord(ch) - ord("0")
    return n


def _cbytes(s: str | bytes) -> bytes:
    data = s.encode() if isinstance(s, str) else bytes(s)
    return data.split(b"\0", 1)[0]


def strcmp(p: str | bytes, q: str | bytes) -> int:
    """Compare like C strcmp: difference of the first differing bytes."""
    for x, y in zip_longest(_cbytes(p), _cbytes(q), fillvalue=0):
        if x != y:
            return x - y
    return 0


def gets(stream: TextIO, max: int) -> str:
    """Read at most ``max - 1`` characters, stopping after a newline or CR."""
    chars: list[str] = []
    while len(chars) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        chars.append(c)
        if c in "\n\r":
            break
    return "".join(chars)


def stat(path: str | os.PathLike[str]) -> Stat:
    """Return the status of ``path``; raises OSError if it cannot be opened."""
    st = os.stat(path)
    if _stat.S_ISDIR(st.st_mode):
        kind = FileType.DIR
    elif _stat.S_ISREG(st.st_mode):
        kind = FileType.FILE
    else:
        kind = FileType.DEVICE
    return Stat(dev=st.st_dev, ino=st.st_ino, type=kind, nlink=st.st_nlink, size=st.st_size)