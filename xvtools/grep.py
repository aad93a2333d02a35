"""Simple grep supporting only the ^ . * $ operators."""

from __future__ import annotations

import sys
from typing import TextIO

_BUFSIZE = 1024


def match(re: str, text: str) -> bool:
    """Search for ``re`` anywhere in ``text``."""
    if re.startswith("^"):
        return matchhere(re[1:], text)
    # The empty string at the end must be tried too.
    return any(matchhere(re, text[i:]) for i in range(len(text) + 1))


def matchhere(re: str, text: str) -> bool:
    """Search for ``re`` at the beginning of ``text``."""
    if not re:
        return True
    if len(re) >= 2 and re[1] == "*":
        return matchstar(re[0], re[2:], text)
    if re == "$":
        return text == ""
    if text and (re[0] == "." or re[0] == text[0]):
        return matchhere(re[1:], text[1:])
    return False


def matchstar(c: str, re: str, text: str) -> bool:
    """Search for ``c*re`` at the beginning of ``text``."""
    while True:
        if matchhere(re, text):
            return True
        if not text:
            return False
        ch, text = text[0], text[1:]
        if not (ch == c or c == "."):
            return False


def grep(pattern: str, stream: TextIO, out: TextIO) -> None:
    """Write each newline-terminated line of ``stream`` that matches ``pattern``.

    Input is read through a buffer of 1024 characters; a final line without a
    newline is not examined, and reading stops once a line fills the buffer.
    """
    pending = ""
    while True:
        room = _BUFSIZE - len(pending) - 1
        if room <= 0:
            break
        chunk = stream.read(room)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")


def main(argv: list[str] | None = None) -> int:
    """Run grep over the named files, or standard input; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern, files = args[0], args[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for path in files:
        try:
            stream = open(path, encoding="utf-8", errors="replace", newline="")
        except OSError:
            sys.stdout.write(f"grep: cannot open {path}\n")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())