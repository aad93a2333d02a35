"""Minimal printf-style formatting with %d, %u, %x, %p, %s and %%."""

from __future__ import annotations

import re
import sys
from typing import Any, Iterator, TextIO

_DIGITS = "0123456789ABCDEF"
_UINT32 = 0xFFFFFFFF
_UINT64 = 0xFFFFFFFFFFFFFFFF

_DIRECTIVE = re.compile(r"%(ll[dux]|l[dux]|.)?", re.DOTALL)


def _to_int32(value: int) -> int:
    value &= _UINT32
    return value - (1 << 32) if value & 0x80000000 else value


def _printint(value: int, base: int, signed: bool) -> str:
    xx = _to_int32(value)
    negative = signed and xx < 0
    x = (-xx if negative else xx) & _UINT32
    digits = []
    while True:
        digits.append(_DIGITS[x % base])
        x //= base
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _printptr(value: int) -> str:
    return f"0x{value & _UINT64:016X}"


def _next_arg(args: Iterator[Any]) -> Any:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def format_string(fmt: str, *args: Any) -> str:
    """Format ``fmt`` the way the small user-level printf does.

    Integer conversions work on 32-bit values, hex digits are upper case,
    %p prints 16 hex digits, and unknown directives are echoed verbatim.
    """
    remaining = iter(args)

    def directive(m: re.Match[str]) -> str:
        spec = m.group(1)
        if spec is None:
            return ""
        conv = spec[-1] if len(spec) > 1 else spec
        if conv == "d" and spec.rstrip("d") in ("", "l", "ll"):
            return _printint(int(_next_arg(remaining)), 10, True)
        if conv == "u" and spec.rstrip("u") in ("", "l", "ll"):
            return _printint(int(_next_arg(remaining)), 10, False)
        if conv == "x" and spec.rstrip("x") in ("", "l", "ll"):
            return _printint(int(_next_arg(remaining)), 16, False)
        if spec == "p":
            return _printptr(int(_next_arg(remaining)))
        if spec == "s":
            s = _next_arg(remaining)
            return "(null)" if s is None else str(s)
        if spec == "%":
            return "%"
        # Unknown sequence: print it to draw attention.
        return "%" + spec[0] + spec[1:]

    def sub(m: re.Match[str]) -> str:
        spec = m.group(1)
        if spec is not None and len(spec) > 1 and spec[0] == "l":
            return directive(m)
        return directive(m)

    out = []
    pos = 0
    for m in _DIRECTIVE.finditer(fmt):
        out.append(fmt[pos:m.start()])
        spec = m.group(1)
        if spec is not None and len(spec) > 1 and spec[-1] not in "dux":
            out.append("%" + spec[0])
            pos = m.start() + 2
            continue
        out.append(sub(m))
        pos = m.end()
    out.append(fmt[pos:])
    return "".join(out)


def fprintf(stream: TextIO, fmt: str, *args: Any) -> None:
    """Write formatted text to ``stream``."""
    stream.write(format_string(fmt, *args))


def printf(fmt: str, *args: Any) -> None:
    """Write formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)