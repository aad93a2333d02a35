"""Terminate processes by pid."""

from __future__ import annotations

import os
import signal
import sys

from xvtools.ulib import atoi

_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


def main(argv: list[str] | None = None) -> int:
    """Kill each pid given; pids that cannot be killed are ignored."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: kill pid...\n")
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue
        try:
            os.kill(pid, _SIGNAL)
        except OSError:
            pass
    return 0


if __name__ == "__main__":
    sys.exit(main())