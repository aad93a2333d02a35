"""Make a hard link."""

from __future__ import annotations

import os
import sys


def main(argv: list[str] | None = None) -> int:
    """Link ``old`` to ``new``; a failed link is reported but not fatal."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        sys.stderr.write("Usage: ln old new\n")
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        sys.stderr.write(f"link {old} {new}: failed\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())