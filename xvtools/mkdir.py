"""Create directories."""

from __future__ import annotations

import os
import sys


def main(argv: list[str] | None = None) -> int:
    """Create each named directory, stopping at the first failure."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("Usage: mkdir files...\n")
        return 1
    for path in args:
        try:
            os.mkdir(path)
        except OSError:
            sys.stderr.write(f"mkdir: {path} failed to create\n")
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())