"""Remove files and empty directories."""

from __future__ import annotations

import os
import sys


def _unlink(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def main(argv: list[str] | None = None) -> int:
    """Remove each named path, stopping at the first failure."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("Usage: rm files...\n")
        return 1
    for path in args:
        try:
            _unlink(path)
        except OSError:
            sys.stderr.write(f"rm: {path} failed to delete\n")
            break
    return 0


if __name__ == "__main__":
    sys.exit(main())